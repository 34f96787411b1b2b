"""Resolve the published name, side and comment for each matched pair.

Rules, for a pair (primary A, secondary B):

- name: B's name when present, replaced by the correction table entry for A's
  intermediate identifier if one exists; otherwise A's name (corrections are
  not applied to A's name).
- comment: B's comment when B is named, A's comment otherwise; records
  without the comment capability contribute an empty comment.
- side: A's side when A carries one, `Side.BOTH` otherwise.
- pairs where neither side has a name are dropped.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping as TMapping, NamedTuple, Optional

from .matching import MatchedMappings, MatchedPair, sorted_pairs
from .models.mappings import HasComment, HasSide, Mapping, Side

logger = logging.getLogger(__name__)

Corrections = TMapping[str, str]

DEFAULT_CORRECTIONS: Corrections = MappingProxyType(
    {
        "func_213454_em": "wakeUpInternal",  # FoxEntity
        "field_77356_a": "protectionType",  # ProtectionEnchantment
        "func_225486_c": "getTemperatureCached",  # Biome
        "func_227833_h_": "resetUnchecked",  # BufferBuilder
        "func_227480_b_": "findPathNodeType",  # WalkNodeProcessor
        "func_228676_c_": "create",  # RenderType$Type
    }
)


class ResolvedMapping(NamedTuple):
    intermediate: str
    name: str
    side: int
    comment: str


def build_corrections(extra: Optional[TMapping[str, str]] = None) -> Corrections:
    """Return an immutable correction table, `extra` entries taking precedence.

    Keys and values are stripped; entries left blank are ignored.
    """
    merged: Dict[str, str] = {}
    for source in (DEFAULT_CORRECTIONS, extra or {}):
        for key, value in source.items():
            key, value = str(key).strip(), str(value).strip()
            if not key or not value:
                logger.debug("Ignoring blank correction entry %r=%r", key, value)
                continue
            merged[key] = value
    return MappingProxyType(merged)


def get_comment(mapping: Mapping) -> Optional[str]:
    if isinstance(mapping, HasComment):
        return mapping.comment
    return None


def get_side(mapping: Mapping) -> Side:
    if isinstance(mapping, HasSide):
        return mapping.side
    return Side.BOTH


def is_named(pair: MatchedPair) -> bool:
    return pair.primary.name is not None or pair.secondary.name is not None


def resolve(pair: MatchedPair, corrections: Corrections = DEFAULT_CORRECTIONS) -> ResolvedMapping:
    """Resolve one matched pair into its published row.

    The secondary record's name wins when present, after applying any
    correction keyed by the intermediate. Otherwise the primary name is kept.
    The comment follows whichever record supplied the name; the side always
    comes from the primary record.

    Args:
        pair: Matched primary and secondary records.
        corrections: Intermediate-keyed name overrides.

    Returns:
        The row with empty strings for a missing name or comment.
    """
    primary, secondary = pair.primary, pair.secondary
    if secondary.name is not None:
        name = corrections.get(pair.intermediate, secondary.name)
        comment = get_comment(secondary)
    else:
        name = primary.name
        comment = get_comment(primary)
    return ResolvedMapping(
        intermediate=pair.intermediate,
        name=name or "",
        side=int(get_side(primary)),
        comment=comment or "",
    )


def resolve_all(
    matches: MatchedMappings, corrections: Corrections = DEFAULT_CORRECTIONS
) -> List[ResolvedMapping]:
    """Resolve every named pair, in publishing order."""
    return [resolve(pair, corrections) for pair in sorted_pairs(matches) if is_named(pair)]


def merge_fallback(direct: MatchedMappings, fallback: MatchedMappings) -> MatchedMappings:
    """Fill keys missing from `direct` with pairs from `fallback`.

    A direct match always wins over a fallback pair for the same key.

    Args:
        direct: Signature matches for the current version.
        fallback: Pairs bridged by intermediate from a legacy export.

    Returns:
        A new mapping; neither input is modified.
    """
    merged: MatchedMappings = dict(direct)
    for key, pair in fallback.items():
        merged.setdefault(key, pair)
    return merged


__all__ = [
    "Corrections",
    "DEFAULT_CORRECTIONS",
    "ResolvedMapping",
    "build_corrections",
    "get_comment",
    "get_side",
    "is_named",
    "merge_fallback",
    "resolve",
    "resolve_all",
]
