"""Join two mapping databases into an ordered set of matched pairs.

Two strategies are offered:

- `find_matching` joins by obfuscated signature (`owner.original` for fields,
  `owner.original` + descriptor for methods). Both databases must describe the
  same obfuscated game version.
- `find_matching_by_intermediate` joins by intermediate identifier, bridging
  two different obfuscated versions that share an SRG lineage.

Both return a `MatchedMappings` dict keyed by the primary record's
intermediate identifier. `sorted_pairs` yields the pairs in publishing order:
numeric SRG id ascending, unnumbered identifiers last, ties by the full
identifier. Absence of a match is never an error.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .models.mappings import Mapping, MappingDatabase, MappingKind, MappingTable, NameType

_SRG_ID = re.compile(r"^(?:field|func|p)_(\d+)")
_UNNUMBERED = float("inf")


@dataclass(frozen=True)
class MatchedPair:
    primary: Mapping
    secondary: Mapping

    @property
    def intermediate(self) -> str:
        return self.primary.intermediate or ""


MatchedMappings = Dict[str, MatchedPair]


def get_srg_id(intermediate: Optional[str]) -> Optional[int]:
    """Return the numeric id embedded in an SRG name, e.g. 5 for `func_5_bar`."""
    if not intermediate:
        return None
    m = _SRG_ID.match(intermediate)
    if m is None:
        return None
    return int(m.group(1))


def srg_sort_key(intermediate: str) -> Tuple[float, str]:
    srg_id = get_srg_id(intermediate)
    return (_UNNUMBERED if srg_id is None else srg_id, intermediate)


def sorted_pairs(matches: MatchedMappings) -> List[MatchedPair]:
    return [matches[key] for key in sorted(matches, key=srg_sort_key)]


def get_signature(mapping: Mapping) -> str:
    signature = f"{mapping.owner}.{mapping.original}"
    if mapping.kind is MappingKind.METHOD:
        signature += mapping.descriptor
    return signature


def by_signature(table: MappingTable) -> Dict[str, Mapping]:
    """Index every record of a table by signature, first record wins."""
    ret: Dict[str, Mapping] = {}
    for records in table.values():
        for record in records:
            ret.setdefault(get_signature(record), record)
    return ret


def find_matching(kind: MappingKind, a: MappingDatabase, b: MappingDatabase) -> MatchedMappings:
    """Join `a` and `b` on obfuscated signature.

    Only records of `a` carrying an intermediate identifier can be keyed, so
    records without one are skipped.

    Args:
        kind: Mapping kind whose tables are joined.
        a: Primary database, usually the SRG intermediates.
        b: Secondary database supplying names.

    Returns:
        Pairs keyed by the primary record's intermediate identifier.
    """
    a_by_signature = by_signature(a.get_table(NameType.ORIGINAL, kind))
    b_by_signature = by_signature(b.get_table(NameType.ORIGINAL, kind))
    ret: MatchedMappings = {}
    for signature, primary in a_by_signature.items():
        secondary = b_by_signature.get(signature)
        if secondary is None or not primary.intermediate:
            continue
        ret[primary.intermediate] = MatchedPair(primary, secondary)
    return ret


def find_matching_by_intermediate(
    kind: MappingKind, a: MappingDatabase, b: MappingDatabase
) -> MatchedMappings:
    """Join `a` and `b` on shared intermediate identifier.

    When several records share an identifier only the first from each side is
    paired; the rest are dropped.
    """
    a_by_srg = a.get_table(NameType.INTERMEDIATE, kind)
    b_by_srg = b.get_table(NameType.INTERMEDIATE, kind)
    ret: MatchedMappings = {}
    for key, a_mappings in a_by_srg.items():
        b_mappings = b_by_srg.get(key)
        if a_mappings and b_mappings:
            ret[key] = MatchedPair(a_mappings[0], b_mappings[0])
    return ret


__all__ = [
    "MatchedMappings",
    "MatchedPair",
    "by_signature",
    "find_matching",
    "find_matching_by_intermediate",
    "get_signature",
    "get_srg_id",
    "sorted_pairs",
    "srg_sort_key",
]
