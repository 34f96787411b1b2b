"""Pydantic models for obfuscated symbol mapping records.

These models give a typed, validated structure to the two mapping lineages the
publisher reconciles:

- MCP lineage: `IntermediateMapping` rows (SRG data: obfuscated name to the
  version-stable `func_1234_a` style identifier) and `McpMapping` rows (the
  same plus a human name, side and description).
- Yarn lineage: `YarnMapping` rows (obfuscated name to a human name and an
  optional javadoc comment).

Optional capabilities are modelled as runtime-checkable protocols
(`HasSide`, `HasComment`) rather than as a class hierarchy, so consumers test
for what a record can do instead of what it inherits from.
"""
from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from pydantic import BaseModel, ConfigDict


class MappingKind(str, Enum):
    """Kind of symbol a mapping record describes."""

    CLASS = "class"
    FIELD = "field"
    METHOD = "method"

    @property
    def csv_name(self) -> str:
        """File stem used for this kind inside a published archive."""
        return f"{self.value}s"


SUPPORTED_KINDS: Tuple[MappingKind, ...] = (MappingKind.FIELD, MappingKind.METHOD)


class NameType(str, Enum):
    """Name domain a lookup table is keyed by."""

    ORIGINAL = "original"
    INTERMEDIATE = "intermediate"
    NAME = "name"


class Side(IntEnum):
    """Distribution a record applies to; the ordinal is written to CSV."""

    CLIENT = 0
    SERVER = 1
    BOTH = 2


@runtime_checkable
class HasSide(Protocol):
    side: Side


@runtime_checkable
class HasComment(Protocol):
    comment: Optional[str]


class Mapping(BaseModel):
    """Base mapping record shared by every lineage.

    `owner` and `descriptor` are expressed in the ORIGINAL (obfuscated) name
    domain of the record's source version. `descriptor` is empty for fields.
    """

    model_config = ConfigDict(frozen=True)

    kind: MappingKind
    owner: str
    original: str
    intermediate: Optional[str] = None
    name: Optional[str] = None
    descriptor: str = ""

    def key(self, name_type: NameType) -> Optional[str]:
        if name_type is NameType.ORIGINAL:
            return self.original
        if name_type is NameType.INTERMEDIATE:
            return self.intermediate
        return self.name


class IntermediateMapping(Mapping):
    """SRG record; always carries an intermediate identifier."""

    intermediate: str


class McpMapping(IntermediateMapping):
    """MCP export row with side and description."""

    side: Side = Side.BOTH
    comment: Optional[str] = None


class YarnMapping(Mapping):
    """Yarn row; the comment is the symbol's javadoc, if any."""

    comment: Optional[str] = None


MappingTable = Dict[str, List[Mapping]]


class MappingDatabase:
    """Versioned, read-only collection of mapping records.

    Lookup tables are built once per (name domain, kind) on first access and
    keep source order inside each key's list, so callers that take the first
    record of a key get the first record the source supplied. The database
    never changes after construction, which makes it safe to share between
    concurrently running joins.
    """

    def __init__(self, version: str, records: Iterable[Mapping]):
        self.version = version
        self._records: Tuple[Mapping, ...] = tuple(records)
        self._tables: Dict[Tuple[NameType, MappingKind], MappingTable] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"MappingDatabase(version={self.version!r}, records={len(self._records)})"

    @property
    def records(self) -> Sequence[Mapping]:
        return self._records

    def get_table(self, name_type: NameType, kind: MappingKind) -> MappingTable:
        cache_key = (name_type, kind)
        table = self._tables.get(cache_key)
        if table is None:
            table = {}
            for record in self._records:
                if record.kind is not kind:
                    continue
                key = record.key(name_type)
                if key is None:
                    continue
                table.setdefault(key, []).append(record)
            self._tables[cache_key] = table
        return table


__all__ = [
    "HasComment",
    "HasSide",
    "IntermediateMapping",
    "Mapping",
    "MappingDatabase",
    "MappingKind",
    "MappingTable",
    "McpMapping",
    "NameType",
    "SUPPORTED_KINDS",
    "Side",
    "YarnMapping",
]
