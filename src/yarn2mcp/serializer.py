"""Render resolved mappings as MCP-style CSV tables.

The format is the one consumed by ForgeGradle: a fixed header row, then one
`searge,name,side,desc` row per mapping, CRLF separated with no trailing line
break. Values are joined verbatim; embedded commas are not quoted, so a name
or comment containing a comma corrupts its row.
"""
from __future__ import annotations

from typing import Iterable, List

from .naming import ResolvedMapping

EOL = "\r\n"
HEADER = "searge,name,side,desc"


def to_csv_row(mapping: ResolvedMapping) -> str:
    return ",".join((mapping.intermediate, mapping.name, str(mapping.side), mapping.comment))


def render_table(mappings: Iterable[ResolvedMapping]) -> str:
    rows = [to_csv_row(m) for m in mappings]
    return HEADER + EOL + EOL.join(rows)


def parse_table(text: str) -> List[ResolvedMapping]:
    """Parse a table produced by `render_table` back into rows."""
    lines = text.split(EOL)
    if not lines or lines[0] != HEADER:
        raise ValueError(f"Not a mapping table: expected header {HEADER!r}")
    ret: List[ResolvedMapping] = []
    for line in lines[1:]:
        if not line:
            continue
        intermediate, name, side, comment = line.split(",", 3)
        ret.append(ResolvedMapping(intermediate, name, int(side), comment))
    return ret


__all__ = ["EOL", "HEADER", "parse_table", "render_table", "to_csv_row"]
