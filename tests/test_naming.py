from __future__ import annotations

import pytest
from helpers import mcp, srg, yarn

from yarn2mcp.matching import MatchedPair
from yarn2mcp.models.mappings import MappingKind, Side
from yarn2mcp.naming import (
    DEFAULT_CORRECTIONS,
    ResolvedMapping,
    build_corrections,
    merge_fallback,
    resolve,
    resolve_all,
)


def _pair(primary, secondary) -> MatchedPair:
    return MatchedPair(primary, secondary)


def test_secondary_name_and_comment_used():
    row = resolve(_pair(srg("func_1_a", "a"), yarn("a", "doStuff", comment="Does stuff")))
    assert row == ResolvedMapping("func_1_a", "doStuff", int(Side.BOTH), "Does stuff")


def test_correction_overrides_secondary_name():
    corrections = build_corrections({"func_1_a": "fixedName"})
    row = resolve(_pair(srg("func_1_a", "a"), yarn("a", "wrongName")), corrections)
    assert row.name == "fixedName"


def test_builtin_correction_applies():
    row = resolve(_pair(srg("func_228676_c_", "a"), yarn("a", "makeType")))
    assert row.name == "create"


def test_fallback_to_primary_name_ignores_corrections():
    corrections = build_corrections({"func_9_x": "corrected"})
    primary = mcp("func_9_x", "mcpName", comment="from mcp", side=Side.CLIENT)
    row = resolve(_pair(primary, yarn("a", None, comment="ignored")), corrections)
    assert row.name == "mcpName"
    assert row.comment == "from mcp"
    assert row.side == int(Side.CLIENT)


def test_comment_empty_without_comment_capability():
    row = resolve(_pair(srg("func_1_a", "a"), srg("func_1_a", "a").model_copy(update={"name": "n"})))
    assert row.comment == ""


def test_side_comes_from_primary_only():
    primary = srg("func_1_a", "a")
    secondary = mcp("func_1_a", "named", side=Side.SERVER)
    assert resolve(_pair(primary, secondary)).side == int(Side.BOTH)


def test_drop_rule_removes_pairs_without_any_name():
    matches = {
        "func_1_a": _pair(srg("func_1_a", "a"), yarn("a", None)),
        "func_2_b": _pair(srg("func_2_b", "b"), yarn("b", "named")),
        "func_3_c": _pair(mcp("func_3_c", "mcpOnly"), yarn("c", None)),
    }
    rows = resolve_all(matches)
    assert [r.intermediate for r in rows] == ["func_2_b", "func_3_c"]
    assert rows[1].name == "mcpOnly"


def test_merge_fallback_direct_wins_and_gaps_filled():
    direct = {"func_1_a": _pair(srg("func_1_a", "a"), yarn("a", "direct"))}
    fallback = {
        "func_1_a": _pair(srg("func_1_a", "a"), mcp("func_1_a", "legacy")),
        "func_2_b": _pair(srg("func_2_b", "b"), mcp("func_2_b", "legacyOnly")),
    }
    merged = merge_fallback(direct, fallback)
    assert merged["func_1_a"].secondary.name == "direct"
    assert merged["func_2_b"].secondary.name == "legacyOnly"
    assert direct.keys() == {"func_1_a"}


def test_build_corrections_strips_and_overrides():
    corrections = build_corrections({" func_213454_em ": " sleepInternal ", "blank": "  "})
    assert corrections["func_213454_em"] == "sleepInternal"
    assert "blank" not in corrections
    assert corrections["field_77356_a"] == "protectionType"
    assert DEFAULT_CORRECTIONS["func_213454_em"] == "wakeUpInternal"


def test_corrections_are_immutable():
    corrections = build_corrections()
    with pytest.raises(TypeError):
        corrections["func_1_a"] = "x"  # type: ignore[index]


def test_field_pair_resolution():
    row = resolve(
        _pair(srg("field_5_f", "f", kind=MappingKind.FIELD), yarn("f", "count", kind=MappingKind.FIELD))
    )
    assert row == ResolvedMapping("field_5_f", "count", 2, "")
