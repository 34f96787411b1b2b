from __future__ import annotations

import pytest
from pydantic import ValidationError

from yarn2mcp.config import Settings


def test_defaults(monkeypatch):
    for key in ("OUTPUT_DIR", "CACHE_DIR", "MIXED_VERSION", "CORRECTIONS", "DAILY_RUN_HOUR_UTC"):
        monkeypatch.delenv(key, raising=False)
    s = Settings(_env_file=None)
    assert s.MIXED_VERSION == "1.14.3"
    assert s.DAILY_RUN_HOUR_UTC == 0
    assert s.CORRECTIONS == {}
    assert s.corrections()["func_228676_c_"] == "create"


def test_corrections_from_pairs(monkeypatch):
    monkeypatch.setenv("CORRECTIONS", "func_1_a=first, field_2_b = second ,broken,=x")
    s = Settings(_env_file=None)
    assert s.CORRECTIONS == {"func_1_a": "first", "field_2_b": "second"}
    assert s.corrections()["field_2_b"] == "second"


def test_corrections_from_json(monkeypatch):
    monkeypatch.setenv("CORRECTIONS", '{"func_228676_c_": "build"}')
    s = Settings(_env_file=None)
    assert s.corrections()["func_228676_c_"] == "build"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("OUTPUT_DIR", "/srv/maven")
    monkeypatch.setenv("DAILY_RUN_HOUR_UTC", "6")
    s = Settings(_env_file=None)
    assert s.OUTPUT_DIR == "/srv/maven"
    assert s.DAILY_RUN_HOUR_UTC == 6


def test_run_hour_validated(monkeypatch):
    monkeypatch.setenv("DAILY_RUN_HOUR_UTC", "24")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
