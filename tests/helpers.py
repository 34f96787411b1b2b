from __future__ import annotations

from typing import Dict, List, Optional

from yarn2mcp.models.mappings import (
    IntermediateMapping,
    MappingDatabase,
    MappingKind,
    McpMapping,
    Side,
    YarnMapping,
)


def srg(
    intermediate: str,
    original: str,
    *,
    kind: MappingKind = MappingKind.METHOD,
    owner: str = "abc",
    descriptor: str = "()V",
) -> IntermediateMapping:
    return IntermediateMapping(
        kind=kind,
        owner=owner,
        original=original,
        intermediate=intermediate,
        descriptor=descriptor if kind is MappingKind.METHOD else "",
    )


def yarn(
    original: str,
    name: Optional[str],
    *,
    kind: MappingKind = MappingKind.METHOD,
    owner: str = "abc",
    descriptor: str = "()V",
    comment: Optional[str] = None,
) -> YarnMapping:
    return YarnMapping(
        kind=kind,
        owner=owner,
        original=original,
        name=name,
        descriptor=descriptor if kind is MappingKind.METHOD else "",
        comment=comment,
    )


def mcp(
    intermediate: str,
    name: Optional[str],
    *,
    kind: MappingKind = MappingKind.METHOD,
    original: str = "zz",
    side: Side = Side.BOTH,
    comment: Optional[str] = None,
) -> McpMapping:
    return McpMapping(
        kind=kind,
        owner="old",
        original=original,
        intermediate=intermediate,
        name=name,
        descriptor="()V" if kind is MappingKind.METHOD else "",
        side=side,
        comment=comment,
    )


def db(version: str, *records) -> MappingDatabase:
    return MappingDatabase(version, records)


class FakeMcpSource:
    """In-memory MCP lineage recording the order of calls."""

    def __init__(
        self,
        latest: str = "1.15.2",
        srgs: Optional[Dict[str, MappingDatabase]] = None,
        databases: Optional[Dict[str, MappingDatabase]] = None,
    ):
        self.latest = latest
        self.srgs = srgs or {}
        self.databases = databases or {}
        self.calls: List[str] = []
        self.fail_latest = False

    async def get_latest_version(self, refresh: bool = False) -> str:
        self.calls.append(f"latest:{refresh}")
        if self.fail_latest:
            raise ConnectionError("mcp version lookup failed")
        return self.latest

    async def update_intermediates(self, version: str) -> None:
        self.calls.append(f"update:{version}")

    async def get_intermediate_database(self, version: str) -> MappingDatabase:
        self.calls.append(f"srg:{version}")
        return self.srgs[version]

    async def get_database(self, version: str) -> MappingDatabase:
        self.calls.append(f"mcp:{version}")
        return self.databases[version]


class FakeYarnSource:
    def __init__(self, latest: str = "1.15.2", databases: Optional[Dict[str, MappingDatabase]] = None):
        self.latest = latest
        self.databases = databases or {}
        self.calls: List[str] = []
        self.failures = 0

    async def get_latest_version(self, refresh: bool = False) -> str:
        self.calls.append(f"latest:{refresh}")
        if self.failures:
            self.failures -= 1
            raise ConnectionError("yarn meta unavailable")
        return self.latest

    async def get_database(self, version: str) -> MappingDatabase:
        self.calls.append(f"yarn:{version}")
        return self.databases[version]
