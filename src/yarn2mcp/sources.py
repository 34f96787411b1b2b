"""Acquisition interfaces for the two mapping lineages, plus a file-backed source.

Downloading and caching the raw MCP and Yarn releases is the job of external
downloader services. The publisher only needs the small surface described by
`IntermediateSource` (MCP lineage: SRG intermediates plus named MCP exports)
and `NamedSource` (Yarn lineage).

`LocalMappingSource` implements both against a directory of pre-fetched JSON
dumps, which is what the downloaders leave behind:

    <root>/<lineage>/latest.json                  {"version": "1.15.2"}
    <root>/<lineage>/<version>/mappings.json      [ {record}, ... ]
    <root>/<lineage>/<version>/intermediates.json [ {record}, ... ]  (MCP only)
"""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, Type

from pydantic import TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .models.mappings import IntermediateMapping, Mapping, MappingDatabase, McpMapping, YarnMapping

logger = logging.getLogger(__name__)

LATEST_FILE = "latest.json"
MAPPINGS_FILE = "mappings.json"
INTERMEDIATES_FILE = "intermediates.json"

_Stamp = Tuple[int, int]
_CacheEntry = Tuple[_Stamp, MappingDatabase]


class SourceError(RuntimeError):
    """Raised when a lineage's data is missing or cannot be parsed."""


class NamedSource(Protocol):
    async def get_latest_version(self, refresh: bool = False) -> str: ...

    async def get_database(self, version: str) -> MappingDatabase: ...


class IntermediateSource(NamedSource, Protocol):
    async def update_intermediates(self, version: str) -> None: ...

    async def get_intermediate_database(self, version: str) -> MappingDatabase: ...


class LocalMappingSource:
    """Serve one lineage's mapping databases from a dump directory.

    Each cache holds the database of a single version, stamped with the dump
    file's modification time and size. Every read re-stats the dump and loads
    it again when the stamp changed, so data rewritten by the downloaders is
    picked up on the next publish. `update_intermediates` drops the cached
    intermediate database outright.
    """

    def __init__(self, root: str | Path, lineage: str, record_model: Type[Mapping]):
        self.lineage = lineage
        self._dir = Path(root) / lineage
        self._adapter = TypeAdapter(List[record_model])  # type: ignore[valid-type]
        self._intermediate_adapter = TypeAdapter(List[IntermediateMapping])
        self._latest: Optional[str] = None
        self._databases: Dict[str, _CacheEntry] = {}
        self._intermediates: Dict[str, _CacheEntry] = {}

    @classmethod
    def mcp(cls, root: str | Path) -> "LocalMappingSource":
        return cls(root, "mcp", McpMapping)

    @classmethod
    def yarn(cls, root: str | Path) -> "LocalMappingSource":
        return cls(root, "yarn", YarnMapping)

    @retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(OSError),
    )
    def _read(self, path: Path) -> bytes:
        """Read a dump file, retrying transient I/O errors."""
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise SourceError(f"No {self.lineage} data at {path}") from e

    def _stamp(self, path: Path) -> _Stamp:
        try:
            st = path.stat()
        except FileNotFoundError as e:
            raise SourceError(f"No {self.lineage} data at {path}") from e
        return (st.st_mtime_ns, st.st_size)

    def _load_latest(self) -> str:
        raw = self._read(self._dir / LATEST_FILE)
        try:
            version = json.loads(raw)["version"]
        except (ValueError, KeyError, TypeError) as e:
            raise SourceError(f"Malformed {LATEST_FILE} for {self.lineage}: {e}") from e
        return str(version)

    def _load(self, version: str, filename: str, adapter: TypeAdapter) -> MappingDatabase:
        path = self._dir / version / filename
        try:
            records = adapter.validate_json(self._read(path))
        except ValidationError as e:
            raise SourceError(f"Invalid {self.lineage} records in {path}: {e}") from e
        logger.info("Loaded %d %s records for %s from %s", len(records), self.lineage, version, path)
        return MappingDatabase(version, records)

    async def _cached(
        self, cache: Dict[str, _CacheEntry], version: str, filename: str, adapter: TypeAdapter
    ) -> MappingDatabase:
        """Return the cached database for `version`, reloading it if the dump changed.

        Args:
            cache: Single-version cache to consult and replace.
            version: Game version whose dump is read.
            filename: Dump file name inside the version directory.
            adapter: Validator for the dump's record list.

        Returns:
            The database matching the dump currently on disk.

        Raises:
            SourceError: if the dump is missing or does not validate.
        """
        stamp = await asyncio.to_thread(self._stamp, self._dir / version / filename)
        entry = cache.get(version)
        if entry is not None and entry[0] == stamp:
            return entry[1]
        if entry is not None:
            logger.info("%s dump for %s changed on disk; reloading", self.lineage, version)
        db = await asyncio.to_thread(self._load, version, filename, adapter)
        cache.clear()
        cache[version] = (stamp, db)
        return db

    async def get_latest_version(self, refresh: bool = False) -> str:
        if refresh or self._latest is None:
            self._latest = await asyncio.to_thread(self._load_latest)
            logger.debug("Latest %s version is %s", self.lineage, self._latest)
        return self._latest

    async def get_database(self, version: str) -> MappingDatabase:
        return await self._cached(self._databases, version, MAPPINGS_FILE, self._adapter)

    async def update_intermediates(self, version: str) -> None:
        self._intermediates.pop(version, None)

    async def get_intermediate_database(self, version: str) -> MappingDatabase:
        return await self._cached(
            self._intermediates, version, INTERMEDIATES_FILE, self._intermediate_adapter
        )


__all__ = [
    "INTERMEDIATES_FILE",
    "IntermediateSource",
    "LATEST_FILE",
    "LocalMappingSource",
    "MAPPINGS_FILE",
    "NamedSource",
    "SourceError",
]
