"""Publisher: writes versioned mapping archives into a Maven-style repository.

This module is the "L" (Load) step of the pipeline. Each artifact is one zip
holding a CSV table per mapping kind, a sibling `.pom` descriptor, and `.md5`
/ `.sha1` checksum side-files for both. Layout:

    <output>/de/oceanlabs/mcp/<channel>/<version-id>/<channel>-<version-id>.zip

`channel` is `mcp_stable` or `mcp_snapshot`; `version-id` is `<name>-<version>`
for stable artifacts and `<YYYYMMDD>-<name>-<version>` for snapshots, the date
being the UTC date at the moment the artifact identity is computed.

The archive's existence is the idempotency token. To keep that token honest
the zip is assembled in a temporary file, checksums and descriptor are
written next, and the finished archive is renamed into place last; an
interrupted publish therefore never leaves a complete-looking artifact.
Checksums cover the final bytes of each file.
"""
from __future__ import annotations

import hashlib
import logging
import os
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Mapping as TMapping, Optional

from .models.mappings import MappingKind
from .serializer import EOL

logger = logging.getLogger(__name__)

MAVEN_GROUP = "de.oceanlabs.mcp"
STABLE_CHANNEL = "mcp_stable"
SNAPSHOT_CHANNEL = "mcp_snapshot"
ARCHIVE_PERMISSIONS = 0o664  # rw-rw-r--
HASH_ALGORITHMS = ("md5", "sha1")

POM_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>' + EOL
    + '<project xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 '
    'http://maven.apache.org/xsd/maven-4.0.0.xsd" xmlns="http://maven.apache.org/POM/4.0.0"' + EOL
    + '    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">' + EOL
    + "  <modelVersion>4.0.0</modelVersion>" + EOL
    + f"  <groupId>{MAVEN_GROUP}</groupId>" + EOL
    + "  <artifactId>{artifact_id}</artifactId>" + EOL
    + "  <version>{version}</version>" + EOL
    + "</project>" + EOL
)

Clock = Callable[[], datetime]


class PublishError(RuntimeError):
    """Raised when an artifact cannot be written to the repository."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Artifact:
    """Identity of one published artifact."""

    name: str
    version: str
    stable: bool
    snapshot_date: Optional[date] = None

    @property
    def channel(self) -> str:
        return STABLE_CHANNEL if self.stable else SNAPSHOT_CHANNEL

    @property
    def version_id(self) -> str:
        if self.stable or self.snapshot_date is None:
            return f"{self.name}-{self.version}"
        return f"{self.snapshot_date:%Y%m%d}-{self.name}-{self.version}"

    @property
    def file_stem(self) -> str:
        return f"{self.channel}-{self.version_id}"


def render_pom(file_stem: str) -> str:
    """Fill the descriptor template from a `<artifactId>-<version>` file stem."""
    artifact_id, _, version = file_stem.partition("-")
    return POM_TEMPLATE.format(artifact_id=artifact_id, version=version)


def write_hashes(path: Path, data: bytes) -> None:
    for algorithm in HASH_ALGORITHMS:
        digest = hashlib.new(algorithm, data).hexdigest()
        path.with_name(f"{path.name}.{algorithm}").write_text(digest, encoding="ascii")


def set_permissions(path: Path) -> None:
    if os.name != "posix":
        return
    os.chmod(path, ARCHIVE_PERMISSIONS)


def build_archive(path: Path, tables: TMapping[MappingKind, str]) -> bytes:
    """Write every table into a single zip at `path` and return its bytes."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for kind, text in tables.items():
            zf.writestr(f"{kind.csv_name}.csv", text.encode("utf-8"))
    return path.read_bytes()


class MavenPublisher:
    """Compute artifact paths and write artifacts under an output root."""

    def __init__(self, output_dir: str | os.PathLike[str], *, clock: Clock = utc_now):
        self.root = Path(output_dir).joinpath(*MAVEN_GROUP.split("."))
        self._clock = clock

    def artifact(self, name: str, version: str, stable: bool) -> Artifact:
        """Return the artifact identity; snapshots take today's UTC date."""
        if stable:
            return Artifact(name=name, version=version, stable=True)
        today = self._clock().astimezone(timezone.utc).date()
        return Artifact(name=name, version=version, stable=False, snapshot_date=today)

    def output_file(self, artifact: Artifact) -> Path:
        return self.root / artifact.channel / artifact.version_id / f"{artifact.file_stem}.zip"

    def exists(self, artifact: Artifact) -> bool:
        return self.output_file(artifact).exists()

    def write(self, artifact: Artifact, tables: TMapping[MappingKind, str]) -> Path:
        """Materialize `artifact` with one CSV entry per table.

        Args:
            artifact: Identity of the archive to write.
            tables: Rendered CSV text per mapping kind.

        Returns:
            Path of the archive once it has been moved into place.

        Raises:
            PublishError: if any filesystem step fails. Nothing is left at the
                archive path in that case.
        """
        zip_path = self.output_file(artifact)
        tmp_path = zip_path.with_name(zip_path.name + ".tmp")
        logger.info("Writing yarn-to-mcp data to %s", zip_path.resolve())
        try:
            zip_path.parent.mkdir(parents=True, exist_ok=True)
            archive = build_archive(tmp_path, tables)
            set_permissions(tmp_path)
            write_hashes(zip_path, archive)
            pom_path = zip_path.with_suffix(".pom")
            pom = render_pom(artifact.file_stem).encode("utf-8")
            pom_path.write_bytes(pom)
            write_hashes(pom_path, pom)
            os.replace(tmp_path, zip_path)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                logger.debug("No partial archive to remove at %s", tmp_path)
            raise PublishError(f"Could not publish {artifact.file_stem} to {zip_path.parent}: {e}") from e
        return zip_path


__all__ = [
    "Artifact",
    "MAVEN_GROUP",
    "MavenPublisher",
    "POM_TEMPLATE",
    "PublishError",
    "SNAPSHOT_CHANNEL",
    "STABLE_CHANNEL",
    "build_archive",
    "render_pom",
    "utc_now",
    "write_hashes",
]
