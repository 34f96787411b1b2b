"""Async publish pipelines tying sources, matcher, namer and publisher together.

A publish is a sequence of suspend points: acquire the databases for each
side, compute the per-kind tables off the event loop (the joins are CPU bound
and independent per kind, so they run concurrently against the shared
read-only databases), then write the archive in one pass.

Two pipelines exist:

- yarn: SRG intermediates joined with Yarn names by signature, for one game
  version. Published to the stable or snapshot channel.
- mixed: the yarn join for the current Yarn version, with gaps filled from a
  legacy MCP export bridged by SRG name. Always a snapshot.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict

from .matching import MatchedMappings, find_matching, find_matching_by_intermediate
from .models.mappings import SUPPORTED_KINDS, MappingDatabase, MappingKind
from .naming import DEFAULT_CORRECTIONS, Corrections, merge_fallback, resolve_all
from .publisher import Artifact, MavenPublisher
from .serializer import render_table
from .sources import IntermediateSource, NamedSource

logger = logging.getLogger(__name__)

YARN = "yarn"
MIXED = "mixed"

Matcher = Callable[[MappingKind], MatchedMappings]


class MappingPipeline:
    """Build and publish yarn-over-mcp artifacts.

    Callers must not run two publishes for the same artifact concurrently;
    the existence check is not re-validated under a lock.
    """

    def __init__(
        self,
        mcp: IntermediateSource,
        yarn: NamedSource,
        publisher: MavenPublisher,
        corrections: Corrections = DEFAULT_CORRECTIONS,
    ):
        self.mcp = mcp
        self.yarn = yarn
        self.publisher = publisher
        self.corrections = corrections

    async def get_srgs(self, version: str) -> MappingDatabase:
        """Refresh then load the SRG intermediates for `version`."""
        await self.mcp.update_intermediates(version)
        return await self.mcp.get_intermediate_database(version)

    async def publish_if_not_exists(
        self,
        version: str,
        stable: bool,
        name: str,
        publish: Callable[[Artifact], Awaitable[None]],
    ) -> bool:
        """Run `publish` unless the artifact already exists. Returns True if written."""
        artifact = self.publisher.artifact(name, version, stable)
        if self.publisher.exists(artifact):
            logger.debug("Artifact %s already exists; skipping", artifact.file_stem)
            return False
        await publish(artifact)
        return True

    async def publish_mappings(self, version: str, stable: bool) -> bool:
        """Publish Yarn names over the SRG intermediates of `version`.

        Args:
            version: Game version read from both lineages.
            stable: Publish to the stable channel instead of today's snapshot.

        Returns:
            True if an artifact was written, False if it already existed.
        """
        async def _publish(artifact: Artifact) -> None:
            srgs, yarn = await asyncio.gather(self.get_srgs(version), self.yarn.get_database(version))
            logger.info("Publishing yarn-over-mcp for MC %s", version)
            tables = await self.build_tables(lambda kind: find_matching(kind, srgs, yarn))
            await asyncio.to_thread(self.publisher.write, artifact, tables)

        return await self.publish_if_not_exists(version, stable, YARN, _publish)

    async def publish_mixed_mappings(self, mcp_version: str, yarn_version: str) -> bool:
        """Publish the mixed snapshot for `yarn_version`.

        Keys the Yarn signature join leaves out are filled from the legacy MCP
        export of `mcp_version`, bridged by intermediate identifier.

        Args:
            mcp_version: Version of the legacy named MCP export.
            yarn_version: Game version of the SRG and Yarn data.

        Returns:
            True if an artifact was written, False if it already existed.
        """
        async def _publish(artifact: Artifact) -> None:
            srgs, yarn, mcp = await asyncio.gather(
                self.get_srgs(yarn_version),
                self.yarn.get_database(yarn_version),
                self.mcp.get_database(mcp_version),
            )
            logger.info("Publishing mixed mappings for MC %s over MCP %s", yarn_version, mcp_version)

            def match(kind: MappingKind) -> MatchedMappings:
                return merge_fallback(
                    find_matching(kind, srgs, yarn),
                    find_matching_by_intermediate(kind, srgs, mcp),
                )

            tables = await self.build_tables(match)
            await asyncio.to_thread(self.publisher.write, artifact, tables)

        return await self.publish_if_not_exists(yarn_version, False, MIXED, _publish)

    def render(self, match: Matcher, kind: MappingKind) -> str:
        return render_table(resolve_all(match(kind), self.corrections))

    async def build_tables(self, match: Matcher) -> Dict[MappingKind, str]:
        """Render one table per supported kind, kinds computed concurrently."""
        texts = await asyncio.gather(
            *(asyncio.to_thread(self.render, match, kind) for kind in SUPPORTED_KINDS)
        )
        return dict(zip(SUPPORTED_KINDS, texts))


__all__ = ["MIXED", "MappingPipeline", "YARN"]
