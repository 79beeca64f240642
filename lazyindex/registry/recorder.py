"""Record the result of an index build in the registry.

Building an index and resolving an image's manifest digest happen outside
this package. They are reached through the two protocols below.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

from lazyindex.platforms import Platform, resolve_platform
from lazyindex.registry.base import IndexRegistry
from lazyindex.registry.models import IndexRecord, validate_digest

logger = logging.getLogger(__name__)


class IndexBuilder(Protocol):
    def build_index(self, image_ref: str, platform: Platform) -> str:
        """Build an index for the image and return its digest."""
        ...


class ManifestResolver(Protocol):
    def resolve_manifest_digest(self, image_ref: str, platform: Platform) -> str:
        """Return the digest of the image manifest for ``platform``."""
        ...


def _utc_clock() -> datetime:
    return datetime.now(timezone.utc)


class IndexRecorder:
    """Builds an index through the collaborators and registers the result."""

    def __init__(
        self,
        registry: IndexRegistry,
        builder: IndexBuilder,
        resolver: ManifestResolver,
        clock: Callable[[], datetime] | None = None,
    ):
        self.registry = registry
        self.builder = builder
        self.resolver = resolver
        self.clock = clock or _utc_clock

    def record(self, image_ref: str, platform: Platform | str | None = None) -> IndexRecord:
        """Build and register an index for ``image_ref`` on ``platform``.

        ``platform`` defaults to the host platform.

        Raises:
            MalformedPlatformError: If ``platform`` is unparseable text.
            MalformedDigestError: If a collaborator returns a malformed digest.
            DuplicateDigestError: If the built index is already registered.
        """
        target = resolve_platform(platform)

        manifest_digest = validate_digest(
            self.resolver.resolve_manifest_digest(image_ref, target)
        )
        logger.debug("Resolved %s (%s) to manifest %s", image_ref, target, manifest_digest)

        index_digest = validate_digest(self.builder.build_index(image_ref, target))

        record = IndexRecord(
            index_digest=index_digest,
            manifest_digest=manifest_digest,
            image_ref=image_ref,
            platform=target,
            created_at=self.clock().astimezone(timezone.utc).isoformat(),
        )
        self.registry.store(record)
        return record
