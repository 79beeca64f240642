"""In-process registry backed by a list and a digest map."""

from __future__ import annotations

import logging

from lazyindex.errors import DuplicateDigestError
from lazyindex.registry.base import IndexRegistry
from lazyindex.registry.models import IndexRecord
from lazyindex.utils.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class MemoryRegistry(IndexRegistry):
    """Registry that lives only as long as the process."""

    def __init__(self, records: list[IndexRecord] | None = None):
        self._lock = ReadWriteLock()
        self._records: tuple[IndexRecord, ...] = ()
        self._by_digest: dict[str, IndexRecord] = {}
        for record in records or []:
            self.store(record)

    def store(self, record: IndexRecord) -> None:
        with self._lock.write_locked():
            if record.index_digest in self._by_digest:
                raise DuplicateDigestError(record.index_digest)
            # snapshots already handed to readers are never mutated
            by_digest = dict(self._by_digest)
            by_digest[record.index_digest] = record
            self._records = self._records + (record,)
            self._by_digest = by_digest
        logger.debug("Stored index %s for %s", record.index_digest, record.image_ref)

    def _snapshot(self) -> tuple[tuple[IndexRecord, ...], dict[str, IndexRecord]]:
        with self._lock.read_locked():
            return self._records, self._by_digest
