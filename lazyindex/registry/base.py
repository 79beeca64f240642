"""Abstract index registry.

Subclasses provide a consistent snapshot of the stored records and an atomic
append; lookup and listing are shared.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lazyindex.errors import IndexNotFoundError
from lazyindex.registry.models import IndexRecord
from lazyindex.registry.query import IndexFilter


class IndexRegistry(ABC):
    """Insertion-ordered, digest-unique store of index records."""

    @abstractmethod
    def store(self, record: IndexRecord) -> None:
        """Append ``record``.

        Raises:
            DuplicateDigestError: If a record with the same index digest exists.
                The registry is left unchanged.
        """

    @abstractmethod
    def _snapshot(self) -> tuple[tuple[IndexRecord, ...], dict[str, IndexRecord]]:
        """Return the ordered records and a digest lookup, as of one instant."""

    def get(self, digest: str) -> IndexRecord:
        _, by_digest = self._snapshot()
        record = by_digest.get(digest)
        if record is None:
            raise IndexNotFoundError(digest)
        return record

    def list_indices(self, index_filter: IndexFilter | None = None) -> list[IndexRecord]:
        """Return records matching ``index_filter`` in insertion order."""
        records, _ = self._snapshot()
        if index_filter is None:
            return list(records)
        return index_filter.apply(records)

    def __contains__(self, digest: object) -> bool:
        _, by_digest = self._snapshot()
        return digest in by_digest

    def __len__(self) -> int:
        records, _ = self._snapshot()
        return len(records)
