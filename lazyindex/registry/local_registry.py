"""Local file-based registry implementation.

Stores index records as JSON in a local directory::

    <registry_dir>/index.json   {"schema_version": 1, "records": [...]}
    <registry_dir>/index.lock   advisory lock file

The index file is only ever replaced whole (write to a temporary file, fsync,
rename), so a reader sees either the previous or the next version of the
catalog. ``flock`` on the lock file serializes writers across processes and
keeps readers off a half-finished read-modify-write.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from lazyindex.errors import DuplicateDigestError, RecordDecodeError, RegistryAccessError
from lazyindex.registry.base import IndexRegistry
from lazyindex.registry.models import IndexRecord
from lazyindex.utils.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class LocalRegistry(IndexRegistry):
    """File-based local registry of built indices."""

    INDEX_FILE = "index.json"
    LOCK_FILE = "index.lock"

    def __init__(self, registry_dir: str | Path):
        self.registry_dir = Path(registry_dir)
        self.index_path = self.registry_dir / self.INDEX_FILE
        self.lock_path = self.registry_dir / self.LOCK_FILE
        self._lock = ReadWriteLock()
        # (stat key, records, digest map), swapped as one object
        self._cache: tuple | None = None

    def store(self, record: IndexRecord) -> None:
        with self._lock.write_locked():
            try:
                self.registry_dir.mkdir(parents=True, exist_ok=True)
                with self._file_lock(fcntl.LOCK_EX):
                    records, by_digest = self._load_index()
                    if record.index_digest in by_digest:
                        raise DuplicateDigestError(record.index_digest)
                    self._save_index(records + (record,))
                    self._refresh_cache()
            except OSError as e:
                raise RegistryAccessError(f"cannot write registry {self.registry_dir}: {e}") from e
        logger.info(
            "Registered index %s for %s (%s)",
            record.index_digest,
            record.image_ref,
            record.platform,
        )

    def _snapshot(self) -> tuple[tuple[IndexRecord, ...], dict[str, IndexRecord]]:
        with self._lock.read_locked():
            try:
                # nothing stored yet; readers never create the registry
                if not self.index_path.exists():
                    return (), {}
                with self._file_lock(fcntl.LOCK_SH):
                    return self._load_index()
            except OSError as e:
                raise RegistryAccessError(f"cannot read registry {self.registry_dir}: {e}") from e

    @contextmanager
    def _file_lock(self, operation: int) -> Iterator[None]:
        with open(self.lock_path, "a") as fh:
            fcntl.flock(fh.fileno(), operation)
            try:
                yield
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def _stat_key(self) -> tuple[int, int, int] | None:
        try:
            st = self.index_path.stat()
        except FileNotFoundError:
            return None
        return (st.st_ino, st.st_mtime_ns, st.st_size)

    def _load_index(self) -> tuple[tuple[IndexRecord, ...], dict[str, IndexRecord]]:
        key = self._stat_key()
        if key is None:
            return (), {}
        cache = self._cache
        if cache is not None and cache[0] == key:
            logger.debug("Reusing cached index for %s", self.index_path)
            return cache[1], cache[2]
        return self._refresh_cache()

    def _refresh_cache(self) -> tuple[tuple[IndexRecord, ...], dict[str, IndexRecord]]:
        key = self._stat_key()
        if key is None:
            return (), {}

        logger.debug("Loading index from %s", self.index_path)
        with open(self.index_path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise RecordDecodeError(f"{self.index_path}: {e}") from e

        records = tuple(_decode_index(data, self.index_path))
        by_digest: dict[str, IndexRecord] = {}
        for record in records:
            if record.index_digest in by_digest:
                raise RecordDecodeError(
                    f"{self.index_path}: duplicate index digest {record.index_digest}"
                )
            by_digest[record.index_digest] = record

        self._cache = (key, records, by_digest)
        return records, by_digest

    def _save_index(self, records: tuple[IndexRecord, ...]):
        payload = {
            "schema_version": SCHEMA_VERSION,
            "records": [r.to_dict() for r in records],
        }
        fd, tmp_name = tempfile.mkstemp(
            dir=self.registry_dir, prefix=".index-", suffix=".json.tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.index_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def _decode_index(data, path: Path) -> list[IndexRecord]:
    if not isinstance(data, dict) or not isinstance(data.get("records"), list):
        raise RecordDecodeError(f"{path}: expected an object with a 'records' list")
    version = data.get("schema_version")
    if version != SCHEMA_VERSION:
        raise RecordDecodeError(f"{path}: unsupported schema_version {version!r}")
    return [IndexRecord.from_dict(item) for item in data["records"]]
