"""Single-index lookup and its structured document form.

``info`` returns the record itself; ``render_document`` and
``decode_document`` convert it to and from the JSON (or YAML) document that
``lazyindex index info`` prints. Decoding is strict: the document must match
the record schema exactly.
"""

from __future__ import annotations

import json

import yaml

from lazyindex.errors import RecordDecodeError
from lazyindex.registry.base import IndexRegistry
from lazyindex.registry.models import IndexRecord, validate_digest

DOCUMENT_FORMATS = ("json", "yaml")


class InfoRetriever:
    """Look up one index by digest."""

    def __init__(self, registry: IndexRegistry):
        self.registry = registry

    def info(self, digest: str) -> IndexRecord:
        """Return the record for ``digest``.

        Raises:
            MalformedDigestError: If ``digest`` is not a valid digest string.
            IndexNotFoundError: If no index with that digest is registered.
        """
        validate_digest(digest)
        return self.registry.get(digest)


def render_document(record: IndexRecord, fmt: str = "json") -> str:
    """Serialize ``record`` as a structured document."""
    data = record.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False)
    raise ValueError(f"unknown document format {fmt!r}, expected one of {DOCUMENT_FORMATS}")


def decode_document(text: str, fmt: str = "json") -> IndexRecord:
    """Parse an info document back into an ``IndexRecord``.

    Raises:
        RecordDecodeError: On unparseable text or any schema mismatch.
    """
    try:
        if fmt == "json":
            data = json.loads(text)
        elif fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            raise ValueError(f"unknown document format {fmt!r}, expected one of {DOCUMENT_FORMATS}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RecordDecodeError(f"invalid {fmt} document: {e}") from e
    return IndexRecord.from_dict(data)
