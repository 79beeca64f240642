"""Registry data models — index records and digest validation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from lazyindex.errors import (
    MalformedDigestError,
    MalformedPlatformError,
    MalformedReferenceError,
    RecordDecodeError,
)
from lazyindex.platforms import Platform, normalize, parse_platform, platform_from_dict

# OCI image-spec digest grammar
_DIGEST = re.compile(r"^[a-z0-9]+(?:[+._-][a-z0-9]+)*:[a-zA-Z0-9=_-]+$")
_HEX_LENGTHS = {"sha256": 64, "sha512": 128}
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

RECORD_FIELDS = ("index_digest", "manifest_digest", "image_ref", "platform", "created_at")


def validate_digest(digest: str) -> str:
    """Return ``digest`` unchanged if well formed, else raise ``MalformedDigestError``."""
    if not isinstance(digest, str) or not _DIGEST.match(digest):
        raise MalformedDigestError(str(digest), "expected algorithm:encoded")

    algorithm, encoded = digest.split(":", 1)
    expected = _HEX_LENGTHS.get(algorithm)
    if expected is not None:
        if len(encoded) != expected or not re.fullmatch(r"[a-f0-9]+", encoded):
            raise MalformedDigestError(
                digest, f"{algorithm} requires {expected} lowercase hex characters"
            )
    return digest


def validate_reference(image_ref: str) -> str:
    """Return ``image_ref`` unchanged if it is a non-empty single-line string.

    References are otherwise opaque and compared exactly.
    """
    if not isinstance(image_ref, str) or not image_ref:
        raise MalformedReferenceError(str(image_ref), "empty reference")
    if _CONTROL_CHARS.search(image_ref):
        raise MalformedReferenceError(image_ref, "control characters are not allowed")
    return image_ref


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class IndexRecord:
    """A single built index in the catalog. Immutable once stored."""

    index_digest: str
    manifest_digest: str
    image_ref: str
    platform: Platform
    created_at: str = field(default_factory=utc_now)  # ISO 8601, UTC

    def __post_init__(self):
        validate_reference(self.image_ref)
        platform = self.platform
        platform = parse_platform(platform) if isinstance(platform, str) else normalize(platform)
        object.__setattr__(self, "platform", platform)

    def to_dict(self) -> dict:
        return {
            "index_digest": self.index_digest,
            "manifest_digest": self.manifest_digest,
            "image_ref": self.image_ref,
            "platform": self.platform.to_dict(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> IndexRecord:
        """Decode a record, validating every field.

        Unknown fields, missing fields and values of the wrong shape are
        rejected with ``RecordDecodeError``.
        """
        if not isinstance(data, dict):
            raise RecordDecodeError(f"index record must be an object, got {type(data).__name__}")

        unknown = sorted(set(data) - set(RECORD_FIELDS))
        if unknown:
            raise RecordDecodeError(f"unknown index record fields: {', '.join(unknown)}")
        missing = [name for name in RECORD_FIELDS if name not in data]
        if missing:
            raise RecordDecodeError(f"missing index record fields: {', '.join(missing)}")

        for name in ("index_digest", "manifest_digest", "image_ref", "created_at"):
            if not isinstance(data[name], str) or not data[name]:
                raise RecordDecodeError(f"{name}: expected a non-empty string")

        try:
            validate_digest(data["index_digest"])
            validate_digest(data["manifest_digest"])
        except MalformedDigestError as e:
            raise RecordDecodeError(str(e)) from e

        try:
            datetime.fromisoformat(data["created_at"])
        except ValueError as e:
            raise RecordDecodeError(f"created_at: {e}") from e

        try:
            validate_reference(data["image_ref"])
        except MalformedReferenceError as e:
            raise RecordDecodeError(str(e)) from e

        return cls(
            index_digest=data["index_digest"],
            manifest_digest=data["manifest_digest"],
            image_ref=data["image_ref"],
            platform=_decode_platform(data["platform"]),
            created_at=data["created_at"],
        )


def _decode_platform(data) -> Platform:
    if not isinstance(data, dict):
        raise RecordDecodeError("platform: expected an object")

    allowed = {"os", "architecture", "variant"}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise RecordDecodeError(f"unknown platform fields: {', '.join(unknown)}")
    for name in ("os", "architecture"):
        if not isinstance(data.get(name), str) or not data[name]:
            raise RecordDecodeError(f"platform.{name}: expected a non-empty string")
    if not isinstance(data.get("variant", ""), str):
        raise RecordDecodeError("platform.variant: expected a string")

    try:
        return platform_from_dict(data)
    except MalformedPlatformError as e:
        raise RecordDecodeError(str(e)) from e
