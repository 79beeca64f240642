"""Error taxonomy for the index catalog.

Every error is a recoverable condition reported to the caller. The CLI turns
any ``CatalogError`` into a non-zero exit with a message on stderr.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for all catalog errors."""


class DuplicateDigestError(CatalogError):
    """An index with the same digest is already registered."""

    def __init__(self, digest: str):
        self.digest = digest
        super().__init__(f"index {digest} is already registered")


class IndexNotFoundError(CatalogError):
    """No registered index carries the requested digest."""

    def __init__(self, digest: str):
        self.digest = digest
        super().__init__(f"index {digest} not found")


class MalformedPlatformError(CatalogError):
    """A platform specifier could not be parsed."""

    def __init__(self, specifier: str, reason: str = ""):
        self.specifier = specifier
        self.reason = reason
        message = f"malformed platform {specifier!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedDigestError(CatalogError):
    """A digest string does not follow the ``algorithm:encoded`` grammar."""

    def __init__(self, digest: str, reason: str = ""):
        self.digest = digest
        self.reason = reason
        message = f"malformed digest {digest!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnsupportedFilterError(CatalogError):
    """A list filter names a key the query engine does not understand."""

    def __init__(self, key: str, supported: tuple[str, ...] = ()):
        self.key = key
        self.supported = supported
        message = f"unsupported filter {key!r}"
        if supported:
            message += f" (supported: {', '.join(supported)})"
        super().__init__(message)


class RecordDecodeError(CatalogError):
    """A stored or serialized index record does not match the record schema."""


class ConfigError(CatalogError):
    """The configuration file is unreadable or has an unexpected shape."""


class MalformedReferenceError(CatalogError):
    """An image reference is empty or contains control characters."""

    def __init__(self, image_ref: str, reason: str = ""):
        self.image_ref = image_ref
        self.reason = reason
        message = f"malformed image reference {image_ref!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class RegistryAccessError(CatalogError):
    """The registry directory or its files could not be read or written."""
