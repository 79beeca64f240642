"""Platform specifiers: parsing, normalization and the host default.

A platform is an ``(os, architecture, variant)`` triple written as
``os/arch`` or ``os/arch/variant``. Aliases such as ``aarch64`` or
``x86_64`` are normalized so that two spellings of the same platform
compare equal.
"""

from __future__ import annotations

import platform as _host
import re
from dataclasses import dataclass
from functools import lru_cache

from lazyindex.errors import MalformedPlatformError

_COMPONENT = re.compile(r"^[A-Za-z0-9_-]+$")

KNOWN_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "illumos",
        "ios",
        "js",
        "linux",
        "netbsd",
        "openbsd",
        "plan9",
        "solaris",
        "wasip1",
        "windows",
    }
)

_OS_ALIASES = {"macos": "darwin"}

_ARCH_ALIASES = {
    "x86_64": ("amd64", ""),
    "x86-64": ("amd64", ""),
    "aarch64": ("arm64", ""),
    "i386": ("386", ""),
    "i686": ("386", ""),
    "armhf": ("arm", "v7"),
    "armel": ("arm", "v6"),
}


@dataclass(frozen=True)
class Platform:
    """A normalized platform triple."""

    os: str
    architecture: str
    variant: str = ""

    def __str__(self) -> str:
        parts = [self.os, self.architecture]
        if self.variant:
            parts.append(self.variant)
        return "/".join(parts)

    def to_dict(self) -> dict[str, str]:
        data = {"os": self.os, "architecture": self.architecture}
        if self.variant:
            data["variant"] = self.variant
        return data


def normalize_os(os_name: str) -> str:
    os_name = os_name.lower()
    return _OS_ALIASES.get(os_name, os_name)


def normalize_arch(arch: str, variant: str = "") -> tuple[str, str]:
    """Normalize an architecture/variant pair to its canonical spelling."""
    arch = arch.lower()
    variant = variant.lower()

    if arch in _ARCH_ALIASES:
        arch, implied = _ARCH_ALIASES[arch]
        variant = variant or implied

    if arch == "amd64":
        if variant == "v1":
            variant = ""
    elif arch == "arm64":
        if variant in ("8", "v8"):
            variant = ""
    elif arch == "arm":
        if variant == "":
            variant = "v7"
        elif variant in ("5", "6", "7", "8"):
            variant = "v" + variant

    return arch, variant


def normalize(p: Platform) -> Platform:
    arch, variant = normalize_arch(p.architecture, p.variant)
    return Platform(os=normalize_os(p.os), architecture=arch, variant=variant)


def parse_platform(specifier: str) -> Platform:
    """Parse ``os[/arch[/variant]]`` text into a normalized ``Platform``.

    A single component is read as an OS when it names a known OS, and as an
    architecture otherwise; the missing half comes from the host platform.

    Raises:
        MalformedPlatformError: If the text is empty, has more than three
            components, or a component has characters outside
            ``[A-Za-z0-9_-]``.
    """
    if not isinstance(specifier, str) or not specifier.strip():
        raise MalformedPlatformError(str(specifier), "empty platform")

    parts = specifier.strip().split("/")
    if len(parts) > 3:
        raise MalformedPlatformError(specifier, "too many components")
    for part in parts:
        if not _COMPONENT.match(part):
            raise MalformedPlatformError(
                specifier, f"invalid component {part!r}"
            )

    if len(parts) == 1:
        host = default_platform()
        token = parts[0]
        if normalize_os(token) in KNOWN_OS:
            return normalize(Platform(os=token, architecture=host.architecture, variant=host.variant))
        return normalize(Platform(os=host.os, architecture=token))

    if len(parts) == 2:
        return normalize(Platform(os=parts[0], architecture=parts[1]))

    return normalize(Platform(os=parts[0], architecture=parts[1], variant=parts[2]))


def platform_from_dict(data: dict) -> Platform:
    """Build a normalized platform from an OCI-style ``{"os", "architecture"}`` mapping."""
    parts = [data["os"], data["architecture"]]
    if data.get("variant"):
        parts.append(data["variant"])
    return parse_platform("/".join(parts))


@lru_cache(maxsize=None)
def default_platform() -> Platform:
    """Return the platform of the running process.

    Resolved once and cached, so it stays stable for the process lifetime.
    """
    os_name = _host.system().lower() or "linux"
    machine = _host.machine() or "amd64"
    variant = ""
    # platform.machine() reports "armv7l"/"armv6l" on 32-bit ARM hosts
    match = re.match(r"^armv(\d)", machine.lower())
    if match:
        machine, variant = "arm", "v" + match.group(1)
    return normalize(Platform(os=os_name, architecture=machine, variant=variant))


def resolve_platform(value: Platform | str | None) -> Platform:
    """Coerce caller input to a normalized platform, defaulting to the host."""
    if value is None:
        return default_platform()
    if isinstance(value, Platform):
        return normalize(value)
    return parse_platform(value)
