"""Query filter engine.

A filter is the logical AND of zero or more predicates. The engine holds no
state: the same records and filter always produce the same ordered result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Union

from lazyindex.errors import UnsupportedFilterError
from lazyindex.platforms import Platform, normalize, parse_platform
from lazyindex.registry.models import IndexRecord

SUPPORTED_FILTERS = ("ref", "platform")


@dataclass(frozen=True)
class Predicate:
    """One atomic condition on an index record."""

    key: str
    value: str
    test: Callable[[IndexRecord], bool]

    def __call__(self, record: IndexRecord) -> bool:
        return self.test(record)


def by_reference(image_ref: str) -> Predicate:
    """Exact image reference match. No globbing, no normalization."""
    return Predicate("ref", image_ref, lambda record: record.image_ref == image_ref)


def by_platform(target: Platform | str) -> Predicate:
    platform = parse_platform(target) if isinstance(target, str) else normalize(target)
    return Predicate("platform", str(platform), lambda record: record.platform == platform)


_BUILDERS: dict[str, Callable[[str], Predicate]] = {
    "ref": by_reference,
    "platform": by_platform,
}


@dataclass(frozen=True)
class IndexFilter:
    """Conjunction of predicates. The empty filter matches every record."""

    predicates: tuple[Predicate, ...] = ()

    def matches(self, record: IndexRecord) -> bool:
        return all(predicate(record) for predicate in self.predicates)

    def apply(self, records: Iterable[IndexRecord]) -> list[IndexRecord]:
        return [record for record in records if self.matches(record)]

    def and_(self, other: IndexFilter) -> IndexFilter:
        return IndexFilter(self.predicates + other.predicates)

    @property
    def is_empty(self) -> bool:
        return not self.predicates

    def describe(self) -> str:
        if not self.predicates:
            return "<all>"
        return " AND ".join(f"{p.key}={p.value}" for p in self.predicates)


Criteria = Union[Mapping[str, Union[str, None]], Iterable[tuple[str, Union[str, None]]]]


def build_filter(criteria: Criteria | None = None) -> IndexFilter:
    """Build an ``IndexFilter`` from ``{key: value}`` criteria.

    ``criteria`` is a mapping or a sequence of ``(key, value)`` pairs; pairs
    allow the same key twice. Keys with a ``None`` value are skipped.

    Raises:
        UnsupportedFilterError: For any key other than ``ref`` or ``platform``.
        MalformedPlatformError: If the platform value cannot be parsed.
    """
    predicates = []
    pairs = criteria.items() if isinstance(criteria, Mapping) else (criteria or ())
    for key, value in pairs:
        builder = _BUILDERS.get(key)
        if builder is None:
            raise UnsupportedFilterError(key, SUPPORTED_FILTERS)
        if value is None:
            continue
        predicates.append(builder(value))
    return IndexFilter(tuple(predicates))
