"""Tests for recording external index builds."""

import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from lazyindex.errors import DuplicateDigestError, MalformedDigestError, MalformedPlatformError
from lazyindex.platforms import Platform, default_platform
from lazyindex.registry.memory import MemoryRegistry
from lazyindex.registry.recorder import IndexRecorder


def _digest(seed: str) -> str:
    return "sha256:" + hashlib.sha256(seed.encode()).hexdigest()


class FakeBuilder:
    """Deterministic builder: one digest per (reference, platform)."""

    def __init__(self, digest: str = ""):
        self.digest = digest
        self.calls = []

    def build_index(self, image_ref, platform):
        self.calls.append((image_ref, platform))
        return self.digest or _digest(f"index:{image_ref}|{platform}")


class FakeResolver:
    def __init__(self):
        self.calls = []

    def resolve_manifest_digest(self, image_ref, platform):
        self.calls.append((image_ref, platform))
        return _digest(f"manifest:{image_ref}|{platform}")


def _fixed_clock():
    return datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))


def test_record_build():
    reg = MemoryRegistry()
    builder, resolver = FakeBuilder(), FakeResolver()
    recorder = IndexRecorder(reg, builder, resolver, clock=_fixed_clock)

    record = recorder.record("ubuntu:latest", "linux/aarch64")

    assert record.platform == Platform("linux", "arm64")
    assert record.index_digest == _digest("index:ubuntu:latest|linux/arm64")
    assert record.manifest_digest == _digest("manifest:ubuntu:latest|linux/arm64")
    assert record.created_at == "2024-05-01T12:00:00+00:00"
    assert reg.get(record.index_digest) == record
    assert builder.calls == [("ubuntu:latest", Platform("linux", "arm64"))]
    assert resolver.calls == builder.calls


def test_record_defaults_to_host_platform():
    reg = MemoryRegistry()
    record = IndexRecorder(reg, FakeBuilder(), FakeResolver()).record("alpine:latest")
    assert record.platform == default_platform()


def test_record_scenario_order(scenario_records):
    reg = MemoryRegistry()
    recorder = IndexRecorder(reg, FakeBuilder(), FakeResolver())
    for record in scenario_records:
        recorder.record(record.image_ref, str(record.platform))

    assert [(r.image_ref, str(r.platform)) for r in reg.list_indices()] == [
        (r.image_ref, str(r.platform)) for r in scenario_records
    ]


def test_rebuilding_same_image_surfaces_duplicate():
    reg = MemoryRegistry()
    recorder = IndexRecorder(reg, FakeBuilder(), FakeResolver())
    recorder.record("nginx:latest", "linux/arm64")

    with pytest.raises(DuplicateDigestError):
        recorder.record("nginx:latest", "linux/arm64")
    assert len(reg) == 1


def test_builder_returning_bad_digest():
    reg = MemoryRegistry()
    recorder = IndexRecorder(reg, FakeBuilder(digest="sha256:nope"), FakeResolver())

    with pytest.raises(MalformedDigestError):
        recorder.record("drupal:latest", "linux/amd64")
    assert len(reg) == 0


def test_malformed_platform_never_reaches_builder():
    builder = FakeBuilder()
    recorder = IndexRecorder(MemoryRegistry(), builder, FakeResolver())

    with pytest.raises(MalformedPlatformError):
        recorder.record("ubuntu:latest", "linux//arm64")
    assert builder.calls == []
