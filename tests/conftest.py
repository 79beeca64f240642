"""Shared fixtures: the four-image catalog used across registry tests."""

import hashlib

import pytest

from lazyindex.platforms import parse_platform
from lazyindex.registry.models import IndexRecord

SCENARIO = [
    ("ubuntu:latest", "linux/arm64"),
    ("alpine:latest", "linux/amd64"),
    ("nginx:latest", "linux/arm64"),
    ("drupal:latest", "linux/amd64"),
]


def digest_of(seed: str) -> str:
    return "sha256:" + hashlib.sha256(seed.encode()).hexdigest()


def make_record(image_ref: str, platform: str = "linux/amd64", seed: str = "") -> IndexRecord:
    key = seed or f"{image_ref}|{platform}"
    return IndexRecord(
        index_digest=digest_of("index:" + key),
        manifest_digest=digest_of("manifest:" + key),
        image_ref=image_ref,
        platform=parse_platform(platform),
        created_at="2024-05-01T12:00:00+00:00",
    )


@pytest.fixture
def scenario_records() -> list[IndexRecord]:
    """ubuntu/arm64 (D1), alpine/amd64 (D2), nginx/arm64 (D3), drupal/amd64 (D4)."""
    return [make_record(ref, platform) for ref, platform in SCENARIO]


@pytest.fixture
def record_factory():
    return make_record
