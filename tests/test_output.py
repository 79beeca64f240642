"""Tests for listing output: full, quiet and quiet-exact."""

import pytest

from lazyindex.output import OutputMode, render, render_exact
from lazyindex.registry.memory import MemoryRegistry
from lazyindex.registry.query import build_filter


def test_full_output_contains_ref_and_digest(scenario_records):
    text = render(scenario_records, OutputMode.FULL)
    lines = text.splitlines()

    assert len(lines) == len(scenario_records)
    for line, record in zip(lines, scenario_records):
        assert record.image_ref in line
        assert record.index_digest in line
        assert str(record.platform) in line
    assert text.endswith("\n")


def test_full_output_is_column_aligned(scenario_records):
    lines = render(scenario_records).splitlines()
    ref_columns = {line.index(r.image_ref) for line, r in zip(lines, scenario_records)}
    assert len(ref_columns) == 1
    assert all(line == line.rstrip() for line in lines)


def test_quiet_output_is_digest_per_line(scenario_records):
    text = render(scenario_records, OutputMode.QUIET)
    d1, d2, d3, d4 = (r.index_digest for r in scenario_records)

    assert text == f"{d1}\n{d2}\n{d3}\n{d4}\n"
    assert text.splitlines() == [d1, d2, d3, d4]


@pytest.mark.parametrize("mode", [OutputMode.FULL, OutputMode.QUIET])
def test_empty_result_renders_empty(mode):
    assert render([], mode) == ""


def test_quiet_exact(scenario_records):
    single = scenario_records[:1]
    assert render_exact(single) == scenario_records[0].index_digest
    assert render(single, OutputMode.QUIET).rstrip("\n") == render_exact(single)


@pytest.mark.parametrize("count", [0, 2])
def test_quiet_exact_requires_single_record(scenario_records, count):
    with pytest.raises(ValueError):
        render_exact(scenario_records[:count])


def test_scenario(scenario_records):
    reg = MemoryRegistry(scenario_records)
    d1, _, d3, _ = (r.index_digest for r in scenario_records)

    full = render(reg.list_indices(), OutputMode.FULL)
    for record in scenario_records:
        assert record.image_ref in full and record.index_digest in full

    quiet = render(reg.list_indices(), OutputMode.QUIET)
    assert quiet == "".join(r.index_digest + "\n" for r in scenario_records)

    arm = reg.list_indices(build_filter({"platform": "linux/arm64"}))
    assert [r.index_digest for r in arm] == [d1, d3]

    ubuntu = reg.list_indices(build_filter({"ref": "ubuntu:latest"}))
    assert render(ubuntu, OutputMode.QUIET).strip("\n") == d1
