"""Tests for group summaries: loading, mode selection, ordering and emitted charts."""

from __future__ import annotations

import json

import pytest

from conftest import FakeRenderer, estimate_dict, estimates_json, write_bench

import benchplot.plot.summary as summary_module
from benchplot.plot.chart_generator import ChartGenerator
from benchplot.plot.chart_style import ChartStyle
from benchplot.plot.errors import RenderLaunchError
from benchplot.plot.summary import (
    SummaryMode,
    categorical_summary_specs,
    estimate_table,
    load_entries,
    load_entry,
    parse_input,
    rank_by,
    relative_ratios,
    select_mode,
    sort_by_input,
    summarize,
)
from benchplot.stats.estimate import Statistic


@pytest.fixture
def generator() -> ChartGenerator:
    return ChartGenerator(ChartStyle(kde_points=64))


def make_group(tmp_path, benches: dict, generation: str = "new"):
    group_dir = tmp_path / "grp"
    for name, ns in benches.items():
        write_bench(group_dir, name, generation, ns)
    return group_dir


# -----------------------------------------------------------------------------
# Labels and modes
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "label, expected",
    [("8", 8.0), ("0", 0.0), ("2.5", 2.5), ("1e3", 1000.0), ("-1", None), ("inf", None), ("nan", None), ("a", None)],
)
def test_parse_input(label, expected):
    assert parse_input(label) == expected


def test_numeric_labels_sort_numerically(tmp_path):
    group_dir = make_group(tmp_path, {"8": 800.0, "1": 100.0, "4": 400.0, "2": 200.0})
    entries = load_entries(group_dir, "new")

    assert select_mode(entries) is SummaryMode.NUMERIC
    assert [e.parsed_input for e in sort_by_input(entries)] == [1.0, 2.0, 4.0, 8.0]


def test_one_non_numeric_label_makes_group_categorical(tmp_path):
    group_dir = make_group(tmp_path, {"1": 100.0, "2": 200.0, "b": 300.0})
    assert select_mode(load_entries(group_dir, "new")) is SummaryMode.CATEGORICAL


def test_relative_ratios_against_smallest():
    assert relative_ratios([10.0, 5.0, 20.0]) == ["2.00", "1.00", "4.00"]


def test_relative_ratios_zero_smallest():
    assert relative_ratios([0.0, 3.0]) == ["nan", "inf"]


def test_rank_by_descending_and_stable(tmp_path):
    group_dir = make_group(tmp_path, {"a": 200.0, "b": 500.0, "c": 200.0, "d": 100.0})
    ranked = rank_by(load_entries(group_dir, "new"), Statistic.MEAN)
    assert [e.label for e in ranked] == ["b", "a", "c", "d"]


def test_estimate_table_columns(tmp_path):
    group_dir = make_group(tmp_path, {"fast": 100.0, "slow": 300.0})
    entries = load_entries(group_dir, "new")
    assert "relative" not in estimate_table(entries, Statistic.MEDIAN).columns

    table = estimate_table(entries, Statistic.MEDIAN, relative=True)

    assert list(table["label"]) == ["fast", "slow"]
    assert list(table["point"]) == [100.0, 300.0]
    assert list(table["lower"]) == pytest.approx([95.0, 285.0])
    assert list(table["upper"]) == pytest.approx([105.0, 315.0])
    assert list(table["relative"]) == ["1.00", "3.00"]


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def test_load_entry_requires_core_statistics(tmp_path):
    incomplete = {"Mean": estimate_dict(10.0, 9.0, 11.0), "Slope": estimate_dict(10.0, 9.0, 11.0)}
    write_bench(tmp_path, "partial", "new", 10.0, estimates=incomplete)
    assert load_entry(tmp_path / "partial", "new") is None


def test_load_entry_missing_generation(tmp_path):
    write_bench(tmp_path, "only_new", "new", 10.0)
    assert load_entry(tmp_path / "only_new", "base") is None
    assert load_entry(tmp_path / "only_new", "new").label == "only_new"


def test_load_entries_skips_malformed_and_summary(tmp_path):
    group_dir = make_group(tmp_path, {"a": 100.0, "b": 200.0})
    # an earlier summary run and a benchmark with a broken sample
    write_bench(group_dir, "summary", "new", 100.0)
    broken = write_bench(group_dir, "c", "new", 100.0)
    (broken / "sample.json").write_text("{not json", encoding="utf-8")
    (group_dir / "stray.txt").write_text("x", encoding="utf-8")

    assert [e.label for e in load_entries(group_dir, "new")] == ["a", "b"]


def test_load_entries_missing_group(tmp_path):
    assert load_entries(tmp_path / "nope", "new") == []


# -----------------------------------------------------------------------------
# Categorical ordering
# -----------------------------------------------------------------------------

def test_categorical_final_order_follows_median(tmp_path, generator):
    group_dir = tmp_path / "grp"
    # Mean ranks x first, median ranks y first.
    for name, mean, median in (("x", 500.0, 100.0), ("y", 100.0, 500.0)):
        est = estimates_json(mean)
        est["Median"] = estimate_dict(median, median * 0.95, median * 1.05)
        write_bench(group_dir, name, "new", mean, estimates=est)
    entries = load_entries(group_dir, "new")

    specs, final_order = categorical_summary_specs("grp", entries, tmp_path / "out", generator)

    assert [e.label for e in final_order] == ["y", "x"]
    means, slopes, medians, violin = specs
    assert list(means.figure["layout"]["yaxis"]["ticktext"]) == ["x", "y"]
    assert list(medians.figure["layout"]["yaxis"]["ticktext"]) == ["y", "x"]
    assert list(violin.figure["layout"]["yaxis"]["ticktext"]) == ["y", "x"]


# -----------------------------------------------------------------------------
# summarize()
# -----------------------------------------------------------------------------

def test_summarize_categorical_paths(tmp_path, generator, fake_renderer):
    make_group(tmp_path, {"a": 100.0, "b": 300.0})

    pending = summarize("grp", tmp_path, generator=generator, renderer=fake_renderer)

    out = tmp_path / "grp" / "summary" / "new"
    assert fake_renderer.paths == [
        out / "means.svg",
        out / "slopes.svg",
        out / "medians.svg",
        out / "violin_plot.svg",
    ]
    assert out.is_dir()
    assert len(pending) == 4
    assert pending.join() == []


def test_summarize_numeric_paths(tmp_path, generator, fake_renderer):
    make_group(tmp_path, {"10": 100.0, "20": 200.0, "40": 400.0})

    summarize("grp", tmp_path, generator=generator, renderer=fake_renderer)

    out = tmp_path / "grp" / "summary" / "new"
    assert fake_renderer.paths == [out / "means.svg", out / "medians.svg", out / "slopes.svg"]
    means = fake_renderer.specs[0]
    assert means.figure["layout"]["title"]["text"] == "grp"
    assert list(means.figure["data"][0]["x"]) == [10.0, 20.0, 40.0]


def test_summarize_both_generations(tmp_path, generator, fake_renderer):
    make_group(tmp_path, {"a": 100.0, "b": 300.0}, generation="new")
    make_group(tmp_path, {"a": 110.0, "b": 290.0}, generation="base")

    summarize("grp", tmp_path, generator=generator, renderer=fake_renderer)

    parents = [p.parent.name for p in fake_renderer.paths]
    assert parents == ["new"] * 4 + ["base"] * 4


def test_summarize_single_benchmark_emits_nothing(tmp_path, generator, fake_renderer):
    make_group(tmp_path, {"only": 100.0})

    pending = summarize("grp", tmp_path, generator=generator, renderer=fake_renderer)

    assert len(pending) == 0
    assert fake_renderer.specs == []
    assert not (tmp_path / "grp" / "summary").exists()


def test_summarize_mkdir_failure_skips_generation(tmp_path, generator, fake_renderer, monkeypatch, caplog):
    make_group(tmp_path, {"a": 100.0, "b": 300.0}, generation="new")
    make_group(tmp_path, {"a": 110.0, "b": 290.0}, generation="base")
    real_mkdirp = summary_module.mkdirp

    def failing_mkdirp(path):
        if path.name == "new":
            raise PermissionError("read-only")
        return real_mkdirp(path)

    monkeypatch.setattr(summary_module, "mkdirp", failing_mkdirp)

    summarize("grp", tmp_path, generator=generator, renderer=fake_renderer)

    assert [p.parent.name for p in fake_renderer.paths] == ["base"] * 4
    assert any("Cannot create" in r.getMessage() for r in caplog.records)


def test_summary_sample_json_shape(tmp_path):
    # sample.json is [[iterations], [total times]]
    root = write_bench(tmp_path, "a", "new", 100.0)
    iters, times = json.loads((root / "sample.json").read_text(encoding="utf-8"))
    entry = load_entry(tmp_path / "a", "new")
    assert entry.avg_times.tolist() == pytest.approx([t / i for i, t in zip(iters, times)])


def write_zero_median_group(tmp_path, names):
    """Two benchmarks where the first has a zero median estimate with a [0, 0] interval."""
    group_dir = tmp_path / "grp"
    zero = estimates_json(100.0)
    zero["Median"] = estimate_dict(0.0, 0.0, 0.0)
    write_bench(group_dir, names[0], "new", 100.0, estimates=zero)
    write_bench(group_dir, names[1], "new", 300.0)
    return group_dir


def test_summarize_zero_median_categorical(tmp_path, generator, fake_renderer):
    write_zero_median_group(tmp_path, ("a", "b"))

    summarize("grp", tmp_path, generator=generator, renderer=fake_renderer)

    medians = fake_renderer.specs[2]
    assert medians.output_path.name == "medians.svg"
    assert list(medians.figure["layout"]["yaxis"]["ticktext"]) == ["b", "a"]
    assert list(medians.figure["layout"]["yaxis2"]["ticktext"]) == ["inf", "nan"]
    assert len(fake_renderer.specs) == 4


def test_summarize_zero_median_numeric(tmp_path, generator, fake_renderer):
    write_zero_median_group(tmp_path, ("1", "2"))

    summarize("grp", tmp_path, generator=generator, renderer=fake_renderer)

    assert [p.name for p in fake_renderer.paths] == ["means.svg", "medians.svg", "slopes.svg"]


def test_summarize_launch_failure_joins_started_renders(tmp_path, generator):
    make_group(tmp_path, {"a": 100.0, "b": 300.0}, generation="new")
    make_group(tmp_path, {"a": 110.0, "b": 290.0}, generation="base")
    # all four "new" charts start, then the second "base" launch fails
    renderer = FakeRenderer(fail_on=6)

    with pytest.raises(RenderLaunchError) as excinfo:
        summarize("grp", tmp_path, generator=generator, renderer=renderer)

    pending = excinfo.value.pending
    assert pending is not None
    assert list(pending) == renderer.handles
    assert len(renderer.handles) == 5
    assert all(handle.waited for handle in renderer.handles)
