"""
End-to-end tests for the analysis sequence, rankings, charts and artefacts.
"""

import json

import pytest

from adapters import LocalStorageAdapter
from analysis import (
    render_charts,
    run_co2_analysis,
    save_co2_analysis_outputs,
    top_emitters_by_co2_per_capita,
    top_emitters_time_series,
)
from analysis.charts import plot_quartile_violin
from analysis.co2_analysis import ANALYTICS_BASE_PREFIX
from transformations import load_emission_records

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def owid_csv():
    lines = ["country,iso_code,year,co2,co2_per_capita,gdp,population"]
    entities = [
        ("Aland", "AAA", 12.0, 40000.0),
        ("Bland", "BBB", 8.0, 25000.0),
        ("Cland", "CCC", 4.0, 9000.0),
        ("Dland", "DDD", 1.0, 2000.0),
        ("Eland", "EEE", 0.5, 900.0),
        ("World", "", 4.7, 12000.0),
    ]
    for name, code, co2_pc, gdp_pc in entities:
        for offset, year in enumerate(range(1958, 1964)):
            population = 1_000_000
            gdp = (gdp_pc + 100 * offset) * population
            co2_value = co2_pc + 0.1 * offset
            total = co2_value * population / 1e6
            lines.append(f"{name},{code},{year},{total},{co2_value},{gdp},{population}")
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def records(owid_csv):
    return load_emission_records(owid_csv)


class TestRankings:

    def test_top_emitters_descending(self, records):
        result = run_co2_analysis(records)
        top = top_emitters_by_co2_per_capita(result.snapshots, n=3)
        assert top["entity_code"].tolist() == ["AAA", "BBB", ""]
        assert top["co2_per_capita"].is_monotonic_decreasing

    def test_top_emitters_series_uses_codes(self, records):
        result = run_co2_analysis(records)
        top = top_emitters_by_co2_per_capita(result.snapshots, n=10)
        series = top_emitters_time_series(records, top, n=2)
        assert sorted(series["entity_code"].unique().tolist()) == ["AAA", "BBB"]
        assert len(series) == 8


class TestRunCo2Analysis:

    def test_sequence(self, records):
        result = run_co2_analysis(records)

        assert len(result.snapshots) == 6
        assert set(result.snapshots["year"]) == {1963}
        assert sorted(result.quartiles["gdp_quartile"].tolist()) == [1, 1, 2, 2, 3, 4]
        assert len(result.global_time_series) == 4
        assert result.global_time_series["date"].is_monotonic_increasing
        # "World" has no code, so only five entities per year feed the heatmap
        assert set(result.quartile_heatmap["year"]) == {1960, 1961, 1962, 1963}
        assert result.cumulative["cumulative_co2_per_capita"].is_monotonic_increasing
        assert result.pct_change["pct_change"].isna().tolist() == [True, False, False, False]
        assert result.regression.is_defined
        assert result.regression.n_observations == 6
        assert result.regression.slope > 0

    def test_records_untouched(self, records):
        before = records.copy()
        run_co2_analysis(records)
        assert records.equals(before)

    def test_three_entities_distinct_quartiles(self, three_entity_records):
        result = run_co2_analysis(three_entity_records)
        by_code = dict(zip(result.quartiles["entity_code"], result.quartiles["gdp_quartile"]))
        assert by_code["CCC"] < by_code["BBB"] < by_code["AAA"]

    def test_empty_records(self, records_factory):
        result = run_co2_analysis(records_factory([]))
        assert result.snapshots.empty
        assert result.global_time_series.empty
        assert not result.regression.is_defined


class TestCharts:

    def test_every_chart_renders_png(self, records):
        images = render_charts(run_co2_analysis(records))
        assert len(images) == 11
        for name, content in images.items():
            assert name.endswith(".png")
            assert content.startswith(PNG_SIGNATURE)

    def test_charts_render_for_degenerate_input(self, records_factory):
        records = records_factory([("A", "AAA", 2000, 1.0, 100.0, None)])
        images = render_charts(run_co2_analysis(records))
        assert all(content.startswith(PNG_SIGNATURE) for content in images.values())

    def test_violin_with_single_value_groups(self, three_entity_records):
        result = run_co2_analysis(three_entity_records)
        assert plot_quartile_violin(result.quartiles).startswith(PNG_SIGNATURE)


class TestSaveOutputs:

    def test_writes_tables_summary_and_charts(self, records, tmp_path):
        storage = LocalStorageAdapter(tmp_path)
        result = run_co2_analysis(records)
        locations = save_co2_analysis_outputs(result, storage, snapshot_date="20240101")

        prefix = f"{ANALYTICS_BASE_PREFIX}/snapshot_date=20240101"
        keys = storage.list_keys(prefix)
        assert len(locations) == len(keys) == 8 + 2 + 11
        assert f"{prefix}/global_time_series.csv" in keys
        assert f"{prefix}/regression.png" in keys

        summary = json.loads(storage.read_raw(f"{prefix}/regression_summary.json"))
        assert summary["n_observations"] == 6
        assert summary["is_defined"] is True
        text = storage.read_raw(f"{prefix}/regression_summary.txt").decode("utf-8")
        assert "Regression Summary" in text

    def test_skip_charts(self, records, tmp_path):
        storage = LocalStorageAdapter(tmp_path)
        locations = save_co2_analysis_outputs(
            run_co2_analysis(records), storage, snapshot_date="20240101", include_charts=False
        )
        assert len(locations) == 10
        assert not any(loc.endswith(".png") for loc in locations)
