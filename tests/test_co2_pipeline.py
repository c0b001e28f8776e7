"""
Integration tests for the end-to-end pipeline entrypoint.
"""

import pytest
import requests

import co2_pipeline
import ingestion_api.owid_co2_ingestion as ingestion
from adapters import LocalMetadataAdapter, LocalStorageAdapter
from metadata import CO2_ANALYSIS_SCOPE
from transformations import MalformedCO2DataError

HEADER = "country,iso_code,year,co2,co2_per_capita,gdp,population"


@pytest.fixture
def csv_bytes():
    rows = [HEADER]
    for code, base in [("AAA", 1.0), ("BBB", 3.0), ("CCC", 6.0), ("DDD", 10.0)]:
        for year in (1959, 1960, 1961):
            rows.append(f"Country {code},{code},{year},{base * 10},{base},{base * 1000 * 50},50")
    return ("\n".join(rows) + "\n").encode("utf-8")


class TestRunCo2Pipeline:

    def test_from_local_csv(self, tmp_path, csv_bytes):
        input_csv = tmp_path / "owid-co2-data.csv"
        input_csv.write_bytes(csv_bytes)
        storage = LocalStorageAdapter(tmp_path / "out")
        meta = LocalMetadataAdapter()

        artefacts = co2_pipeline.run_co2_pipeline(storage, meta, input_csv=input_csv, include_charts=False)

        assert artefacts["raw"] == [str(input_csv)]
        assert artefacts["processed"][0].endswith("emission_records.parquet")
        assert len(artefacts["analysis"]) == 10
        run = meta.list_runs(CO2_ANALYSIS_SCOPE)[-1]
        assert run["status"] == "SUCCESS"
        assert run["rows_processed"] == 8

    def test_fetches_raw_when_missing(self, monkeypatch, tmp_path, csv_bytes, capsys):
        def fake_get(url, timeout):
            resp = requests.Response()
            resp.status_code = 200
            resp._content = csv_bytes
            return resp

        monkeypatch.setattr(ingestion, "http_get_with_retries", fake_get)
        storage = LocalStorageAdapter(tmp_path / "out")

        artefacts = co2_pipeline.run_co2_pipeline(storage, LocalMetadataAdapter(), include_charts=False)

        assert artefacts["raw"][0].startswith("raw/owid_co2/")
        assert "===== Regression Summary =====" in capsys.readouterr().out

    def test_malformed_input_fails_run(self, tmp_path):
        input_csv = tmp_path / "bad.csv"
        input_csv.write_bytes(b"country,year\nA,1990\n")
        meta = LocalMetadataAdapter()

        with pytest.raises(MalformedCO2DataError):
            co2_pipeline.run_co2_pipeline(LocalStorageAdapter(tmp_path / "out"), meta, input_csv=input_csv)

        run = meta.list_runs(CO2_ANALYSIS_SCOPE)[-1]
        assert run["status"] == "FAILED"
        assert "missing required columns" in run["error_message"]


class TestMain:

    def test_cli_with_local_csv(self, monkeypatch, tmp_path, csv_bytes):
        input_csv = tmp_path / "owid-co2-data.csv"
        input_csv.write_bytes(csv_bytes)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PIPELINE_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("PIPELINE_STORAGE_BACKEND", "local")

        assert co2_pipeline.main(["--input-csv", str(input_csv), "--skip-charts"]) == 0

        storage = LocalStorageAdapter(tmp_path / "data")
        keys = storage.list_keys("analytics/owid_co2")
        assert any(k.endswith("regression_summary.json") for k in keys)
