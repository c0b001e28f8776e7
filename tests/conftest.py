"""Shared fixtures for the CO2 analysis tests."""

from typing import Iterable, Optional, Tuple

import pandas as pd
import pytest

from transformations import EmissionRecord, build_emission_records_dataframe

# (entity_name, entity_code, year, co2_per_capita, gdp_per_capita, total_co2)
RecordRow = Tuple[str, str, int, float, float, Optional[float]]


def make_records(rows: Iterable[RecordRow]) -> pd.DataFrame:
    return build_emission_records_dataframe(
        EmissionRecord(
            entity_name=name,
            entity_code=code,
            year=year,
            co2_per_capita=co2_pc,
            gdp_per_capita=gdp_pc,
            total_co2=total,
        )
        for name, code, year, co2_pc, gdp_pc, total in rows
    )


@pytest.fixture
def records_factory():
    """Build an emission-records DataFrame from compact tuples."""
    return make_records


@pytest.fixture
def three_entity_records():
    """Three entities, 1960 and 1961; in 1961 A is richest, C poorest."""
    return make_records(
        [
            ("Aland", "AAA", 1960, 10.0, 30000.0, 100.0),
            ("Bland", "BBB", 1960, 5.0, 10000.0, 50.0),
            ("Cland", "CCC", 1960, 1.0, 1000.0, 5.0),
            ("Aland", "AAA", 1961, 12.0, 32000.0, 110.0),
            ("Bland", "BBB", 1961, 6.0, 12000.0, 55.0),
            ("Cland", "CCC", 1961, 2.0, 1500.0, 6.0),
        ]
    )


@pytest.fixture(autouse=True)
def isolated_metadata_store(tmp_path, monkeypatch):
    """Point the local metadata JSON at a per-test file."""
    path = tmp_path / "metadata" / "local_metadata.json"
    monkeypatch.setenv("METADATA_LOCAL_FILE", str(path))
    return path
