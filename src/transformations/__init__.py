"""
Transformations layer
----------------------

Converts the RAW OWID CO2 table into typed emission records (PROCESSED)
and selects the latest record per entity.
"""

from .emission_records import (  # noqa: F401
    MIN_YEAR,
    PROCESSED_BASE_PREFIX,
    EmissionRecord,
    MalformedCO2DataError,
    build_emission_records,
    build_emission_records_dataframe,
    load_emission_records,
    read_owid_co2_csv,
    save_emission_records_parquet,
    transform_raw_row,
)
from .entity_snapshot import select_latest_per_entity  # noqa: F401

__all__ = [
    "MIN_YEAR",
    "PROCESSED_BASE_PREFIX",
    "EmissionRecord",
    "MalformedCO2DataError",
    "build_emission_records",
    "build_emission_records_dataframe",
    "load_emission_records",
    "read_owid_co2_csv",
    "save_emission_records_parquet",
    "transform_raw_row",
    "select_latest_per_entity",
]
