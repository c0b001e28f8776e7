"""
OWID CO2 dataset: RAW CSV -> typed emission records (PROCESSED layer).

Converts the rows of `owid-co2-data.csv` into `EmissionRecord` instances,
applying the data-quality filter of the analysis:

    co2_per_capita present, gdp present, population > 0, year >= 1960

Rows failing the filter are dropped silently (only a count is reported).
Cells that are present but cannot be parsed as their declared type raise
`MalformedCO2DataError`, as does a CSV missing one of the required columns.

Schema of the resulting DataFrame (input row order preserved):

    entity_name      string
    entity_code      string   ("" for aggregates such as "World")
    year             int64
    date             datetime64 (Jan 1 of year)
    co2_per_capita   float64  (t per person)
    total_co2        float64  (Mt, may be NaN)
    gdp_per_capita   float64  (gdp / population)
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from adapters import StorageAdapter

MIN_YEAR = 1960

# Source column -> meaning
RAW_REQUIRED_COLUMNS = [
    "country",
    "iso_code",
    "year",
    "co2",
    "co2_per_capita",
    "gdp",
    "population",
]

NULL_MARKERS = frozenset({"", "NA", "N/A", "NaN", "nan", "null", "NULL", "None"})

EMISSION_RECORD_COLUMNS = [
    "entity_name",
    "entity_code",
    "year",
    "date",
    "co2_per_capita",
    "total_co2",
    "gdp_per_capita",
]

PROCESSED_BASE_PREFIX = "processed/owid_co2"
PROCESSED_FILE_NAME = "emission_records.parquet"


class MalformedCO2DataError(ValueError):
    """The input cannot be interpreted as an OWID CO2 table."""


@dataclass(frozen=True)
class EmissionRecord:
    """One entity-year observation that passed the inclusion filter."""

    entity_name: str
    entity_code: str
    year: int
    co2_per_capita: float
    total_co2: Optional[float]
    gdp_per_capita: float

    @property
    def date(self) -> date:
        return date(self.year, 1, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_name": self.entity_name,
            "entity_code": self.entity_code,
            "year": self.year,
            "date": pd.Timestamp(self.date),
            "co2_per_capita": self.co2_per_capita,
            "total_co2": self.total_co2,
            "gdp_per_capita": self.gdp_per_capita,
        }


def _is_null(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() in NULL_MARKERS
    return value is None or bool(pd.isna(value))


def _parse_float(value: Any, *, column: str, row_number: int) -> Optional[float]:
    """
    Parse a numeric cell. Null markers and non-finite values map to None;
    anything else that is not a number is a malformed cell.
    """
    if _is_null(value):
        return None
    try:
        parsed = float(str(value).strip())
    except ValueError as exc:
        raise MalformedCO2DataError(
            f"Row {row_number}: column {column!r} has non-numeric value {value!r}"
        ) from exc
    if not math.isfinite(parsed):
        return None
    return parsed


def _parse_year(value: Any, *, row_number: int) -> Optional[int]:
    parsed = _parse_float(value, column="year", row_number=row_number)
    if parsed is None:
        return None
    if not parsed.is_integer():
        raise MalformedCO2DataError(f"Row {row_number}: year {value!r} is not an integer")
    return int(parsed)


def _parse_text(value: Any) -> str:
    if _is_null(value):
        return ""
    return str(value).strip()


def transform_raw_row(
    row: Mapping[str, Any],
    *,
    row_number: int = 0,
    min_year: int = MIN_YEAR,
) -> Optional[EmissionRecord]:
    """
    Convert one RAW row into an EmissionRecord.

    Returns None when the row fails the inclusion filter (missing
    co2_per_capita or gdp, population missing or <= 0, year < min_year or
    missing). Raises MalformedCO2DataError for unparseable cells.
    """
    year = _parse_year(row.get("year"), row_number=row_number)
    co2_per_capita = _parse_float(row.get("co2_per_capita"), column="co2_per_capita", row_number=row_number)
    gdp = _parse_float(row.get("gdp"), column="gdp", row_number=row_number)
    population = _parse_float(row.get("population"), column="population", row_number=row_number)
    total_co2 = _parse_float(row.get("co2"), column="co2", row_number=row_number)

    if co2_per_capita is None or gdp is None:
        return None
    if population is None or population <= 0:
        return None
    if year is None or year < min_year:
        return None

    gdp_per_capita = gdp / population
    if not math.isfinite(gdp_per_capita):
        return None

    return EmissionRecord(
        entity_name=_parse_text(row.get("country")),
        entity_code=_parse_text(row.get("iso_code")),
        year=year,
        co2_per_capita=co2_per_capita,
        total_co2=total_co2,
        gdp_per_capita=gdp_per_capita,
    )


def build_emission_records_dataframe(records: Iterable[EmissionRecord]) -> pd.DataFrame:
    """Materialize EmissionRecords as a DataFrame with explicit dtypes."""
    rows = [record.to_dict() for record in records]
    df = pd.DataFrame(rows, columns=EMISSION_RECORD_COLUMNS)

    df["entity_name"] = df["entity_name"].astype("string")
    df["entity_code"] = df["entity_code"].astype("string")
    df["year"] = df["year"].astype("int64")
    df["date"] = pd.to_datetime(df["date"])
    for col in ["co2_per_capita", "total_co2", "gdp_per_capita"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")

    return df.reset_index(drop=True)


def read_owid_co2_csv(source: Union[bytes, Path, str]) -> pd.DataFrame:
    """
    Read the OWID CSV with every cell as text, so that typing happens
    in `transform_raw_row` rather than in pandas' inference.

    `source` is either the raw bytes or a filesystem path.
    """
    handle: Any = io.BytesIO(source) if isinstance(source, bytes) else Path(source)
    try:
        raw_df = pd.read_csv(handle, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise MalformedCO2DataError(f"Could not parse OWID CO2 CSV: {exc}") from exc

    missing = [c for c in RAW_REQUIRED_COLUMNS if c not in raw_df.columns]
    if missing:
        raise MalformedCO2DataError(f"OWID CO2 CSV is missing required columns: {missing}")

    return raw_df


def build_emission_records(
    raw_df: pd.DataFrame,
    *,
    min_year: int = MIN_YEAR,
) -> List[EmissionRecord]:
    """Apply `transform_raw_row` to every RAW row, keeping input order."""
    missing = [c for c in RAW_REQUIRED_COLUMNS if c not in raw_df.columns]
    if missing:
        raise MalformedCO2DataError(f"RAW table is missing required columns: {missing}")

    records: List[EmissionRecord] = []
    # Row numbers are 1-based data lines (header excluded).
    for row_number, row in enumerate(raw_df[RAW_REQUIRED_COLUMNS].to_dict(orient="records"), start=1):
        record = transform_raw_row(row, row_number=row_number, min_year=min_year)
        if record is not None:
            records.append(record)

    dropped = len(raw_df) - len(records)
    if dropped:
        print(
            f"[loader] {dropped} of {len(raw_df)} rows dropped by the data-quality filter "
            f"(missing co2_per_capita/gdp, population <= 0 or year < {min_year})."
        )
    return records


def load_emission_records(
    source: Union[bytes, Path, str, pd.DataFrame],
    *,
    min_year: int = MIN_YEAR,
) -> pd.DataFrame:
    """
    Record Loader: RAW OWID table -> filtered, typed emission records.

    Accepts CSV bytes, a CSV path or an already materialized RAW DataFrame.
    """
    raw_df = source if isinstance(source, pd.DataFrame) else read_owid_co2_csv(source)
    records = build_emission_records(raw_df, min_year=min_year)
    return build_emission_records_dataframe(records)


def save_emission_records_parquet(
    records: pd.DataFrame,
    storage: StorageAdapter,
    *,
    snapshot_date: Optional[str] = None,
) -> str:
    """
    Persist the loader output as the PROCESSED layer:

        processed/owid_co2/snapshot_date=<YYYYMMDD>/emission_records.parquet
    """
    if snapshot_date is None:
        snapshot_date = datetime.now(timezone.utc).strftime("%Y%m%d")
    key = f"{PROCESSED_BASE_PREFIX}/snapshot_date={snapshot_date}/{PROCESSED_FILE_NAME}"
    return storage.write_parquet(records, key)


__all__ = [
    "MIN_YEAR",
    "RAW_REQUIRED_COLUMNS",
    "EMISSION_RECORD_COLUMNS",
    "PROCESSED_BASE_PREFIX",
    "MalformedCO2DataError",
    "EmissionRecord",
    "transform_raw_row",
    "build_emission_records_dataframe",
    "read_owid_co2_csv",
    "build_emission_records",
    "load_emission_records",
    "save_emission_records_parquet",
]
