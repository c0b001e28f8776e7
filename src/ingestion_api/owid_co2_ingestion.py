"""
RAW ingestion of the Our World in Data CO2 dataset.

Downloads `owid-co2-data.csv` and stores the bytes untouched under

    raw/owid_co2/snapshot_date=<YYYYMMDD>/owid-co2-data.csv

Storage/metadata agnostic: works with the local filesystem + JSON metadata
or with S3 through the adapters.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Optional

from adapters import MetadataAdapter, StorageAdapter
from common.retry import http_get_with_retries
from env_loader import DEFAULT_OWID_CO2_URL
from metadata import OWID_CO2_FETCH_SCOPE

RAW_BASE_PREFIX = "raw/owid_co2"
RAW_FILE_NAME = "owid-co2-data.csv"
OWID_CO2_CHECKPOINT_KEY = "last_owid_co2_raw_key"


def fetch_owid_co2_csv(url: str = DEFAULT_OWID_CO2_URL, *, timeout: int = 60) -> bytes:
    """Download the CSV and return its bytes (HTTP errors propagate)."""
    resp = http_get_with_retries(url, timeout=timeout)
    resp.raise_for_status()
    if not resp.content:
        raise RuntimeError(f"Empty response body from {url}")
    return resp.content


def find_latest_raw_key(storage: StorageAdapter) -> Optional[str]:
    """Newest RAW CSV key (by snapshot_date), or None when nothing was fetched yet."""
    keys = [k for k in storage.list_keys(RAW_BASE_PREFIX) if k.endswith(RAW_FILE_NAME)]
    if not keys:
        return None
    return sorted(keys)[-1]


def ingest_owid_co2_raw(
    storage: StorageAdapter,
    metadata: MetadataAdapter,
    *,
    url: str = DEFAULT_OWID_CO2_URL,
    timeout: int = 60,
    reuse_existing: bool = False,
    run_scope: str = OWID_CO2_FETCH_SCOPE,
) -> str:
    """
    Fetch the OWID CSV into the RAW layer and return its logical key.

    With `reuse_existing=True` an already stored RAW file is returned
    without downloading. Every download is registered as a run and the key
    is saved as checkpoint `last_owid_co2_raw_key`.
    """
    if reuse_existing:
        existing = find_latest_raw_key(storage)
        if existing is not None:
            print(f"[ingestion] Reusing existing RAW file {existing}")
            return existing

    run_id = metadata.start_run(run_scope)
    try:
        content = fetch_owid_co2_csv(url, timeout=timeout)

        snapshot_date = datetime.now(timezone.utc).strftime("%Y%m%d")
        key = f"{RAW_BASE_PREFIX}/snapshot_date={snapshot_date}/{RAW_FILE_NAME}"
        location = storage.write_raw(key, content)
        digest = hashlib.sha1(content).hexdigest()
        print(f"[ingestion] Saved {len(content)} bytes (sha1={digest[:12]}) to {location}")

        # data lines, header excluded
        rows = max(0, content.count(b"\n") - 1) if content.endswith(b"\n") else content.count(b"\n")
        metadata.save_checkpoint(OWID_CO2_CHECKPOINT_KEY, key)
        metadata.end_run(run_id, status="SUCCESS", rows_processed=rows, last_checkpoint=key)
        return key
    except Exception as exc:  # noqa: BLE001
        metadata.end_run(run_id, status="FAILED", error_message=str(exc))
        raise


__all__ = [
    "RAW_BASE_PREFIX",
    "RAW_FILE_NAME",
    "OWID_CO2_CHECKPOINT_KEY",
    "fetch_owid_co2_csv",
    "find_latest_raw_key",
    "ingest_owid_co2_raw",
]
