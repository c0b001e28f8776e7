"""
Orchestration entrypoint for the OWID CO2 analysis.

Runs, in order:

1. RAW: fetch `owid-co2-data.csv` (or reuse the stored copy, or read a
   local file given with --input-csv)
2. PROCESSED: load typed emission records and persist them as Parquet
3. Analysis: snapshots, quartiles, aggregates, derived series, regression
4. Artefacts: CSV tables, regression summary and charts

Intended usage (local):

    co2-pipeline                       # reuse RAW if present, else download
    co2-pipeline --refresh             # always download
    co2-pipeline --input-csv data/owid-co2-data.csv --skip-charts

Configuration comes from the environment / `.env` (see env_loader).
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from adapters import LocalMetadataAdapter, MetadataAdapter, StorageAdapter, build_storage_adapter
from analysis import format_regression_summary, run_co2_analysis, save_co2_analysis_outputs
from env_loader import DEFAULT_OWID_CO2_URL, load_settings
from ingestion_api.owid_co2_ingestion import ingest_owid_co2_raw
from metadata import CO2_ANALYSIS_SCOPE
from transformations import load_emission_records, save_emission_records_parquet


def run_co2_pipeline(
    storage: StorageAdapter,
    metadata: MetadataAdapter,
    *,
    input_csv: Optional[Path | str] = None,
    url: str = DEFAULT_OWID_CO2_URL,
    timeout: int = 60,
    refresh: bool = False,
    include_charts: bool = True,
) -> Dict[str, List[str]]:
    """
    Run the pipeline end-to-end and return step name -> written locations.

    The analysis part is registered as a `co2_analysis` run; a failure is
    recorded as FAILED and re-raised.
    """
    artefacts: Dict[str, List[str]] = {}
    snapshot_date = datetime.now(timezone.utc).strftime("%Y%m%d")

    print("[1/4] Resolving RAW OWID CO2 data...")
    if input_csv is not None:
        content = Path(input_csv).read_bytes()
        artefacts["raw"] = [str(input_csv)]
    else:
        raw_key = ingest_owid_co2_raw(
            storage,
            metadata,
            url=url,
            timeout=timeout,
            reuse_existing=not refresh,
        )
        content = storage.read_raw(raw_key)
        artefacts["raw"] = [raw_key]
    print(f"      RAW source: {artefacts['raw'][0]}")

    run_id = metadata.start_run(CO2_ANALYSIS_SCOPE)
    try:
        print("[2/4] Loading emission records (RAW -> PROCESSED)...")
        records = load_emission_records(content)
        processed = save_emission_records_parquet(records, storage, snapshot_date=snapshot_date)
        artefacts["processed"] = [processed]
        print(f"      {len(records)} records -> {processed}")

        print("[3/4] Running CO2 analysis...")
        result = run_co2_analysis(records)
        print()
        print(format_regression_summary(result.regression))
        print()

        print("[4/4] Writing analytical artefacts...")
        artefacts["analysis"] = save_co2_analysis_outputs(
            result,
            storage,
            snapshot_date=snapshot_date,
            include_charts=include_charts,
        )

        metadata.end_run(
            run_id,
            status="SUCCESS",
            rows_processed=len(records),
            last_checkpoint=f"snapshot_date={snapshot_date}",
        )
    except Exception as exc:  # noqa: BLE001
        metadata.end_run(run_id, status="FAILED", error_message=str(exc))
        raise

    print("\nPipeline completed successfully.")
    return artefacts


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Run the OWID CO2 analysis end-to-end (fetch, load, analyse, write artefacts).",
    )
    parser.add_argument(
        "--input-csv",
        type=str,
        default=None,
        help="Read this local OWID CSV instead of the RAW layer.",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Download the CSV even when a RAW copy already exists.",
    )
    parser.add_argument(
        "--skip-charts",
        action="store_true",
        help="Do not render the PNG charts.",
    )
    parser.add_argument(
        "--storage",
        choices=["local", "s3"],
        default=None,
        help="Override PIPELINE_STORAGE_BACKEND.",
    )

    args = parser.parse_args(argv)
    settings = load_settings()
    if args.storage is not None and args.storage != settings.storage_backend:
        from dataclasses import replace

        settings = replace(settings, storage_backend=args.storage)

    run_co2_pipeline(
        build_storage_adapter(settings),
        LocalMetadataAdapter(),
        input_csv=args.input_csv,
        url=settings.owid_co2_url,
        timeout=settings.http_timeout_seconds,
        refresh=args.refresh,
        include_charts=not args.skip_charts,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())


__all__ = ["run_co2_pipeline", "main"]
