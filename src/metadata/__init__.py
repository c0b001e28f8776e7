"""
Metadata module
---------------

Local JSON store for pipeline runs and checkpoints.

    from metadata import start_run, end_run, CO2_ANALYSIS_SCOPE

    run_id = start_run(CO2_ANALYSIS_SCOPE)
    # ... run the analysis ...
    end_run(run_id, status="SUCCESS", rows_processed=1234)
"""

from .store import (
    DEFAULT_METADATA_FILE,
    METADATA_LOCAL_FILE_ENV,
    end_run,
    list_runs,
    load_checkpoint,
    save_checkpoint,
    start_run,
)

OWID_CO2_FETCH_SCOPE = "owid_co2_fetch"
CO2_ANALYSIS_SCOPE = "co2_analysis"

__all__ = [
    "DEFAULT_METADATA_FILE",
    "METADATA_LOCAL_FILE_ENV",
    "OWID_CO2_FETCH_SCOPE",
    "CO2_ANALYSIS_SCOPE",
    "start_run",
    "end_run",
    "save_checkpoint",
    "load_checkpoint",
    "list_runs",
]
