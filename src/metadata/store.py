import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4


# Environment variable to override the local JSON path (tests, containers)
METADATA_LOCAL_FILE_ENV = "METADATA_LOCAL_FILE"

DEFAULT_METADATA_FILE = Path("local_metadata.json")


def _now_utc_iso() -> str:
    """Return current UTC time in ISO 8601 format."""
    return datetime.now(timezone.utc).isoformat()


def _get_metadata_file() -> Path:
    env_value = os.getenv(METADATA_LOCAL_FILE_ENV)
    if env_value:
        return Path(env_value)
    return DEFAULT_METADATA_FILE


def _load_store() -> Dict[str, Any]:
    """
    Load the metadata store from the local JSON file.

    Structure:
    {
      "runs": [
        {
          "run_id": str,
          "run_scope": str,
          "start_ts": str,
          "end_ts": Optional[str],
          "status": "RUNNING" | "SUCCESS" | "FAILED",
          "rows_processed": Optional[int],
          "last_checkpoint": Optional[str],
          "error_message": Optional[str]
        },
        ...
      ],
      "checkpoints": {"<source>": "<value>"}
    }
    """
    path = _get_metadata_file()
    if not path.exists():
        return {"runs": [], "checkpoints": {}}

    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"Metadata file {path} is corrupted") from exc

    if not isinstance(data, dict):
        raise RuntimeError(f"Metadata file {path} has invalid format (expected object)")

    data.setdefault("runs", [])
    data.setdefault("checkpoints", {})
    if not isinstance(data["runs"], list) or not isinstance(data["checkpoints"], dict):
        raise RuntimeError(f"Metadata file {path} has invalid structure")

    return data


def _save_store(store: Dict[str, Any]) -> None:
    """Persist the metadata store atomically (write tmp file, then replace)."""
    path = _get_metadata_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)

    tmp_path.replace(path)


def start_run(run_scope: str) -> str:
    """
    Register the start of a pipeline run and return its identifier.

    Typical scopes are "owid_co2_fetch" and "co2_analysis".
    """
    store = _load_store()

    run_id = str(uuid4())
    store["runs"].append(
        {
            "run_id": run_id,
            "run_scope": run_scope,
            "start_ts": _now_utc_iso(),
            "end_ts": None,
            "status": "RUNNING",
            "rows_processed": None,
            "last_checkpoint": None,
            "error_message": None,
        }
    )
    _save_store(store)

    return run_id


def end_run(
    run_id: str,
    status: str = "SUCCESS",
    *,
    rows_processed: Optional[int] = None,
    last_checkpoint: Optional[str] = None,
    error_message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Mark the run `run_id` as finished and return the updated record.

    Raises KeyError when the run is unknown.
    """
    store = _load_store()
    runs: List[Dict[str, Any]] = store.get("runs", [])

    target_run: Optional[Dict[str, Any]] = None
    for run in reversed(runs):
        if run.get("run_id") == run_id:
            target_run = run
            break

    if target_run is None:
        raise KeyError(f"No pipeline run found with id={run_id!r}")

    target_run["end_ts"] = _now_utc_iso()
    target_run["status"] = status

    if rows_processed is not None:
        target_run["rows_processed"] = int(rows_processed)
    if last_checkpoint is not None:
        target_run["last_checkpoint"] = str(last_checkpoint)
    if error_message is not None:
        target_run["error_message"] = error_message

    _save_store(store)
    return target_run


def save_checkpoint(source: str, value: Any) -> None:
    """
    Persist a checkpoint value for a given source.

    Example: save_checkpoint("owid_co2_raw_key", "raw/owid_co2/...csv")
    """
    store = _load_store()
    store.setdefault("checkpoints", {})[source] = value
    _save_store(store)


def load_checkpoint(source: str, default: Optional[Any] = None) -> Any:
    store = _load_store()
    return store.get("checkpoints", {}).get(source, default)


def list_runs(run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
    store = _load_store()
    runs: List[Dict[str, Any]] = store.get("runs", [])
    if run_scope is None:
        return list(runs)
    return [r for r in runs if r.get("run_scope") == run_scope]
