from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_OWID_CO2_URL = "https://raw.githubusercontent.com/owid/co2-data/master/owid-co2-data.csv"
STORAGE_BACKENDS = ("local", "s3")


def load_dotenv_if_present(path: str | None = None) -> None:
    """
    Lightweight .env loader used for local development.

    - Reads KEY=VALUE pairs from the given file (default: ".env" in CWD).
    - Ignores empty lines and comments starting with "#".
    - Does *not* overwrite variables that are already present in os.environ.
    """
    env_path = Path(path or ".env")
    if not env_path.exists():
        return

    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if not key:
            continue
        if key not in os.environ:
            os.environ[key] = value


@dataclass(frozen=True)
class PipelineSettings:
    """Runtime configuration resolved from the environment."""

    owid_co2_url: str = DEFAULT_OWID_CO2_URL
    data_dir: Path = Path(".")
    storage_backend: str = "local"
    s3_bucket: Optional[str] = None
    s3_base_prefix: Optional[str] = None
    http_timeout_seconds: int = 60


def load_settings(dotenv_path: str | None = None) -> PipelineSettings:
    """
    Build PipelineSettings from os.environ, after loading `.env` if present.

    Environment variables
    ---------------------
    OWID_CO2_URL              source CSV URL
    PIPELINE_DATA_DIR         root dir of the local storage adapter
                              (falls back to DATA_DIR)
    PIPELINE_STORAGE_BACKEND  "local" or "s3"
    PIPELINE_S3_BUCKET        required when the backend is "s3"
    PIPELINE_S3_BASE_PREFIX   optional key prefix inside the bucket
    HTTP_TIMEOUT_SECONDS      timeout for the CSV download
    """
    load_dotenv_if_present(dotenv_path)

    backend = os.getenv("PIPELINE_STORAGE_BACKEND", "local").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(
            f"Invalid PIPELINE_STORAGE_BACKEND={backend!r}; expected one of {STORAGE_BACKENDS}"
        )

    bucket = os.getenv("PIPELINE_S3_BUCKET") or None
    if backend == "s3" and not bucket:
        raise RuntimeError("PIPELINE_S3_BUCKET must be set when PIPELINE_STORAGE_BACKEND=s3")

    timeout_raw = os.getenv("HTTP_TIMEOUT_SECONDS", "60")
    try:
        timeout = int(timeout_raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid HTTP_TIMEOUT_SECONDS={timeout_raw!r}") from exc

    data_dir = os.getenv("PIPELINE_DATA_DIR") or os.getenv("DATA_DIR") or "."

    return PipelineSettings(
        owid_co2_url=os.getenv("OWID_CO2_URL", DEFAULT_OWID_CO2_URL),
        data_dir=Path(data_dir),
        storage_backend=backend,
        s3_bucket=bucket,
        s3_base_prefix=os.getenv("PIPELINE_S3_BASE_PREFIX") or None,
        http_timeout_seconds=timeout,
    )


__all__ = [
    "DEFAULT_OWID_CO2_URL",
    "STORAGE_BACKENDS",
    "PipelineSettings",
    "load_dotenv_if_present",
    "load_settings",
]
