from __future__ import annotations

import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional

import pandas as pd

if TYPE_CHECKING:
    from env_loader import PipelineSettings


class StorageAdapter(ABC):
    """
    Abstraction over the underlying storage layer (local FS, S3).

    Implementations map logical keys such as
    "raw/owid_co2/snapshot_date=20240101/owid-co2-data.csv" to physical
    locations.
    """

    @abstractmethod
    def write_raw(self, key: str, content: bytes) -> str:
        """
        Persist arbitrary bytes at the given key.

        Returns the fully-qualified location string, for example:
        - Local: "data/raw/owid_co2/.../owid-co2-data.csv"
        - S3:    "s3://my-bucket/raw/owid_co2/.../owid-co2-data.csv"
        """

    @abstractmethod
    def read_raw(self, key: str) -> bytes:
        """Read raw bytes previously stored at the given key."""

    @abstractmethod
    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        """Persist a DataFrame as Parquet and return its location."""

    @abstractmethod
    def read_parquet(self, key: str) -> pd.DataFrame:
        """Load a Parquet file stored at the given key into a DataFrame."""

    @abstractmethod
    def list_keys(self, prefix: str) -> List[str]:
        """List logical keys under the given prefix."""

    def write_csv(self, df: pd.DataFrame, key: str) -> str:
        """Persist a DataFrame as UTF-8 CSV (no index) and return its location."""
        buf = io.StringIO()
        df.to_csv(buf, index=False)
        return self.write_raw(key, buf.getvalue().encode("utf-8"))


class LocalStorageAdapter(StorageAdapter):
    """
    Local filesystem-backed storage adapter.

    Keys are relative paths under `root_dir`:
        root_dir = Path("data")
        key      = "raw/owid_co2/file.csv"
        -> actual path: data/raw/owid_co2/file.csv
    """

    def __init__(self, root_dir: Path | str = ".") -> None:
        self.root_dir = Path(root_dir)

    def _resolve(self, key: str) -> Path:
        path = self.root_dir / key
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def write_raw(self, key: str, content: bytes) -> str:
        path = self._resolve(key)
        with path.open("wb") as f:
            f.write(content)
        return str(path)

    def read_raw(self, key: str) -> bytes:
        path = self.root_dir / key
        with path.open("rb") as f:
            return f.read()

    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        path = self._resolve(key)
        df.to_parquet(path, index=False)
        return str(path)

    def read_parquet(self, key: str) -> pd.DataFrame:
        return pd.read_parquet(self.root_dir / key)

    def list_keys(self, prefix: str) -> List[str]:
        base = self.root_dir / prefix
        if not base.exists():
            return []

        keys: List[str] = []
        for path in base.rglob("*"):
            if path.is_file():
                rel = path.relative_to(self.root_dir)
                keys.append(str(rel).replace(os.sep, "/"))
        return sorted(keys)


class S3StorageAdapter(StorageAdapter):
    """
    S3-backed storage adapter using boto3.

    Keys map directly to S3 object keys under the configured bucket/prefix.
    """

    def __init__(
        self,
        bucket: str,
        *,
        base_prefix: Optional[str] = None,
        boto3_client: Optional["boto3.client"] = None,
    ) -> None:
        if boto3_client is None:
            import boto3  # lazy import to keep local-only runs lighter

            boto3_client = boto3.client("s3")

        self.bucket = bucket
        self.base_prefix = (base_prefix or "").strip("/")
        self._s3 = boto3_client

    def _full_key(self, key: str) -> str:
        key = key.lstrip("/")
        if self.base_prefix:
            return f"{self.base_prefix}/{key}"
        return key

    def write_raw(self, key: str, content: bytes) -> str:
        full_key = self._full_key(key)
        self._s3.put_object(Bucket=self.bucket, Key=full_key, Body=content)
        return f"s3://{self.bucket}/{full_key}"

    def read_raw(self, key: str) -> bytes:
        resp = self._s3.get_object(Bucket=self.bucket, Key=self._full_key(key))
        return resp["Body"].read()

    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        buffer = io.BytesIO()
        df.to_parquet(buffer, index=False)
        return self.write_raw(key, buffer.getvalue())

    def read_parquet(self, key: str) -> pd.DataFrame:
        return pd.read_parquet(io.BytesIO(self.read_raw(key)))

    def list_keys(self, prefix: str) -> List[str]:
        full_prefix = self._full_key(prefix).rstrip("/") + "/"
        paginator = self._s3.get_paginator("list_objects_v2")
        keys: List[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=full_prefix):
            contents: Iterable[dict] = page.get("Contents") or []
            for obj in contents:
                key = obj["Key"]
                # strip base_prefix so callers always see logical keys
                if self.base_prefix and key.startswith(self.base_prefix + "/"):
                    key = key[len(self.base_prefix) + 1 :]
                keys.append(key)
        return sorted(keys)


def build_storage_adapter(settings: "PipelineSettings") -> StorageAdapter:
    """Instantiate the storage adapter selected by PipelineSettings."""
    if settings.storage_backend == "s3":
        if not settings.s3_bucket:
            raise RuntimeError("S3 storage selected but no bucket configured")
        return S3StorageAdapter(settings.s3_bucket, base_prefix=settings.s3_base_prefix)
    return LocalStorageAdapter(settings.data_dir)
