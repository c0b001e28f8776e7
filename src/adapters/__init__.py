"""
Adapters package
----------------

I/O and metadata abstractions so the CO2 analysis can read its RAW
CSV and write its artefacts either on the local filesystem or on S3
with the same business logic.
"""

from .storage import (  # noqa: F401
    LocalStorageAdapter,
    S3StorageAdapter,
    StorageAdapter,
    build_storage_adapter,
)
from .metadata import (  # noqa: F401
    LocalMetadataAdapter,
    MetadataAdapter,
)

__all__ = [
    "StorageAdapter",
    "LocalStorageAdapter",
    "S3StorageAdapter",
    "build_storage_adapter",
    "MetadataAdapter",
    "LocalMetadataAdapter",
]
