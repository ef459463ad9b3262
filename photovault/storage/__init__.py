import os

from photovault.config import StorageConfig

from .filesystem_storage import FileSystemStorage
from .photo_storage import PhotoStorage
from .result import DiagnosticLine, FailureReason, StorageResult, UploadMode
from .s3_storage import S3Storage


def get_storage_backend(config: StorageConfig | None = None) -> PhotoStorage:
    """
    Factory for storage backend based on STORAGE_BACKEND env var.
    Defaults to S3Storage.

    Supported values (case-insensitive):
      - 's3'
      - 'filesystem'
    """
    config = config or StorageConfig.from_env()
    backend = os.getenv("STORAGE_BACKEND", "s3").lower()
    if backend in ("s3", ""):  # default
        return S3Storage(config)
    if backend == "filesystem":
        return FileSystemStorage(config)
    error_message = f"Unknown storage backend: {backend}"
    raise ValueError(error_message)


__all__ = [
    "DiagnosticLine",
    "FailureReason",
    "FileSystemStorage",
    "PhotoStorage",
    "S3Storage",
    "StorageResult",
    "UploadMode",
    "get_storage_backend",
]
