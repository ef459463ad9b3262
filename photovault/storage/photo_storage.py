import logging
import os
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from photovault.config import StorageConfig

from .result import DiagnosticLine, FailureReason, StorageResult, UploadMode

PATH_FIELD_PREFIX = "path"
ORIGINAL_SEGMENT = "/original/"

_LEADING_SLASHES = re.compile(r"^/+")

PhotoFile = tuple[str, str, datetime | None]


class PhotoStorage(ABC):
    """
    Interface for photo storage backends.

    Operations never raise on storage failures; they return a StorageResult
    and log what went wrong.
    """

    def __init__(
        self, config: StorageConfig, logger: logging.Logger | None = None
    ) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.upload_type = UploadMode.ATTACHMENT
        self.store_thumbs = config.store_thumbs

    @abstractmethod
    def put_photo(
        self, local_file: str, remote_file: str, date_taken: datetime | None = None
    ) -> StorageResult:
        """
        Upload the local file under the given remote key.
        """
        error_message = "put_photo not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def get_photo(self, remote_file: str) -> StorageResult:
        """
        Fetch the remote key into a new temporary file. The result value is
        the local path, which the caller must remove.
        """
        error_message = "get_photo not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def delete_photo(self, photo: Mapping[str, Any]) -> StorageResult:
        """
        Delete every stored version referenced by the photo record.
        """
        error_message = "delete_photo not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def initialize(self, is_edit_mode: bool = False) -> StorageResult:
        """
        Prepare the backend (create buckets, directories, permissions).
        """
        error_message = "initialize not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def diagnostics(self) -> list[DiagnosticLine]:
        error_message = "diagnostics not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def identity(self) -> frozenset[str]:
        error_message = "identity not implemented"
        raise NotImplementedError(error_message)

    def put_photos(self, files: Sequence[PhotoFile]) -> StorageResult:
        """
        Upload each (local_file, remote_file, date_taken) entry in order.

        Every entry is attempted. The batch succeeds only if all entries
        succeed; on failure the result value lists the remote keys that failed.
        """
        failed: list[str] = []
        first_failure: StorageResult | None = None
        for local_file, remote_file, date_taken in files:
            result = self.put_photo(local_file, remote_file, date_taken)
            if not result:
                failed.append(self.normalize_path(remote_file))
                first_failure = first_failure or result
        if first_failure is None:
            return StorageResult.success()
        return StorageResult.failure(
            first_failure.reason or FailureReason.TRANSPORT_FAILURE,
            f"{len(failed)} of {len(files)} photos could not be stored",
            value=failed,
        )

    def download_photo(self, photo: Mapping[str, Any]) -> StorageResult:
        """
        Fetch the best stored copy of a photo record. Without thumbnail
        retention the original is never uploaded, so the base copy is used.
        """
        if not self.store_thumbs and photo.get("pathBase"):
            return self.get_photo(photo["pathBase"])
        return self.get_photo(photo["pathOriginal"])

    @contextmanager
    def fetched_photo(self, remote_file: str) -> Iterator[StorageResult]:
        """
        Like get_photo, but the temporary file is removed on exit.
        """
        result = self.get_photo(remote_file)
        try:
            yield result
        finally:
            if result and os.path.exists(result.value):
                os.remove(result.value)

    def get_host(self) -> str:
        return self.config.host

    def get_meta_data(self, local_file: str) -> dict[str, Any]:
        return {}

    def set_upload_type(self, upload_type: UploadMode) -> None:
        self.upload_type = UploadMode(upload_type)

    def set_store_thumbs(self, store_thumbs: bool) -> None:
        self.store_thumbs = store_thumbs

    @staticmethod
    def normalize_path(path: str) -> str:
        """Remove leading slashes; object keys never start with one."""
        return _LEADING_SLASHES.sub("", path)

    def _check_local_file(self, local_file: str) -> StorageResult | None:
        if not Path(local_file).exists():
            self.logger.warning(
                "The photo %s does not exist so put_photo failed", local_file
            )
            return StorageResult.failure(
                FailureReason.LOCAL_FILE_MISSING, f"{local_file} does not exist"
            )
        return None

    def _skips_original(self, remote_file: str) -> bool:
        if self.store_thumbs:
            return False
        return ORIGINAL_SEGMENT in "/" + self.normalize_path(remote_file)

    def _path_keys(self, photo: Mapping[str, Any]) -> list[str]:
        return [
            self.normalize_path(str(value))
            for key, value in photo.items()
            if key.startswith(PATH_FIELD_PREFIX) and value
        ]
