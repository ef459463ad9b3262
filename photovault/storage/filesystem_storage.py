import logging
import os
import shutil
import tempfile
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from photovault.config import StorageConfig

from .photo_storage import PhotoStorage
from .result import DiagnosticLine, FailureReason, StorageResult, UploadMode


class FileSystemStorage(PhotoStorage):
    """
    Photo storage using the local filesystem. Remote keys are paths relative
    to the configured root directory.
    """

    def __init__(
        self, config: StorageConfig, logger: logging.Logger | None = None
    ) -> None:
        super().__init__(config, logger or logging.getLogger(__name__))
        self.base_path = Path(config.local_root)

    def identity(self) -> frozenset[str]:
        return frozenset({"local"})

    def _target(self, key: str) -> Path | None:
        """
        Resolve a normalized key under the root, or None when it escapes it.
        """
        root = self.base_path.resolve()
        target = (root / key).resolve()
        if target == root or not target.is_relative_to(root):
            self.logger.warning("Rejected remote key outside %s: %s", root, key)
            return None
        return target

    def _invalid_key(self, key: str) -> StorageResult:
        return StorageResult.failure(
            FailureReason.INVALID_REMOTE_KEY, f"Invalid remote key {key}"
        )

    def put_photo(
        self, local_file: str, remote_file: str, date_taken: datetime | None = None
    ) -> StorageResult:
        missing = self._check_local_file(local_file)
        if missing is not None:
            return missing
        if self._skips_original(remote_file):
            return StorageResult.success()

        key = self.normalize_path(remote_file)
        target = self._target(key)
        if target is None:
            return self._invalid_key(key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if self.upload_type is UploadMode.INLINE:
                target.write_bytes(Path(local_file).read_bytes())
            else:
                shutil.copyfile(local_file, target)
        except OSError as exc:
            self.logger.critical("Could not put photo on the file system: %s", exc)
            return StorageResult.failure(FailureReason.TRANSPORT_FAILURE, str(exc))
        return StorageResult.success(key)

    def get_photo(self, remote_file: str) -> StorageResult:
        key = self.normalize_path(remote_file)
        source = self._target(key)
        if source is None:
            return self._invalid_key(key)
        fd, tmp_name = tempfile.mkstemp(prefix="opme")
        os.close(fd)
        try:
            shutil.copyfile(source, tmp_name)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            self.logger.warning("The photo %s could not be downloaded %s", key, exc)
            return StorageResult.failure(FailureReason.TRANSPORT_FAILURE, str(exc))
        return StorageResult.success(tmp_name)

    def delete_photo(self, photo: Mapping[str, Any]) -> StorageResult:
        keys = self._path_keys(photo)
        targets: dict[str, Path] = {}
        invalid: list[str] = []
        for key in keys:
            target = self._target(key)
            if target is None:
                invalid.append(key)
            else:
                targets[key] = target
        if invalid:
            return StorageResult.failure(
                FailureReason.INVALID_REMOTE_KEY,
                f"Invalid remote keys {', '.join(invalid)}",
                value=invalid,
            )
        failed: list[str] = []
        for key, target in targets.items():
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                self.logger.warning("Could not delete %s: %s", key, exc)
                failed.append(key)
        if failed:
            return StorageResult.failure(
                FailureReason.PARTIAL_DELETE_FAILURE,
                f"{len(failed)} files could not be deleted",
                value=failed,
            )
        return StorageResult.success(keys)

    def initialize(self, is_edit_mode: bool = False) -> StorageResult:
        self.logger.info("Initializing file system")
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.logger.critical("Could not create photo directory: %s", exc)
            return StorageResult.failure(FailureReason.TRANSPORT_FAILURE, str(exc))
        return StorageResult.success()

    def diagnostics(self) -> list[DiagnosticLine]:
        if self.base_path.is_dir() and os.access(self.base_path, os.W_OK):
            return [
                DiagnosticLine(
                    True, f'Photo directory "{self.base_path}" is writable.'
                )
            ]
        return [
            DiagnosticLine(
                False, f'Photo directory "{self.base_path}" is NOT writable.'
            )
        ]
