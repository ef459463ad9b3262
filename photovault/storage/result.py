from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple


class UploadMode(str, Enum):
    """How local file bytes reach the remote store."""

    ATTACHMENT = "attachment"
    INLINE = "inline"


class FailureReason(str, Enum):
    LOCAL_FILE_MISSING = "local_file_missing"
    TRANSPORT_FAILURE = "transport_failure"
    INVALID_BUCKET_NAME = "invalid_bucket_name"
    PARTIAL_DELETE_FAILURE = "partial_delete_failure"
    INVALID_REMOTE_KEY = "invalid_remote_key"

    @property
    def retryable(self) -> bool:
        return self is FailureReason.TRANSPORT_FAILURE


@dataclass(frozen=True, slots=True)
class StorageResult:
    """
    Outcome of a storage operation.

    Truthiness follows `ok`, so callers that only need success/failure can
    keep treating the result as a boolean.
    """

    ok: bool
    reason: FailureReason | None = None
    detail: str = ""
    value: Any = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None) -> "StorageResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(
        cls, reason: FailureReason, detail: str = "", value: Any = None
    ) -> "StorageResult":
        return cls(ok=False, reason=reason, detail=detail, value=value)


class DiagnosticLine(NamedTuple):
    ok: bool
    message: str
