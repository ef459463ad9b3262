from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_502_BAD_GATEWAY,
)

from photovault.schemas import StorageFailureResponse
from photovault.storage import FailureReason, StorageResult

_FAILURE_STATUS = {
    FailureReason.LOCAL_FILE_MISSING: HTTP_400_BAD_REQUEST,
    FailureReason.INVALID_BUCKET_NAME: HTTP_400_BAD_REQUEST,
    FailureReason.INVALID_REMOTE_KEY: HTTP_400_BAD_REQUEST,
    FailureReason.TRANSPORT_FAILURE: HTTP_502_BAD_GATEWAY,
    FailureReason.PARTIAL_DELETE_FAILURE: HTTP_502_BAD_GATEWAY,
}

# Exception text from the backend is logged by the adapter, never returned.
_FAILURE_DETAIL = {
    FailureReason.LOCAL_FILE_MISSING: "Upload file is missing",
    FailureReason.INVALID_BUCKET_NAME: "Bucket name is not valid",
    FailureReason.INVALID_REMOTE_KEY: "Photo path is not valid",
    FailureReason.TRANSPORT_FAILURE: "Storage backend request failed",
    FailureReason.PARTIAL_DELETE_FAILURE: "Some photo files could not be deleted",
}


def storage_failure_response(result: StorageResult) -> JSONResponse:
    """Translate a failed storage result into an HTTP error response."""
    reason = result.reason
    body = StorageFailureResponse(
        detail=_FAILURE_DETAIL.get(reason, "Storage operation failed"),
        reason=reason.value if reason else None,
        retryable=reason.retryable if reason else False,
    )
    return JSONResponse(
        status_code=_FAILURE_STATUS.get(reason, HTTP_502_BAD_GATEWAY),
        content=body.model_dump(),
    )
