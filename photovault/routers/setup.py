from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from photovault.deps import get_current_user, get_storage
from photovault.responses import storage_failure_response
from photovault.schemas import DiagnosticResponse, DiagnosticsResponse, SetupResponse
from photovault.storage import PhotoStorage

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("/setup", response_model=SetupResponse)
def setup(
    storage: Annotated[PhotoStorage, Depends(get_storage)],
    edit: bool = False,
) -> JSONResponse | SetupResponse:
    """
    Initialize the storage backend (create the bucket and set its policy).
    """
    result = storage.initialize(edit)
    if not result:
        return storage_failure_response(result)
    return SetupResponse(status="ok", identity=sorted(storage.identity()))


@router.get("/diagnostics", response_model=DiagnosticsResponse)
def diagnostics(
    storage: Annotated[PhotoStorage, Depends(get_storage)],
) -> DiagnosticsResponse:
    return DiagnosticsResponse(
        identity=sorted(storage.identity()),
        diagnostics=[
            DiagnosticResponse(ok=line.ok, message=line.message)
            for line in storage.diagnostics()
        ],
    )
