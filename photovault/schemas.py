from datetime import datetime

from pydantic import BaseModel


class PhotoListResponse(BaseModel):
    photo_ids: list[int]


class PhotoResponse(BaseModel):
    id: int
    title: str | None
    date_taken: datetime | None
    path_original: str
    path_base: str | None
    versions: dict[str, str]
    host: str


class StorageFailureResponse(BaseModel):
    detail: str
    reason: str | None
    retryable: bool


class SetupResponse(BaseModel):
    status: str
    identity: list[str]


class DiagnosticResponse(BaseModel):
    ok: bool
    message: str


class DiagnosticsResponse(BaseModel):
    identity: list[str]
    diagnostics: list[DiagnosticResponse]
