import logging
import mimetypes
import os
import re
import tempfile
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.orm import Session
from starlette.background import BackgroundTask
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
)

from photovault.dao import PhotoDAO
from photovault.deps import get_current_user, get_db, get_storage
from photovault.models import Photo
from photovault.responses import storage_failure_response
from photovault.schemas import PhotoListResponse, PhotoResponse
from photovault.storage import PhotoStorage

logger = logging.getLogger(__name__)

router = APIRouter()

_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")
_SIZE_RE = re.compile(r"^\d+x\d+(x[A-Za-z]+)?$")

NOT_FOUND = {"detail": "Photo not found"}


def _safe_name(filename: str) -> str:
    name = _NAME_RE.sub("-", os.path.basename(filename)).strip("-.")
    return name or "photo.jpg"


def _write_temp(body: bytes, suffix: str) -> str:
    fd, tmp_name = tempfile.mkstemp(suffix=suffix)
    with os.fdopen(fd, "wb") as handle:
        handle.write(body)
    return tmp_name


def photo_response(photo: Photo, storage: PhotoStorage) -> PhotoResponse:
    return PhotoResponse(
        id=photo.id,
        title=photo.title,
        date_taken=photo.date_taken,
        path_original=photo.path_original,
        path_base=photo.path_base,
        versions={version.size: version.path for version in photo.versions},
        host=storage.get_host(),
    )


@router.get("/photos", response_model=PhotoListResponse)
def get_photos(
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> PhotoListResponse:
    photos = PhotoDAO(db).list(limit=limit, offset=offset)
    return PhotoListResponse(photo_ids=[photo.id for photo in photos])


@router.get("/photos/{photo_id}", response_model=PhotoResponse)
def get_photo(
    photo_id: int,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[PhotoStorage, Depends(get_storage)],
) -> JSONResponse | PhotoResponse:
    photo = PhotoDAO(db).get(photo_id)
    if photo is None:
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content=NOT_FOUND)
    return photo_response(photo, storage)


@router.post(
    "/photos",
    response_model=PhotoResponse,
    status_code=HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def upload_photo(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[PhotoStorage, Depends(get_storage)],
    filename: Annotated[str, Query(min_length=1)],
    title: str | None = None,
    date_taken: datetime | None = None,
    body: Annotated[bytes, Body(media_type="image/jpeg")] = b"",
) -> JSONResponse | PhotoResponse:
    """
    Store the request body as a new photo: the original plus a base copy.
    """
    if not body:
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST, content={"detail": "Empty upload"}
        )

    name = f"{uuid.uuid4().hex[:12]}-{_safe_name(filename)}"
    month = (date_taken or datetime.now(UTC)).strftime("%Y%m")
    path_original = f"/original/{month}/{name}"
    path_base = f"/base/{month}/{name}"

    local_file = _write_temp(body, Path(name).suffix)
    try:
        result = storage.put_photos(
            [(local_file, path_original, date_taken), (local_file, path_base, date_taken)]
        )
    finally:
        os.remove(local_file)
    if not result:
        return storage_failure_response(result)

    photo = PhotoDAO(db).create(
        path_original=path_original,
        path_base=path_base,
        title=title,
        date_taken=date_taken,
    )
    logger.info("Stored photo %s as %s", photo.id, path_original)
    return photo_response(photo, storage)


@router.post(
    "/photos/{photo_id}/versions",
    response_model=PhotoResponse,
    status_code=HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def upload_version(
    photo_id: int,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[PhotoStorage, Depends(get_storage)],
    size: Annotated[str, Query(pattern=_SIZE_RE.pattern)],
    body: Annotated[bytes, Body(media_type="image/jpeg")] = b"",
) -> JSONResponse | PhotoResponse:
    """
    Store a derived size (e.g. a thumbnail rendered by a client) for a photo.
    """
    dao = PhotoDAO(db)
    photo = dao.get(photo_id)
    if photo is None:
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content=NOT_FOUND)
    if not body:
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST, content={"detail": "Empty upload"}
        )

    original = Path(photo.path_original)
    remote_file = f"/custom/{original.parent.name}/{original.stem}_{size}{original.suffix}"
    local_file = _write_temp(body, original.suffix)
    try:
        result = storage.put_photo(local_file, remote_file)
    finally:
        os.remove(local_file)
    if not result:
        return storage_failure_response(result)

    dao.add_version(photo.id, size, remote_file)
    db.refresh(photo)
    return photo_response(photo, storage)


@router.get("/photos/{photo_id}/download", response_model=None)
def download_photo(
    photo_id: int,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[PhotoStorage, Depends(get_storage)],
) -> Any:
    photo = PhotoDAO(db).get(photo_id)
    if photo is None:
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content=NOT_FOUND)
    result = storage.download_photo(photo.to_record())
    if not result:
        return storage_failure_response(result)
    media_type, _ = mimetypes.guess_type(photo.path_original)
    return FileResponse(
        result.value,
        media_type=media_type or "application/octet-stream",
        filename=Path(photo.path_original).name,
        background=BackgroundTask(os.remove, result.value),
    )


@router.delete(
    "/photos/{photo_id}",
    dependencies=[Depends(get_current_user)],
)
def delete_photo(
    photo_id: int,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[PhotoStorage, Depends(get_storage)],
) -> JSONResponse:
    dao = PhotoDAO(db)
    photo = dao.get(photo_id)
    if photo is None:
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content=NOT_FOUND)
    result = storage.delete_photo(photo.to_record())
    if not result:
        return storage_failure_response(result)
    dao.delete(photo_id)
    return JSONResponse(content={"status": "deleted", "keys": result.value})
