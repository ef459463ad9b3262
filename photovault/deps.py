import logging
from collections.abc import Generator
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from photovault.database import SessionLocal
from photovault.storage import PhotoStorage, get_storage_backend
from photovault.utils.crypto import CredentialError
from photovault.utils.jwt import decode_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),  # noqa: B008
) -> dict[str, Any]:
    """
    Dependency to get the current user from a JWT bearer token.
    Raises 401 if the token is invalid or missing.
    """
    return decode_access_token(credentials.credentials)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session and closes it when done.
    Yields:
        Session: SQLAlchemy database session
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage() -> PhotoStorage:
    """
    Dependency that builds the configured storage backend for one request.
    Raises 500 if the backend cannot be built from configuration.
    """
    try:
        return get_storage_backend()
    except (CredentialError, RuntimeError, ValueError) as exc:
        logger.critical("Storage backend could not be configured: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Storage backend is not configured",
        ) from exc
