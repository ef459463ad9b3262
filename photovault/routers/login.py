import logging
import os
import secrets

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from photovault.utils.jwt import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    password: str


@router.post("/login", summary="Login", response_model=dict)
async def login(body: LoginRequest) -> JSONResponse:
    """
    Authenticate the owner by password and return a JWT access token.
    """
    env_password = os.getenv("BACKEND_PASSWORD") or ""
    if env_password and secrets.compare_digest(body.password, env_password):
        access_token = create_access_token("owner")
        return JSONResponse(
            {"access_token": access_token, "token_type": "bearer"},
            status_code=status.HTTP_200_OK,
        )
    logger.warning("Rejected login attempt")
    return JSONResponse(
        {"detail": "Invalid password"},
        status_code=status.HTTP_401_UNAUTHORIZED,
    )
