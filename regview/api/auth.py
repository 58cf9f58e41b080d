"""Authentication API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from regview.core.auth import authenticate_user, create_access_token, get_current_user
from regview.schemas.response import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=ApiResponse)
async def login(credentials: LoginRequest):
    """Exchange the configured username/password for an access token."""
    if not authenticate_user(credentials.username, credentials.password):
        logger.info(f"Failed login attempt for user '{credentials.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token = create_access_token(credentials.username)
    logger.info(f"User '{credentials.username}' logged in")
    return ApiResponse.success("Login successful", TokenResponse(access_token=token))


@router.get("/me", response_model=ApiResponse)
async def me(user: str = Depends(get_current_user)):
    return ApiResponse.success("Authenticated", {"username": user})
