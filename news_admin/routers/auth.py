"""Authentication router."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from news_admin.auth import LoginRequest, LoginResult, decode_access_token, login
from news_admin.config import Settings, get_settings

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResult)
async def login_endpoint(request: LoginRequest, settings: Settings = Depends(get_settings)):
    """Login endpoint that returns a JWT token."""
    result = login(request.username, request.password, settings)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=result.model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result


@router.post("/verify")
async def verify_token(token: str, settings: Settings = Depends(get_settings)):
    """Verify if a token is valid."""
    try:
        session = decode_access_token(token, settings)
    except HTTPException:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return {"valid": True, "username": session.username}
