from fastapi import APIRouter, Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from docqa.modules.auth.schemas import LoginRequest, TokenResponse, CurrentUserResponse
from docqa.modules.auth.service import AuthService
from docqa.core.dependencies import (
    get_auth_service, get_current_user, get_user_profile, is_admin, get_request_cache
)
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    request: Request,
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    """Get current authenticated user with profile role and status (for frontend UI)."""
    profile = get_user_profile(current_user["id"], service, get_request_cache(request))
    return CurrentUserResponse(
        **current_user,
        role=(profile or {}).get("role") or current_user["user_metadata"].get("role"),
        status=(profile or {}).get("status"),
        is_admin=is_admin(current_user, profile),
    )
