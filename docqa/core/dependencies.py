"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from docqa.database.supabase_client import get_supabase
from docqa.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

ADMIN_ROLE = "admin"


def get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for the caller's profile row."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    return auth_service.get_current_user(token)


def is_super_user(user_data: dict) -> bool:
    """Check if user is a super user from app_metadata (set server-side, not editable by users)"""
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("type") == "super_user"


def get_user_profile(
    user_id: str,
    auth_service: AuthService,
    cache: Optional[Dict[str, Any]] = None
) -> Optional[Dict[str, Any]]:
    """Return the profiles row for user_id. Uses request-scoped cache when provided."""
    if cache is not None and "profile" in cache:
        return cache["profile"]
    try:
        profile = auth_service.get_profile(user_id)
    except Exception as e:
        logger.error(f"Error getting user profile: {e}")
        profile = None
    if cache is not None:
        cache["profile"] = profile
    return profile


def is_admin(user_data: dict, profile: Optional[Dict[str, Any]]) -> bool:
    if is_super_user(user_data):
        return True
    if profile and profile.get("role") == ADMIN_ROLE:
        return True
    # Fall back to sign-up metadata when the profile row has not been mirrored yet
    return profile is None and (user_data.get("user_metadata") or {}).get("role") == ADMIN_ROLE


def require_admin(
    request: Request,
    user_data: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Dependency to check that the caller may use the admin panel"""
    profile = get_user_profile(user_data["id"], auth_service, get_request_cache(request))
    if not is_admin(user_data, profile):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return user_data
