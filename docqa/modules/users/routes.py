from fastapi import APIRouter, Depends
from docqa.database.supabase_client import get_service_supabase
from docqa.modules.users.schemas import UserCreate, UserUpdate, UserResponse, UserTableMeta
from docqa.modules.users.service import UserService
from docqa.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_service_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=List[UserResponse])
async def list_users(
    search: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 8,
    offset: int = 0,
    sort_by: str = "name",
    descending: bool = False,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """List user profiles. status is a comma-separated list, e.g. activo,vacaciones"""
    statuses = [s.strip() for s in status.split(",") if s.strip()] if status else None
    return service.list_users(
        search=search, statuses=statuses, limit=limit, offset=offset,
        sort_by=sort_by, descending=descending
    )


@router.get("/meta/columns", response_model=UserTableMeta)
async def get_table_meta(
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Columns and status options for the admin users table"""
    return service.get_table_meta()


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    user_data_body: UserCreate,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Create a user through Supabase Auth sign-up"""
    return service.create_user(user_data_body)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Get user by ID"""
    return service.get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data_body: UserUpdate,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Update name, role, status or avatar"""
    return service.update_user(user_id, user_data_body)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Delete user from Supabase Auth and profiles"""
    service.delete_user(user_id)
    return None
