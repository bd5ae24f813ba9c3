from supabase import Client
from docqa.modules.users.schemas import (
    UserCreate, UserUpdate, UserResponse, UserTableMeta,
    TableColumn, StatusOption, USER_STATUSES, SORTABLE_COLUMNS
)
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

TABLE_META = UserTableMeta(
    columns=[
        TableColumn(name="Nombre", uid="name", sortable=True),
        TableColumn(name="Rol", uid="role", sortable=True),
        TableColumn(name="Correo Electronico", uid="email"),
        TableColumn(name="Estado", uid="status", sortable=True),
        TableColumn(name="Opciones", uid="actions"),
    ],
    statusOptions=[
        StatusOption(name="Activo", uid="activo"),
        StatusOption(name="Restringido", uid="restringido"),
        StatusOption(name="Vacaciones", uid="vacaciones"),
    ],
)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_users(
        self,
        search: Optional[str] = None,
        statuses: Optional[List[str]] = None,
        limit: int = 8,
        offset: int = 0,
        sort_by: str = "name",
        descending: bool = False
    ) -> List[UserResponse]:
        """List profiles filtered by name substring and status, sorted and paginated"""
        if sort_by not in SORTABLE_COLUMNS:
            raise HTTPException(status_code=400, detail=f"Cannot sort by '{sort_by}'")
        unknown = [s for s in statuses or [] if s not in USER_STATUSES]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown status: {', '.join(unknown)}")
        try:
            query = self.supabase.table("profiles").select("*")
            if search:
                query = query.ilike("name", f"%{search}%")
            # Selecting every status is the same as not filtering
            if statuses and set(statuses) != set(USER_STATUSES):
                query = query.in_("status", statuses)
            result = query.order(sort_by, desc=descending)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [UserResponse(**user) for user in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_user(self, user_data: UserCreate) -> UserResponse:
        """Sign the user up through Supabase Auth and mirror it into profiles"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": user_data.email,
                "password": user_data.password,
                "options": {
                    "data": {
                        "name": user_data.name,
                        "role": user_data.role,
                    }
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

        if not auth_response.user:
            raise HTTPException(status_code=400, detail="Failed to register user")

        try:
            result = self.supabase.table("profiles").upsert({
                "id": auth_response.user.id,
                "email": auth_response.user.email or user_data.email,
                "name": user_data.name,
                "role": user_data.role,
                "status": "activo",
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create user profile")
            logger.info(f"Created user {auth_response.user.id} with role {user_data.role}")
            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update user profile"""
        update_data = user_data.model_dump(exclude_none=True)
        if not update_data:
            return self.get_user_by_id(user_id)
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_user(self, user_id: str) -> bool:
        """Delete auth user through the handle_delete_user RPC, then its profile row"""
        try:
            self.supabase.rpc("handle_delete_user", {"user_id": user_id}).execute()
        except Exception as e:
            logger.error(f"handle_delete_user failed for {user_id}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to delete user: {str(e)}")
        try:
            result = self.supabase.table("profiles")\
                .delete()\
                .eq("id", user_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_table_meta(self) -> UserTableMeta:
        return TABLE_META
