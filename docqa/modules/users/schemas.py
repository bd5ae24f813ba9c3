from pydantic import BaseModel, EmailStr
from typing import Optional, List, Literal
from datetime import datetime

UserRole = Literal["admin", "user"]
UserStatus = Literal["activo", "restringido", "vacaciones"]

USER_STATUSES: List[str] = ["activo", "restringido", "vacaciones"]
SORTABLE_COLUMNS: List[str] = ["name", "role", "status"]


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str
    role: UserRole = "user"


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    avatar: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TableColumn(BaseModel):
    name: str
    uid: str
    sortable: bool = False


class StatusOption(BaseModel):
    name: str
    uid: str


class UserTableMeta(BaseModel):
    columns: List[TableColumn]
    statusOptions: List[StatusOption]
