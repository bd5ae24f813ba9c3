from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


class ProjectFile(BaseModel):
    name: str
    size: Optional[float] = None  # MB, two decimals
    url: Optional[str] = None


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    files: List[ProjectFile] = []
    table_data: Optional[Dict[str, Any]] = Field(default=None, alias="tableData")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True


class FileUploadResponse(BaseModel):
    project_id: str
    uploaded: List[ProjectFile]
    skipped: List[str]
    message: str


class TableDataUpdate(BaseModel):
    table_data: Dict[str, Any] = Field(alias="tableData")

    class Config:
        populate_by_name = True
