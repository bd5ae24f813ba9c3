from fastapi import APIRouter, Depends, UploadFile, File
from docqa.database.supabase_client import get_supabase
from docqa.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, FileUploadResponse, TableDataUpdate
)
from docqa.modules.projects.service import ProjectService
from docqa.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_supabase)) -> ProjectService:
    return ProjectService(supabase)


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """List projects, newest first"""
    return service.list_projects(limit=limit, offset=offset)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """Create a project and its storage bucket"""
    return service.create_project(project_data)


@router.get("/by-name/{name}", response_model=ProjectResponse)
async def get_project_by_name(
    name: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_project_by_name(name)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_project_by_id(project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return service.update_project(project_id, project_data)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """Delete project and its bucket"""
    service.delete_project(project_id)
    return None


@router.post("/{project_id}/files", response_model=FileUploadResponse, status_code=201)
async def upload_files(
    project_id: str,
    files: List[UploadFile] = File(...),
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Upload PDF files to the project bucket. Files whose name is already on the
    project, or repeated within the batch, are skipped and reported back.
    """
    return await service.upload_files(project_id, files)


@router.delete("/{project_id}/files/{file_name}", response_model=ProjectResponse)
async def remove_file(
    project_id: str,
    file_name: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return service.remove_file(project_id, file_name)


@router.put("/{project_id}/table-data", response_model=ProjectResponse)
async def save_table_data(
    project_id: str,
    body: TableDataUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """Save question/answer results into the project's tableData"""
    return service.save_table_data(project_id, body.table_data)
