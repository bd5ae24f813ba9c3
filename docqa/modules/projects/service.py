from supabase import Client
from docqa.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectFile, FileUploadResponse
)
from docqa.modules.projects.storage import StorageService
from typing import List, Optional, Dict, Any, Tuple
from fastapi import HTTPException, UploadFile
import logging

logger = logging.getLogger(__name__)


def _flatten_files(files: Any) -> List[Dict[str, Any]]:
    """Rows written by the first UI store files as [[{...}], [{...}]]; accept both shapes."""
    flat = []
    for item in files or []:
        if isinstance(item, list):
            flat.extend(i for i in item if isinstance(i, dict))
        elif isinstance(item, dict):
            flat.append(item)
    return flat


def filter_duplicate_files(
    files: List[UploadFile],
    existing_names: List[str]
) -> Tuple[List[UploadFile], List[str]]:
    """Split an upload batch into unique files and skipped names.

    A file is skipped when its name is already on the project or appeared
    earlier in the same batch.
    """
    seen = set(existing_names)
    unique, skipped = [], []
    for file in files:
        if file.filename in seen:
            skipped.append(file.filename)
            continue
        seen.add(file.filename)
        unique.append(file)
    return unique, skipped


class ProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = StorageService(supabase)

    def _to_response(self, row: Dict[str, Any]) -> ProjectResponse:
        row = dict(row)
        row["files"] = _flatten_files(row.get("files"))
        return ProjectResponse(**row)

    def list_projects(self, limit: int = 50, offset: int = 0) -> List[ProjectResponse]:
        try:
            result = self.supabase.table("proyectos")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [self._to_response(p) for p in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_project_row(self, project_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("proyectos").select("*").eq("id", project_id).maybe_single().execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Project not found")
        return result.data

    def get_project_by_id(self, project_id: str) -> ProjectResponse:
        return self._to_response(self.get_project_row(project_id))

    def get_project_by_name(self, name: str) -> ProjectResponse:
        try:
            result = self.supabase.table("proyectos").select("*").eq("name", name).maybe_single().execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Project not found")
        return self._to_response(result.data)

    def create_project(self, project_data: ProjectCreate) -> ProjectResponse:
        """Create the storage bucket, then the project row"""
        self._check_name_available(project_data.name)

        try:
            bucket_created = self.storage.ensure_bucket(project_data.name)
        except Exception as e:
            logger.error(f"Error creating bucket {project_data.name}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to prepare storage: {str(e)}")

        try:
            result = self.supabase.table("proyectos").insert({
                "name": project_data.name,
                "description": project_data.description,
                "files": [],
                "tableData": {},
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create project")

            return self._to_response(result.data[0])
        except HTTPException:
            if bucket_created:
                self.storage.delete_bucket(project_data.name)
            raise
        except Exception as e:
            logger.error(f"Error creating project {project_data.name}: {str(e)}")
            if bucket_created:
                self.storage.delete_bucket(project_data.name)
            raise HTTPException(status_code=500, detail=str(e))

    def _check_name_available(self, name: str, project_id: Optional[str] = None) -> None:
        try:
            existing = self.supabase.table("proyectos").select("id").eq("name", name).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if any(row.get("id") != project_id for row in existing.data or []):
            raise HTTPException(status_code=400, detail="A project with this name already exists")

    def _rename_bucket(self, row: Dict[str, Any], new_name: str) -> None:
        """Move an empty project onto a bucket named new_name"""
        if _flatten_files(row.get("files")):
            raise HTTPException(status_code=400, detail="Remove the project's files before renaming it")
        try:
            self.storage.ensure_bucket(new_name)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to prepare storage: {str(e)}")
        self.storage.delete_bucket(row["name"])

    def update_project(self, project_id: str, project_data: ProjectUpdate) -> ProjectResponse:
        """Update name or description. The bucket follows the name, so only empty projects can be renamed."""
        update_data = project_data.model_dump(exclude_none=True)
        if not update_data:
            return self.get_project_by_id(project_id)

        new_name = update_data.get("name")
        if new_name is not None:
            row = self.get_project_row(project_id)
            if new_name == row["name"]:
                del update_data["name"]
            else:
                self._check_name_available(new_name, project_id)
                self._rename_bucket(row, new_name)
            if not update_data:
                return self._to_response(row)
        try:
            result = self.supabase.table("proyectos")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
            return self._to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_project(self, project_id: str) -> bool:
        """Delete project row and its bucket"""
        row = self.get_project_row(project_id)
        try:
            result = self.supabase.table("proyectos").delete().eq("id", project_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        self.storage.delete_bucket(row["name"])
        return len(result.data) > 0

    async def upload_files(self, project_id: str, files: List[UploadFile]) -> FileUploadResponse:
        """Upload a batch of PDFs into the project bucket, skipping duplicate names"""
        row = self.get_project_row(project_id)
        bucket = row["name"]
        current_files = _flatten_files(row.get("files"))

        for file in files:
            if not file.filename or not file.filename.lower().endswith(".pdf"):
                raise HTTPException(status_code=400, detail="Only PDF files are accepted")

        unique, skipped = filter_duplicate_files(files, [f.get("name") for f in current_files])
        if skipped:
            logger.info(f"Skipping duplicate files for project {bucket}: {skipped}")

        try:
            self.storage.ensure_bucket(bucket)
        except Exception as e:
            logger.error(f"Error ensuring bucket {bucket}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to prepare storage: {str(e)}")

        uploaded: List[ProjectFile] = []
        failure: Optional[HTTPException] = None
        for file in unique:
            content = await file.read()
            try:
                # Names listed on the project were filtered out above, so any
                # object already at this path is a leftover from a failed batch
                path = self.storage.upload(
                    bucket, file.filename, content, file.content_type or "application/pdf", upsert=True
                )
                url = self.storage.create_signed_url(bucket, path)
            except Exception as e:
                logger.error(f"Error uploading {file.filename} to {bucket}: {str(e)}")
                failure = HTTPException(status_code=500, detail=f"Failed to upload {file.filename}: {str(e)}")
                break
            uploaded.append(ProjectFile(
                name=file.filename,
                size=round(len(content) / (1024 * 1024), 2),
                url=url,
            ))
            logger.info(f"Uploaded {file.filename} to bucket {bucket}")

        if uploaded:
            new_files = current_files + [f.model_dump() for f in uploaded]
            try:
                self.supabase.table("proyectos")\
                    .update({"files": new_files})\
                    .eq("id", project_id)\
                    .execute()
            except Exception as e:
                raise HTTPException(status_code=500, detail=f"Failed to update project files: {str(e)}")

        # Files uploaded before the failure are already recorded on the project
        if failure:
            raise failure

        return FileUploadResponse(
            project_id=project_id,
            uploaded=uploaded,
            skipped=skipped,
            message=f"Uploaded {len(uploaded)} file(s)"
        )

    def remove_file(self, project_id: str, file_name: str) -> ProjectResponse:
        """Remove a file from the bucket and from the project's file list"""
        row = self.get_project_row(project_id)
        current_files = _flatten_files(row.get("files"))
        remaining = [f for f in current_files if f.get("name") != file_name]
        if len(remaining) == len(current_files):
            raise HTTPException(status_code=404, detail="File not found")

        self.storage.remove(row["name"], [file_name])
        try:
            result = self.supabase.table("proyectos")\
                .update({"files": remaining})\
                .eq("id", project_id)\
                .execute()
            return self._to_response(result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def save_table_data(self, project_id: str, table_data: Dict[str, Any]) -> ProjectResponse:
        """Persist a question/answer map into the project's tableData column"""
        self.get_project_row(project_id)
        try:
            result = self.supabase.table("proyectos")\
                .update({"tableData": table_data})\
                .eq("id", project_id)\
                .execute()
            return self._to_response(result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_table_data(self, project_id: str) -> Optional[Dict[str, Any]]:
        return self.get_project_row(project_id).get("tableData")
