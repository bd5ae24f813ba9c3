from fastapi import APIRouter, Depends
from docqa.database.supabase_client import get_supabase
from docqa.modules.projects.service import ProjectService
from docqa.modules.qa.pipeline import RetrievalPipeline
from docqa.modules.qa.routes import get_retrieval_pipeline
from docqa.modules.reports.schemas import VerbatimReport
from docqa.modules.reports.service import ReportService, VerbatimExtractor
from docqa.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(
    supabase: Client = Depends(get_supabase),
    pipeline: RetrievalPipeline = Depends(get_retrieval_pipeline),
) -> ReportService:
    return ReportService(ProjectService(supabase), VerbatimExtractor(pipeline.chat_model(temperature=0.0)))


@router.get("/{project_id}/verbatims", response_model=VerbatimReport)
async def get_verbatims(
    project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    """Short verbatim quotes for every saved answer of the project, grouped by question"""
    return await service.build_verbatims(project_id)
