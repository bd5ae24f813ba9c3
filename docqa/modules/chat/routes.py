from fastapi import APIRouter, Depends
from docqa.database.supabase_client import get_supabase
from docqa.modules.chat.schemas import ChatRequest, ChatResponse
from docqa.modules.chat.service import ChatService
from docqa.modules.projects.service import ProjectService
from docqa.modules.qa.pipeline import RetrievalPipeline
from docqa.modules.qa.routes import get_retrieval_pipeline
from docqa.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/chat", tags=["chat"])


def get_chat_service(
    supabase: Client = Depends(get_supabase),
    pipeline: RetrievalPipeline = Depends(get_retrieval_pipeline),
) -> ChatService:
    return ChatService(ProjectService(supabase), pipeline)


@router.post("", response_model=ChatResponse)
async def chat(
    chat_request: ChatRequest,
    user_data: Dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """Ask a free-form question about a project's saved answers"""
    answer = await service.ask(chat_request.project_id, chat_request.message)
    return ChatResponse(answer=answer)
