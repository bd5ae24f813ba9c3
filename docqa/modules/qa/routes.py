from fastapi import APIRouter, Depends, Response
from docqa.database.supabase_client import get_supabase
from docqa.modules.projects.storage import StorageService
from docqa.modules.qa.pipeline import RetrievalPipeline
from docqa.modules.qa.schemas import QuestionBatchRequest, QuestionAnswers
from docqa.modules.qa.service import QAService, QAMode, QABatchResult
from docqa.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/qa", tags=["qa"])


def get_retrieval_pipeline() -> RetrievalPipeline:
    return RetrievalPipeline()


def get_qa_service(
    supabase: Client = Depends(get_supabase),
    pipeline: RetrievalPipeline = Depends(get_retrieval_pipeline),
) -> QAService:
    return QAService(StorageService(supabase), pipeline)


def _with_result_headers(response: Response, result: QABatchResult) -> QuestionAnswers:
    response.headers["X-Total-Tokens"] = str(result.total_tokens)
    response.headers["X-QA-Completed"] = "true" if result.completed else "false"
    return result.answers


@router.post("/group", response_model=QuestionAnswers)
async def answer_group(
    request_body: QuestionBatchRequest,
    response: Response,
    user_data: Dict = Depends(get_current_user),
    service: QAService = Depends(get_qa_service),
):
    """
    Answer each question against one project file. Every answer is a short
    Spanish summary keyed by question text, with the file name as `name`.
    """
    result = await service.answer_questions(request_body, QAMode.GROUP)
    return _with_result_headers(response, result)


@router.post("/interview", response_model=QuestionAnswers)
async def answer_interview(
    request_body: QuestionBatchRequest,
    response: Response,
    user_data: Dict = Depends(get_current_user),
    service: QAService = Depends(get_qa_service),
):
    """
    Answer each question against one interview transcript, in first person,
    with the interviewee's first name as `name`.
    """
    result = await service.answer_questions(request_body, QAMode.INTERVIEW)
    return _with_result_headers(response, result)
