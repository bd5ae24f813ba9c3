from dataclasses import dataclass, field
from enum import Enum
import logging
import time

from fastapi.concurrency import run_in_threadpool
from langchain_core.runnables import Runnable

from docqa.config import settings
from docqa.modules.projects.storage import StorageService
from docqa.modules.qa.pipeline import RetrievalPipeline
from docqa.modules.qa.prompts import (
    GROUP_QUESTION_PROMPT, INTERVIEW_QUESTION_PROMPT, INTERVIEWEE_NAME_QUERY
)
from docqa.modules.qa.retry import ask_until_answered
from docqa.modules.qa.schemas import QuestionBatchRequest, FileAnswer, QuestionAnswers
from docqa.modules.qa.tokens import count_tokens

logger = logging.getLogger(__name__)


class QAMode(str, Enum):
    GROUP = "group"          # one answer per file, summarised
    INTERVIEW = "interview"  # one answer per interviewee, first person


MODE_TEMPERATURE = {
    QAMode.GROUP: 0.0,
    QAMode.INTERVIEW: 0.1,
}

MODE_PROMPT = {
    QAMode.GROUP: GROUP_QUESTION_PROMPT,
    QAMode.INTERVIEW: INTERVIEW_QUESTION_PROMPT,
}


@dataclass
class QABatchResult:
    file_name: str
    answers: QuestionAnswers = field(default_factory=dict)
    total_tokens: int = 0
    completed: bool = False
    duration_seconds: float = 0.0


class QAService:
    def __init__(self, storage: StorageService, pipeline: RetrievalPipeline):
        self.storage = storage
        self.pipeline = pipeline

    async def _ask(self, chain: Runnable, query: str) -> str:
        return await ask_until_answered(
            chain,
            query,
            timeout=settings.question_timeout_seconds,
            max_attempts=settings.question_max_attempts,
            backoff=settings.question_retry_backoff_seconds,
            backoff_max=settings.question_retry_backoff_max_seconds,
        )

    async def _respondent_name(self, chain: Runnable, request: QuestionBatchRequest, mode: QAMode) -> str:
        if mode == QAMode.GROUP:
            return request.file_name
        logger.info("------ Asking for the interviewee's name ------")
        name = (await self._ask(chain, INTERVIEWEE_NAME_QUERY)).strip()
        logger.info(f"Interviewee name: {name}")
        return name or request.file_name

    async def answer_questions(self, request: QuestionBatchRequest, mode: QAMode) -> QABatchResult:
        """Answer every question against one PDF of the project bucket.

        Questions are processed strictly in order. If the file cannot be
        downloaded or indexed the result is empty; if answering fails midway
        the answers gathered so far are kept.
        """
        result = QABatchResult(file_name=request.file_name)
        start_time = time.monotonic()
        logger.info(f"Working on file {request.file_name} ({mode.value})")

        data = await run_in_threadpool(
            self.storage.download_with_retry, request.project_name, request.file_name
        )
        if data is None:
            return result

        try:
            chain = await run_in_threadpool(
                self.pipeline.build_chain_from_pdf, data, MODE_TEMPERATURE[mode]
            )
        except Exception as e:
            logger.error(f"Error indexing file {request.file_name}: {str(e)}")
            return result

        try:
            name = await self._respondent_name(chain, request, mode)
            for question in request.questions:
                logger.info(f"------ Processing question: {question.text} ------")
                query = MODE_PROMPT[mode].format(question=question.text)
                answer = await self._ask(chain, query)
                result.answers.setdefault(question.text, []).append(
                    FileAnswer(name=name, respuesta=answer)
                )
                result.total_tokens += count_tokens(answer, settings.chat_model)
            result.completed = True
            logger.info(f"------ Finished file {request.file_name} ------")
        except Exception as e:
            logger.error(f"Error answering questions for {request.file_name}: {str(e)}")

        result.duration_seconds = time.monotonic() - start_time
        logger.info(f"Total processing time: {result.duration_seconds:.2f} seconds")
        logger.info(f"Total tokens used: {result.total_tokens}")
        return result
