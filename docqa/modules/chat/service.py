import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from langchain_core.documents import Document

from docqa.config import settings
from docqa.modules.projects.service import ProjectService
from docqa.modules.qa.pipeline import RetrievalPipeline
from docqa.modules.qa.retry import ask_with_timeout

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.1


def documents_from_table_data(table_data: Optional[Dict[str, Any]]) -> List[Document]:
    """One document per saved answer; object entries are JSON-encoded."""
    documents = []
    for question, entries in (table_data or {}).items():
        if not isinstance(entries, list):
            entries = [entries]
        for entry in entries:
            text = json.dumps(entry, ensure_ascii=False) if isinstance(entry, (dict, list)) else str(entry)
            documents.append(Document(
                page_content=f"{question}\n{text}",
                metadata={"question": question},
            ))
    return documents


class ChatService:
    def __init__(self, projects: ProjectService, pipeline: RetrievalPipeline):
        self.projects = projects
        self.pipeline = pipeline

    async def ask(self, project_id: str, message: str) -> str:
        """Answer one message against the project's saved question/answer table"""
        documents = documents_from_table_data(self.projects.get_table_data(project_id))
        if not documents:
            raise HTTPException(status_code=400, detail="Project has no saved answers to chat with")

        chain = await run_in_threadpool(self.pipeline.build_chain, documents, CHAT_TEMPERATURE)
        try:
            answer = await ask_with_timeout(chain, message, settings.llm_request_timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Chat answer for project {project_id} timed out")
            raise HTTPException(status_code=504, detail="The model did not answer in time")
        logger.info(f"Chat answer for project {project_id}: {answer}")
        return answer
