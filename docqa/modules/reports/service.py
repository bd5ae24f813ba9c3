import logging
from typing import Any, Dict, List, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser

from docqa.modules.projects.service import ProjectService
from docqa.modules.qa.prompts import VERBATIM_PROMPT
from docqa.modules.reports.schemas import VerbatimReport

logger = logging.getLogger(__name__)


class VerbatimExtractor:
    """Picks the most important fragment of an answer without rewording it."""

    def __init__(self, llm: BaseChatModel):
        self.chain = VERBATIM_PROMPT | llm | StrOutputParser()

    async def extract(self, text: str) -> str:
        if not text:
            return ""
        return (await self.chain.ainvoke({"text": text})).strip()


class ReportService:
    def __init__(self, projects: ProjectService, extractor: VerbatimExtractor):
        self.projects = projects
        self.extractor = extractor

    async def build_verbatims(self, project_id: str) -> VerbatimReport:
        table_data: Optional[Dict[str, Any]] = self.projects.get_table_data(project_id)
        report: VerbatimReport = []
        for question, entries in (table_data or {}).items():
            if not isinstance(entries, list):
                logger.info(f"{question}: value is not a list, skipping")
                continue
            results: List[Dict[str, str]] = []
            for entry in entries:
                if not isinstance(entry, dict):
                    logger.info(f"{question}: entry {entry!r} has no respondent, skipping")
                    continue
                try:
                    verbatim = await self.extractor.extract(entry.get("respuesta") or "")
                except Exception as e:
                    logger.error(f"{question}: could not extract verbatim for {entry.get('name')}: {str(e)}")
                    verbatim = ""
                results.append({entry.get("name") or "": verbatim})
            report.append({question: results})
        return report
