"""Retrieval pipeline: PDF text -> chunks -> in-memory vector store -> QA chain.

Everything here is built fresh per request and thrown away afterwards; no
index is ever persisted.
"""
from io import BytesIO
from typing import Callable, List, Optional
import logging

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.runnables import Runnable, RunnablePassthrough
from langchain_core.vectorstores import InMemoryVectorStore
from langchain_openai import ChatOpenAI, OpenAIEmbeddings
from langchain_text_splitters import RecursiveCharacterTextSplitter
from pypdf import PdfReader

from docqa.config import settings
from docqa.modules.qa.prompts import STUFF_QA_PROMPT

logger = logging.getLogger(__name__)


class EmptyDocumentError(ValueError):
    """Raised when a document yields no text to index."""


def extract_pdf_text(data: bytes) -> str:
    """Extract text from an in-memory PDF, one page per line block."""
    reader = PdfReader(BytesIO(data))
    pages = []
    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            pages.append(page_text)
    return "\n".join(pages)


def split_documents(
    documents: List[Document],
    chunk_size: Optional[int] = None,
    chunk_overlap: Optional[int] = None
) -> List[Document]:
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size or settings.chunk_size,
        chunk_overlap=chunk_overlap if chunk_overlap is not None else settings.chunk_overlap,
    )
    return splitter.split_documents(documents)


def split_text(text: str, chunk_size: Optional[int] = None, chunk_overlap: Optional[int] = None) -> List[Document]:
    return split_documents([Document(page_content=text)], chunk_size, chunk_overlap)


def build_vector_store(chunks: List[Document], embeddings: Embeddings) -> InMemoryVectorStore:
    return InMemoryVectorStore.from_documents(chunks, embedding=embeddings)


def format_docs(docs: List[Document]) -> str:
    return "\n\n".join(doc.page_content for doc in docs)


def build_retrieval_chain(vector_store: InMemoryVectorStore, llm: BaseChatModel, k: int = 4) -> Runnable:
    """Stuff the top-k chunks into the QA prompt and return the model's text."""
    retriever = vector_store.as_retriever(search_kwargs={"k": k})
    return (
        {"context": retriever | format_docs, "question": RunnablePassthrough()}
        | STUFF_QA_PROMPT
        | llm
        | StrOutputParser()
    )


def _openai_kwargs() -> dict:
    # Leave api_key unset so langchain_openai falls back to OPENAI_API_KEY
    return {"api_key": settings.openai_api_key} if settings.openai_api_key else {}


def default_chat_model(temperature: float) -> BaseChatModel:
    return ChatOpenAI(
        model=settings.chat_model,
        temperature=temperature,
        timeout=settings.llm_request_timeout_seconds,
        **_openai_kwargs()
    )


class RetrievalPipeline:
    """Builds a per-request retrieval QA chain.

    Embeddings and the chat model factory are injectable; by default they
    talk to OpenAI using the configured models.
    """

    def __init__(
        self,
        embeddings: Optional[Embeddings] = None,
        llm_factory: Optional[Callable[[float], BaseChatModel]] = None,
        chunk_size: Optional[int] = None,
        chunk_overlap: Optional[int] = None,
        k: Optional[int] = None,
    ):
        self._embeddings = embeddings
        self.llm_factory = llm_factory or default_chat_model
        self.chunk_size = chunk_size or settings.chunk_size
        self.chunk_overlap = chunk_overlap if chunk_overlap is not None else settings.chunk_overlap
        self.k = k or settings.retriever_k

    @property
    def embeddings(self) -> Embeddings:
        if self._embeddings is None:
            self._embeddings = OpenAIEmbeddings(model=settings.embedding_model, **_openai_kwargs())
        return self._embeddings

    def chat_model(self, temperature: float) -> BaseChatModel:
        return self.llm_factory(temperature)

    def build_chain(self, documents: List[Document], temperature: float) -> Runnable:
        chunks = split_documents(documents, self.chunk_size, self.chunk_overlap)
        if not chunks:
            raise EmptyDocumentError("No text to index")
        logger.info(f"Indexing {len(chunks)} chunk(s) in an in-memory vector store")
        vector_store = build_vector_store(chunks, self.embeddings)
        return build_retrieval_chain(vector_store, self.chat_model(temperature), self.k)

    def build_chain_from_pdf(self, data: bytes, temperature: float) -> Runnable:
        text = extract_pdf_text(data)
        return self.build_chain([Document(page_content=text)], temperature)
