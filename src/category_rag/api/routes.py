"""
API Routes - HTTP endpoints for content chat and category chat

License: MIT
"""

from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse
import asyncio
import logging
import os
import tempfile

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.document_processor import clean_document_text
from ..core.query import build_context, no_information_answer
from ..core.web_loader import load_web_content
from ..exceptions import CategoryRAGError
from ..retrieval.category_store import CategoryStore
from ..retrieval.content_session import ContentSessionStore
from ..utils.helpers import generate_id, truncate_text
from .dependencies import (
    ServiceContainer,
    get_category_store,
    get_content_sessions,
    get_services,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Request models
class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LoadWebsiteRequest(_CamelModel):
    """Request model for loading a website."""
    url: str = Field(..., min_length=1)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("URL must be an absolute http(s) URL")
        return v.strip()


class ChatRequest(_CamelModel):
    """A question within a session."""
    session_id: str = Field(..., alias="sessionId", min_length=1)
    question: str = Field(..., min_length=1)

    @field_validator("question")
    @classmethod
    def validate_question(cls, v):
        if not v.strip():
            raise ValueError("Question cannot be empty or whitespace only")
        return v.strip()


class SummarizeRequest(_CamelModel):
    session_id: str = Field(..., alias="sessionId", min_length=1)


class CreateSessionRequest(_CamelModel):
    """Request model for opening a category session."""
    user_id: str = Field(..., alias="userId", min_length=1)
    category: str = Field(..., min_length=1)


async def _extract_upload_text(services: ServiceContainer, file: UploadFile) -> str:
    """
    Parse an uploaded file into cleaned text.

    The upload is written to a temporary file that is removed afterwards.
    """
    upload_config = services.config.upload
    filename = file.filename or "upload.txt"
    suffix = Path(filename).suffix.lower()

    if suffix and suffix not in upload_config.allowed_extensions:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type. Allowed: {', '.join(upload_config.allowed_extensions)}",
        )

    data = await file.read()
    if len(data) > upload_config.max_upload_size:
        raise HTTPException(status_code=413, detail="File too large")

    fd, tmp_path = tempfile.mkstemp(suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
        raw_text = await asyncio.to_thread(
            services.document_processor.parse_document,
            Path(tmp_path),
            file.content_type or "",
        )
    finally:
        try:
            os.unlink(tmp_path)
        except OSError as e:
            logger.warning(f"Could not remove temporary upload {tmp_path}: {str(e)}")

    return clean_document_text(raw_text)


# ============================================================================
# CONTENT ENDPOINTS
# ============================================================================

@router.post("/load-website", tags=["Content"])
async def load_website(
    request: LoadWebsiteRequest,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """Load a website and start a new content session."""
    logger.info(f"Loading website: {request.url}")

    content = await load_web_content(request.url, timeout=services.config.upload.web_timeout)
    session = await services.content_sessions.load(request.url, content, kind="website")

    return {
        "sessionId": session.session_id,
        "message": "Website loaded successfully!",
        "contentSize": len(content),
        "chunksCount": len(session.chunks),
        "ragMode": session.use_rag,
        "hostname": urlparse(request.url).hostname,
    }


@router.post("/upload-document", tags=["Content"])
async def upload_document(
    file: UploadFile = File(...),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """Upload a document and start a new content session."""
    logger.info(f"Processing document: {file.filename}")

    content = await _extract_upload_text(services, file)
    session = await services.content_sessions.load(file.filename, content, kind="document")

    return {
        "sessionId": session.session_id,
        "message": "Document uploaded and processed successfully!",
        "filename": file.filename,
        "contentSize": len(content),
        "chunksCount": len(session.chunks),
        "ragMode": session.use_rag,
    }


@router.post("/summarize", tags=["Content"])
async def summarize(
    request: SummarizeRequest,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """Summarize the beginning of a session's content."""
    retrieval = services.config.retrieval
    chunks = services.content_sessions.summary_context(request.session_id, retrieval.summary_chunks)

    try:
        summary = await services.answer_generator.summarize(
            build_context(chunks, retrieval.context_separator)
        )
    except Exception as e:
        logger.error(f"Error generating summary: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to generate summary: {str(e)}")

    return {"summary": summary, "sessionId": request.session_id}


@router.post("/chat", tags=["Content"])
async def chat(
    request: ChatRequest,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """Answer a question about a loaded website or document."""
    retrieval = services.config.retrieval
    session = services.content_sessions.get(request.session_id)
    logger.info(f"Processing question: {truncate_text(request.question, 100)}")

    chunks, rag_used = await services.content_sessions.retrieve(
        request.session_id, request.question, retrieval.top_k
    )

    try:
        answer = await services.answer_generator.answer(
            request.question, build_context(chunks, retrieval.context_separator)
        )
    except Exception as e:
        logger.error(f"Error processing question: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to process question: {str(e)}")

    return {
        "question": request.question,
        "answer": answer,
        "website": session.source,
        "ragMode": rag_used,
    }


@router.get("/session/{session_id}", tags=["Content"])
async def get_content_session(
    session_id: str,
    content_sessions: ContentSessionStore = Depends(get_content_sessions),
) -> Dict[str, Any]:
    """Describe a content session."""
    session = content_sessions.get(session_id)

    return {
        "url": session.source,
        "type": session.kind,
        "hostname": urlparse(session.source).hostname if session.kind == "website" else None,
        "contentSize": len(session.content),
        "chunksCount": len(session.chunks),
        "ragMode": session.use_rag,
    }


# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================

@router.post("/admin/upload-document", tags=["Admin"])
async def admin_upload_document(
    file: UploadFile = File(...),
    category: str = Form(...),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """Upload a document into a category."""
    category = category.strip()
    if not category:
        raise HTTPException(status_code=400, detail="Category is required")

    logger.info(f"Admin uploading: {file.filename} -> Category: {category}")

    content = await _extract_upload_text(services, file)
    chunks = services.chunker.split(content)

    doc_id = generate_id()
    document = await services.category_store.add_document(
        doc_id, category, file.filename, content, chunks
    )

    return {
        "success": True,
        "message": f'Document uploaded to category "{category}"',
        "docId": doc_id,
        "category": category,
        "filename": file.filename,
        "contentSize": len(content),
        "chunksCount": len(chunks),
        "ragMode": document.use_rag,
    }


@router.get("/admin/categories", tags=["Admin"])
async def admin_categories(
    category_store: CategoryStore = Depends(get_category_store),
) -> Dict[str, Any]:
    return {"categories": category_store.get_categories()}


@router.get("/admin/documents", tags=["Admin"])
async def admin_documents(
    category: Optional[str] = None,
    category_store: CategoryStore = Depends(get_category_store),
) -> Dict[str, Any]:
    """List documents in a category."""
    if not category:
        raise HTTPException(status_code=400, detail="Category query param required")

    documents = category_store.get_documents_by_category(category)
    return {"category": category, "documents": [doc.to_summary() for doc in documents]}


@router.delete("/admin/documents/{doc_id}", tags=["Admin"])
async def admin_delete_document(
    doc_id: str,
    category_store: CategoryStore = Depends(get_category_store),
) -> Dict[str, Any]:
    """Delete a document."""
    if not await category_store.delete_document(doc_id):
        raise HTTPException(status_code=404, detail="Document not found")

    return {"success": True, "message": "Document deleted"}


# ============================================================================
# USER ENDPOINTS
# ============================================================================

@router.get("/user/categories", tags=["User"])
async def user_categories(
    category_store: CategoryStore = Depends(get_category_store),
) -> Dict[str, Any]:
    return {"categories": category_store.get_categories()}


@router.post("/user/session", tags=["User"])
async def create_user_session(
    request: CreateSessionRequest,
    category_store: CategoryStore = Depends(get_category_store),
) -> Dict[str, Any]:
    """Open a chat session on a category."""
    if not category_store.get_documents_by_category(request.category):
        raise HTTPException(
            status_code=400,
            detail=f'No documents found for category "{request.category}"',
        )

    session = category_store.create_session(request.user_id, request.category)

    count = len(session.documents)
    return {
        "sessionId": session.session_id,
        "category": session.category,
        "documentCount": count,
        "message": f'Session created for category "{session.category}" with {count} document(s)',
    }


@router.post("/user/chat", tags=["User"])
async def user_chat(
    request: ChatRequest,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """Answer a question from the documents of the session's category."""
    retrieval = services.config.retrieval
    session = services.category_store.get_session(request.session_id)

    logger.info(
        f"User question in {session.category}: {truncate_text(request.question, 50)}",
        extra={"session_id": session.session_id, "user_id": session.user_id},
    )

    context_chunks = await services.category_store.search_category(
        session.category, request.question, retrieval.category_top_k
    )

    if not context_chunks:
        return {
            "answer": no_information_answer(session.category),
            "ragMode": False,
            "category": session.category,
        }

    context = build_context(context_chunks, retrieval.category_context_separator)

    try:
        answer = await services.answer_generator.answer_for_category(
            session.category, request.question, context
        )
    except CategoryRAGError:
        raise
    except Exception as e:
        logger.error(f"User chat error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to process question: {str(e)}")

    return {
        "question": request.question,
        "answer": answer,
        "category": session.category,
        "ragMode": True,
        "sourcesUsed": len(context_chunks),
    }


@router.get("/health", tags=["Health"])
async def health() -> Dict[str, Any]:
    return {"status": "ok"}
