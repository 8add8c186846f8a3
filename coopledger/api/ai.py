from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from typing import Optional
from coopledger.db.base import get_db
from coopledger.core.dependencies import get_current_admin, require_ai_chat, require_document_upload
from coopledger.core.audit import write_audit_log
from coopledger.schemas.ai import ChatRequest, ChatResponse, ExtractionResult
from coopledger.ai.chat import build_greeting

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.get("/greeting", response_model=ChatResponse)
def get_greeting(current_admin: str = Depends(get_current_admin)):
    """Opening message for the assistant panel."""
    return ChatResponse(response=build_greeting(), tool_calls=None)


@router.post("/chat", response_model=ChatResponse, dependencies=[Depends(require_ai_chat)])
def chat(
    chat_request: ChatRequest,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """AI chat endpoint - tool-based answers over the ledger."""
    from coopledger.ai.chat import process_ai_query

    if chat_request.is_first_message:
        return ChatResponse(response=build_greeting(), tool_calls=None)

    result = process_ai_query(db=db, query=chat_request.query)
    return ChatResponse(
        response=result.get("response", ""),
        tool_calls=result.get("tool_calls")
    )


@router.post("/extract", response_model=ExtractionResult, dependencies=[Depends(require_document_upload)])
async def extract_contributions(
    file: Optional[UploadFile] = File(None),
    text: Optional[str] = Form(None),
    current_admin: str = Depends(get_current_admin)
):
    """Parse an uploaded PDF, image or CSV (or pasted text) into preview records."""
    from coopledger.ai.extraction import ExtractionError, UnsupportedDocumentError, parse_contribution_document

    file_bytes = await file.read() if file else None
    mime_type = file.content_type if file else None
    if not file_bytes and not (text or "").strip():
        raise HTTPException(status_code=400, detail="Upload a file or paste text to extract")

    try:
        # PDF parsing and the LLM round-trip are blocking calls
        result = await run_in_threadpool(
            parse_contribution_document,
            text_data=text,
            file_bytes=file_bytes or None,
            mime_type=mime_type
        )
    except UnsupportedDocumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ExtractionError as e:
        raise HTTPException(status_code=502, detail=str(e))

    write_audit_log(
        actor=current_admin,
        action="Document extracted",
        details=f"file={file.filename if file else 'text'} records={len(result.records)}"
    )
    return result
