"""
API models for the chat endpoints.

A chat is one solution panel: the front end submits typed text or an image
and renders ``solution_html`` as rich text. The models are separate from the
internal RunContext/ChatSession types so the wire format stays stable.
"""

from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from datetime import datetime

from .common import APIResponse
from src.pipeline.orchestrator.session import ChatSession
from src.pipeline.orchestrator.types import RunContext


# API Request Models
class TextProblemRequest(BaseModel):
    # blank text is accepted here and ignored by the pipeline
    text: str = Field("", description="Typed math problem")

    class Config:
        json_schema_extra = {
            "example": {"text": "find the sum of 5 and 7"}
        }


# API Response Models
class RunData(BaseModel):
    request_id: str
    input_kind: str
    status: str = Field(..., description="pending, succeeded or failed")
    stage: str
    outcome: Optional[str] = None
    verdict: Optional[str] = None
    extracted_text: str
    solution_html: str
    final_answer: Optional[str] = None
    error: Optional[str] = Field(None, description="Error class name, never raw detail")
    processing_time: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_run(cls, run: RunContext) -> "RunData":
        return cls(
            request_id=run.request_id,
            input_kind=run.input_kind.value,
            status=run.status.value,
            stage=run.stage.value,
            outcome=run.outcome.value if run.outcome else None,
            verdict=run.verdict.value if run.verdict else None,
            extracted_text=run.extracted_text,
            solution_html=run.solution_text,
            final_answer=run.final_answer,
            error=run.last_error,
            processing_time=run.processing_time,
            metadata=run.metadata,
        )


class ChatData(BaseModel):
    chat_id: str
    created_at: datetime
    extracted_text: str
    solution_html: str = Field(..., description="Sanitized solution or placeholder, safe to insert as HTML")
    current_run: Optional[RunData] = None
    history: List[RunData] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: ChatSession) -> "ChatData":
        return cls(
            chat_id=session.chat_id,
            created_at=session.created_at,
            extracted_text=session.extracted_text,
            solution_html=session.solution_display,
            current_run=RunData.from_run(session.current) if session.current else None,
            history=[RunData.from_run(run) for run in session.history],
        )


class ChatResponse(APIResponse):
    data: Optional[ChatData] = None
