"""API request/response models for the chat endpoint."""
from typing import Optional
from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Inbound body of POST /api/chat."""
    message: Optional[str] = Field(None, description="The visitor's latest utterance")


class ChatResponse(BaseModel):
    """Successful reply body."""
    response: str


class ErrorResponse(BaseModel):
    """Failure body; ``kind``, ``code`` and ``upstream_message`` let clients rebuild the failure."""
    error: str
    kind: Optional[str] = None
    code: Optional[str] = None
    upstream_message: Optional[str] = None
