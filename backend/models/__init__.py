"""Data models for the persona chat proxy."""
from .proxy import ErrorKind, ProxySuccess, ProxyFailure, ProxyResult
from .conversation import Origin, Direction, Turn, ConversationSnapshot
from .api import ChatRequest, ChatResponse, ErrorResponse

__all__ = [
    "ErrorKind",
    "ProxySuccess",
    "ProxyFailure",
    "ProxyResult",
    "Origin",
    "Direction",
    "Turn",
    "ConversationSnapshot",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
]
