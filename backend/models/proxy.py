"""Proxy result data models."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ErrorKind(str, Enum):
    """Normalized failure categories produced by the proxy."""
    INVALID_INPUT = "invalid_input"
    MISCONFIGURED = "misconfigured"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    AUTH_FAILED = "auth_failed"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_ERROR = "upstream_error"
    UPSTREAM_CONTRACT_VIOLATION = "upstream_contract_violation"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class ProxySuccess:
    """Assistant reply extracted from a successful upstream call."""
    text: str
    http_status: int = 200


@dataclass(frozen=True)
class ProxyFailure:
    """Normalized failure with the HTTP status returned to the caller."""
    http_status: int
    kind: ErrorKind
    detail: str
    code: Optional[str] = None  # structured upstream error code, when one was given
    upstream_message: Optional[str] = None  # raw upstream wording, kept when detail replaces it


ProxyResult = Union[ProxySuccess, ProxyFailure]
