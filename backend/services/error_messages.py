"""Maps proxy failures to the copy shown to visitors in the chat window."""
from models.proxy import ErrorKind, ProxyFailure

INVALID_INPUT_MESSAGE = "Message is required"
MISCONFIGURED_MESSAGE = "API key error: please check the server configuration."
AUTH_FAILED_MESSAGE = "API authentication failed. Please check the API key."
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."
QUOTA_EXHAUSTED_MESSAGE = "The account has run out of credits. Please check billing/usage."
UPSTREAM_ERROR_MESSAGE = "Upstream service error. Please try again later."
INTERNAL_ERROR_MESSAGE = "Something went wrong on our side. Please try again."
TRANSPORT_ERROR_MESSAGE = "I'm having trouble processing your request right now."
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"

# Structured upstream codes that mean the account is out of credits
QUOTA_CODES = {"insufficient_quota", "billing_hard_limit_reached", "billing_not_active"}

# Fallback only, used when the upstream gave no structured code
QUOTA_PHRASES = ("insufficient_quota", "billing", "quota", "credits")

_STATIC_MESSAGES = {
    ErrorKind.INVALID_INPUT: INVALID_INPUT_MESSAGE,
    ErrorKind.MISCONFIGURED: MISCONFIGURED_MESSAGE,
    ErrorKind.AUTH_FAILED: AUTH_FAILED_MESSAGE,
    ErrorKind.RATE_LIMITED: RATE_LIMITED_MESSAGE,
    ErrorKind.UPSTREAM_CONTRACT_VIOLATION: INTERNAL_ERROR_MESSAGE,
    ErrorKind.TRANSPORT_ERROR: TRANSPORT_ERROR_MESSAGE,
    ErrorKind.METHOD_NOT_ALLOWED: METHOD_NOT_ALLOWED_MESSAGE,
}


def is_quota_exhausted(failure: ProxyFailure) -> bool:
    """
    True when the failure reports an exhausted account balance.
    
    The structured code decides when present. Otherwise the detail and the
    raw upstream wording are searched, since a 429 detail is replaced by
    fixed rate-limit copy.
    """
    if failure.code:
        return failure.code in QUOTA_CODES
    wording = " ".join(filter(None, (failure.detail, failure.upstream_message))).lower()
    return any(phrase in wording for phrase in QUOTA_PHRASES)


def user_facing_message(failure: ProxyFailure) -> str:
    """
    Translate a proxy failure into the text of an assistant turn.
    
    Quota exhaustion is checked first because upstreams report it as either
    429 or a generic error status.
    """
    if failure.kind in (ErrorKind.RATE_LIMITED, ErrorKind.UPSTREAM_ERROR) and is_quota_exhausted(failure):
        return QUOTA_EXHAUSTED_MESSAGE
    
    if failure.kind == ErrorKind.UPSTREAM_ERROR:
        return failure.detail or UPSTREAM_ERROR_MESSAGE
    
    return _STATIC_MESSAGES.get(failure.kind, INTERNAL_ERROR_MESSAGE)
