"""Chat proxy that shields the upstream credential from the browser."""
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx
from groq import AsyncGroq
from groq import APIConnectionError, APIResponseValidationError, APIStatusError
from pydantic import ValidationError

from config import GROQ_API_KEY, CHAT_MODEL, UPSTREAM_BASE_URL, UPSTREAM_TIMEOUT
from models.api import ChatRequest
from models.proxy import ErrorKind, ProxyFailure, ProxyResult, ProxySuccess
from prompts import PERSONA_PROMPT

logger = logging.getLogger(__name__)

BodyReader = Callable[[], Awaitable[Any]]

METHOD_NOT_ALLOWED_DETAIL = "Method not allowed"
MISCONFIGURED_DETAIL = "credential not configured"
MESSAGE_REQUIRED_DETAIL = "Message is required"
RATE_LIMIT_DETAIL = "Rate limit exceeded. Please wait a moment and try again."
AUTH_FAILED_DETAIL = "API authentication failed. Please check your API key."
UPSTREAM_ERROR_DETAIL = "Upstream service error. Please try again later."
REQUEST_FAILED_DETAIL = "request failed"
MISSING_REPLY_DETAIL = "Upstream response did not contain a reply"


class ProxyService:
    """
    Stateless request handler in front of the upstream chat-completion API.

    Every call to :meth:`handle` resolves to a ``ProxySuccess`` or a
    ``ProxyFailure``; nothing raises past it.
    """
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = CHAT_MODEL,
        system_prompt: str = PERSONA_PROMPT,
        base_url: Optional[str] = UPSTREAM_BASE_URL,
        timeout: float = UPSTREAM_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the proxy.
        
        A missing credential is not an error here; each request reports it
        as a ``Misconfigured`` failure instead.
        
        Args:
            api_key: Upstream API key (defaults to GROQ_API_KEY from environment)
            model: Chat model identifier sent upstream
            system_prompt: Fixed persona instruction sent as the system message
            base_url: Optional override of the upstream endpoint
            timeout: Upstream request timeout in seconds
            http_client: Optional httpx client handed to the SDK
        """
        self.api_key = api_key if api_key is not None else GROQ_API_KEY
        self.model = model
        self.system_prompt = system_prompt
        self.base_url = base_url
        self.timeout = timeout
        self.http_client = http_client
        self._client: Optional[AsyncGroq] = None
        
        if not self.api_key:
            logger.warning("GROQ_API_KEY is not set; chat requests will fail as misconfigured")
    
    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)
    
    async def handle(self, method: str, read_body: BodyReader) -> ProxyResult:
        """
        Handle one chat invocation.
        
        Checks run in order: HTTP method, credential, message. The body is
        only read once the first two pass, and the upstream API is only
        contacted once all three pass.
        
        Args:
            method: HTTP method of the invocation
            read_body: Coroutine function returning the decoded JSON body
            
        Returns:
            ProxySuccess with the assistant reply, or ProxyFailure
        """
        if method.upper() != "POST":
            return ProxyFailure(405, ErrorKind.METHOD_NOT_ALLOWED, METHOD_NOT_ALLOWED_DETAIL)
        
        if not self.api_key:
            logger.error("Rejecting chat request: upstream credential not configured")
            return ProxyFailure(500, ErrorKind.MISCONFIGURED, MISCONFIGURED_DETAIL)
        
        message = await self._read_message(read_body)
        if message is None:
            return ProxyFailure(400, ErrorKind.INVALID_INPUT, MESSAGE_REQUIRED_DETAIL)
        
        return await self._complete(message)
    
    async def chat(self, message: str) -> ProxyResult:
        """Shortcut for an in-process POST carrying ``{"message": message}``."""
        async def read_body() -> Dict[str, Any]:
            return {"message": message}
        
        return await self.handle("POST", read_body)
    
    def build_messages(self, message: str) -> list:
        """Two-message payload: persona instruction plus the sole user entry."""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": message}
        ]
    
    async def _read_message(self, read_body: BodyReader) -> Optional[str]:
        try:
            body = await read_body()
            request = ChatRequest.model_validate(body)
        except (ValueError, ValidationError) as e:
            # Malformed JSON or wrong shape counts as a missing message
            logger.debug(f"Unreadable chat request body: {e}")
            return None
        
        if not request.message or not request.message.strip():
            return None
        return request.message
    
    def _get_client(self) -> AsyncGroq:
        if self._client is None:
            self._client = AsyncGroq(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                http_client=self.http_client
            )
        return self._client
    
    async def _complete(self, message: str) -> ProxyResult:
        start_time = time.time()
        
        try:
            response = await self._get_client().chat.completions.create(
                model=self.model,
                messages=self.build_messages(message)
            )
        except APIStatusError as e:
            return self._status_failure(e, self._elapsed_ms(start_time))
        except APIResponseValidationError as e:
            return self._log_failure(
                ProxyFailure(500, ErrorKind.UPSTREAM_CONTRACT_VIOLATION, str(e)),
                self._elapsed_ms(start_time)
            )
        except APIConnectionError as e:
            return self._log_failure(
                ProxyFailure(500, ErrorKind.TRANSPORT_ERROR, str(e) or "Connection error."),
                self._elapsed_ms(start_time)
            )
        except Exception as e:
            logger.error(f"Unexpected error calling upstream: {e}", exc_info=True)
            return self._log_failure(
                ProxyFailure(500, ErrorKind.TRANSPORT_ERROR, str(e) or type(e).__name__),
                self._elapsed_ms(start_time)
            )
        
        latency_ms = self._elapsed_ms(start_time)
        text = self._extract_reply(response)
        if not text:
            return self._log_failure(
                ProxyFailure(500, ErrorKind.UPSTREAM_CONTRACT_VIOLATION, MISSING_REPLY_DETAIL),
                latency_ms
            )
        
        logger.info(
            f"Upstream reply: model={self.model}, latency={latency_ms}ms",
            extra={"upstream_status": 200, "latency_ms": latency_ms, "model": self.model,
                   "message_chars": len(message)}
        )
        return ProxySuccess(text=text)
    
    @staticmethod
    def _extract_reply(response: Any) -> Optional[str]:
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError):
            return None
        return content if isinstance(content, str) else None
    
    def _status_failure(self, error: APIStatusError, latency_ms: int) -> ProxyFailure:
        status = error.status_code
        upstream_message, code = parse_error_body(error.body)
        
        if status == 429:
            kind, detail = ErrorKind.RATE_LIMITED, RATE_LIMIT_DETAIL
        elif status == 401:
            kind, detail = ErrorKind.AUTH_FAILED, AUTH_FAILED_DETAIL
        elif status == 500:
            kind, detail = ErrorKind.UPSTREAM_ERROR, UPSTREAM_ERROR_DETAIL
        else:
            kind, detail = ErrorKind.UPSTREAM_ERROR, upstream_message or REQUEST_FAILED_DETAIL
        
        # Rate-limit copy hides the upstream wording, which may still reveal an exhausted quota
        raw_message = upstream_message if status == 429 else None
        return self._log_failure(ProxyFailure(status, kind, detail, code, raw_message), latency_ms)
    
    def _log_failure(self, failure: ProxyFailure, latency_ms: int) -> ProxyFailure:
        logger.warning(
            f"Upstream call failed: status={failure.http_status}, kind={failure.kind.value}, "
            f"latency={latency_ms}ms",
            extra={"upstream_status": failure.http_status, "error_kind": failure.kind.value,
                   "error_code": failure.code, "latency_ms": latency_ms, "model": self.model}
        )
        return failure
    
    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)


def parse_error_body(body: Any) -> Tuple[Optional[str], Optional[str]]:
    """
    Pull the human-readable message and machine-readable code out of an
    upstream error body.
    
    Accepts both the full ``{"error": {...}}`` envelope and the bare inner
    error object, since the SDK may hand over either.
    
    Returns:
        (message, code); either may be None
    """
    if not isinstance(body, dict):
        return None, None
    
    error = body.get("error", body)
    if isinstance(error, str):
        return error or None, None
    if not isinstance(error, dict):
        return None, None
    
    message = error.get("message")
    code = error.get("code") or error.get("type")
    return (
        message if isinstance(message, str) and message else None,
        str(code) if code else None
    )
