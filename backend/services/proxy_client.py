"""Transports the conversation controller uses to reach the chat proxy."""
import logging
from typing import Any, Dict, Optional

import httpx

from config import PROXY_URL, UPSTREAM_TIMEOUT
from models.proxy import ErrorKind, ProxyFailure, ProxyResult, ProxySuccess
from services.chat_proxy import ProxyService

logger = logging.getLogger(__name__)

_KIND_BY_STATUS = {
    400: ErrorKind.INVALID_INPUT,
    401: ErrorKind.AUTH_FAILED,
    405: ErrorKind.METHOD_NOT_ALLOWED,
    429: ErrorKind.RATE_LIMITED,
}


class LocalProxyClient:
    """Calls a ProxyService in the same process."""
    
    def __init__(self, service: ProxyService):
        self.service = service
    
    async def send(self, message: str) -> ProxyResult:
        return await self.service.chat(message)


class HttpProxyClient:
    """Posts messages to a running proxy over HTTP and decodes the reply."""
    
    def __init__(
        self,
        url: str = PROXY_URL,
        timeout: float = UPSTREAM_TIMEOUT + 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            url: Full URL of the chat endpoint
            timeout: Seconds to wait for the proxy; a little above the
                proxy's own upstream timeout so its failure arrives first
            transport: Optional httpx transport (used by tests)
        """
        self.url = url
        self.timeout = timeout
        self.transport = transport
    
    async def send(self, message: str) -> ProxyResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json={"message": message})
        except httpx.TimeoutException:
            logger.error(f"Chat proxy timed out after {self.timeout}s")
            return ProxyFailure(500, ErrorKind.TRANSPORT_ERROR, f"Request timeout after {self.timeout}s")
        except httpx.RequestError as e:
            logger.error(f"Network error reaching chat proxy: {e}")
            return ProxyFailure(500, ErrorKind.TRANSPORT_ERROR, f"Network error: {e}")
        
        return decode_response(response)


def decode_response(response: httpx.Response) -> ProxyResult:
    """Rebuild a ProxyResult from the proxy's JSON reply."""
    try:
        data: Dict[str, Any] = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    
    if response.is_success:
        text = data.get("response")
        if isinstance(text, str) and text:
            return ProxySuccess(text=text, http_status=response.status_code)
        return ProxyFailure(
            500, ErrorKind.UPSTREAM_CONTRACT_VIOLATION, "Proxy response did not contain a reply"
        )
    
    detail = data.get("error")
    if not isinstance(detail, str) or not detail:
        detail = "API request failed"
    
    return ProxyFailure(
        response.status_code,
        _kind_for(data.get("kind"), response.status_code),
        detail,
        _optional_str(data.get("code")),
        _optional_str(data.get("upstream_message"))
    )


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _kind_for(raw_kind: Any, status: int) -> ErrorKind:
    try:
        return ErrorKind(raw_kind)
    except ValueError:
        return _KIND_BY_STATUS.get(status, ErrorKind.UPSTREAM_ERROR)
