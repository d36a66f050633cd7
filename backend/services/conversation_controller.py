"""
Conversation controller for the chat window.

Owns the transcript, the in-flight flag and the input-box draft, and allows
at most one outstanding proxy call at a time so assistant replies can never
land out of order relative to the visitor's turns.
"""
import logging
from typing import Awaitable, Callable, List, Protocol, Tuple

from models.conversation import ConversationSnapshot, Turn
from models.proxy import ErrorKind, ProxyFailure, ProxyResult, ProxySuccess
from services.error_messages import user_facing_message

logger = logging.getLogger(__name__)

Listener = Callable[[ConversationSnapshot], None]


class ProxyTransport(Protocol):
    def send(self, message: str) -> Awaitable[ProxyResult]:
        ...


class ConversationController:
    """
    Idle/Awaiting state machine driving one proxy request per visitor turn.
    
    ``pending`` is True exactly while a request is outstanding. It is reset
    whenever that request resolves, whether it succeeded, failed, or the
    transport itself raised.
    """
    
    def __init__(self, proxy: ProxyTransport):
        self.proxy = proxy
        self._transcript: List[Turn] = []
        self._pending = False
        self._draft = ""
        self._listeners: List[Listener] = []
    
    @property
    def transcript(self) -> Tuple[Turn, ...]:
        return tuple(self._transcript)
    
    @property
    def pending(self) -> bool:
        return self._pending
    
    @property
    def draft(self) -> str:
        return self._draft
    
    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            transcript=self.transcript,
            pending=self._pending,
            draft=self._draft
        )
    
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a renderer callback, invoked with a snapshot after every
        state change.
        
        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)
        
        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        
        return unsubscribe
    
    def update_draft(self, text: str) -> None:
        """Track the input box; allowed while a request is outstanding."""
        self._draft = text
        self._notify()
    
    async def send(self) -> bool:
        """Submit the current draft, clearing it once the request resolves."""
        return await self._run(self._draft, clear_draft=True)
    
    async def submit(self, raw_text: str) -> bool:
        """
        Submit one visitor utterance.
        
        No-op while Awaiting or when the text is empty after trimming.
        
        Returns:
            True if a request was made, False for a no-op
        """
        return await self._run(raw_text, clear_draft=False)
    
    async def _run(self, raw_text: str, clear_draft: bool) -> bool:
        if self._pending or not raw_text or not raw_text.strip():
            return False
        
        # The visitor's own turn is shown before the call and never rolled back
        self._transcript.append(Turn.from_user(raw_text))
        self._pending = True
        self._notify()
        
        try:
            result = await self.proxy.send(raw_text)
        except Exception as e:
            logger.error(f"Chat transport raised instead of returning a result: {e}", exc_info=True)
            result = ProxyFailure(500, ErrorKind.TRANSPORT_ERROR, str(e))
        finally:
            self._pending = False
        
        self._transcript.append(Turn.from_assistant(self._reply_text(result)))
        if clear_draft:
            self._draft = ""
        self._notify()
        return True
    
    @staticmethod
    def _reply_text(result: ProxyResult) -> str:
        if isinstance(result, ProxySuccess):
            if result.text:
                return result.text
            result = ProxyFailure(500, ErrorKind.UPSTREAM_CONTRACT_VIOLATION, "Empty reply")
        logger.info(f"Chat request failed: status={result.http_status}, kind={result.kind.value}")
        return user_facing_message(result)
    
    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Conversation listener failed")
