"""Static prompt text used by the chat proxy."""
from .persona_prompt import PERSONA_PROMPT

__all__ = ["PERSONA_PROMPT"]
