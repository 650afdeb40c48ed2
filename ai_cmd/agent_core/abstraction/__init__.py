"""Completion provider abstraction, prompts and adapters."""

from .base import CompletionProvider
from .prompts import SYSTEM_PROMPT, TEXT_PROCESSING_PROMPT, build_user_prompt

__all__ = ["CompletionProvider", "SYSTEM_PROMPT", "TEXT_PROCESSING_PROMPT", "build_user_prompt"]
