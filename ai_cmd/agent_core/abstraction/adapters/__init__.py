"""Concrete completion providers."""

from .pydantic_ai import PydanticAICompletionProvider

__all__ = ["PydanticAICompletionProvider"]
