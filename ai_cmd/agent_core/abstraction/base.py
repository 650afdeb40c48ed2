"""Completion provider abstraction.

The engine only needs one thing from a language model: turn a list of chat
messages into a reply string. Everything provider-specific lives behind
``CompletionProvider``.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..schemas.domain import ChatMessage


class CompletionProvider(ABC):
    """Abstract base class for completion providers.

    Implementations must be safe to call repeatedly from one event loop. The
    last message is always the user prompt.
    """

    @abstractmethod
    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        """Return the provider's reply to ``messages``.

        Raises:
            Exception: Any provider or transport error propagates to the caller.
        """
