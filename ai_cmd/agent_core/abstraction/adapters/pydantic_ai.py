"""Pydantic AI completion provider.

All supported provider types (``openai``, ``deepseek``, ``ollama``) speak the
OpenAI chat-completions protocol, so a single ``OpenAIChatModel`` pointed at
the configured base URL covers them.
"""

from typing import Any, List, Optional, Sequence, Tuple

from pydantic_ai import Agent, ModelSettings
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from ai_cmd.core.config import AIProviderConfig
from ai_cmd.core.logging_config import get_logger

from ...schemas.domain import ChatMessage
from ..base import CompletionProvider

logger = get_logger(__name__)


def to_message_history(messages: Sequence[ChatMessage]) -> Tuple[List[ModelMessage], str]:
    """Split chat messages into pydantic-ai message history and the final user prompt.

    Consecutive system and user messages are grouped into one ``ModelRequest``;
    each assistant message becomes a ``ModelResponse``.

    Raises:
        ValueError: If the last message is not a user message.
    """
    if not messages or messages[-1].role != "user":
        raise ValueError("the last message must be the user prompt")

    history: List[ModelMessage] = []
    parts: List[Any] = []
    for message in messages[:-1]:
        if message.role == "assistant":
            if parts:
                history.append(ModelRequest(parts=parts))
                parts = []
            history.append(ModelResponse(parts=[TextPart(content=message.content)]))
        elif message.role == "system":
            parts.append(SystemPromptPart(content=message.content))
        else:
            parts.append(UserPromptPart(content=message.content))
    if parts:
        history.append(ModelRequest(parts=parts))
    return history, messages[-1].content


class PydanticAICompletionProvider(CompletionProvider):
    """Completion provider backed by a pydantic-ai ``Agent``.

    Attributes:
        _config: Provider settings (type, base URL, model, key, sampling).
        _model: Injected model, or ``None`` to build an ``OpenAIChatModel`` lazily.
    """

    def __init__(self, config: AIProviderConfig, *, model: Optional[Model] = None) -> None:
        self._config = config
        self._model = model
        self._agent: Optional[Agent] = None

    def _build_model(self) -> Model:
        provider = OpenAIProvider(
            base_url=self._config.resolved_base_url,
            api_key=self._config.resolved_api_key or None,
        )
        return OpenAIChatModel(self._config.resolved_model, provider=provider)

    def _get_agent(self) -> Agent:
        if self._agent is None:
            model = self._model if self._model is not None else self._build_model()
            self._agent = Agent(model, output_type=str)
            logger.debug(f"Initialized completion agent for provider type {self._config.type}")
        return self._agent

    def model_settings(self) -> ModelSettings:
        return ModelSettings(temperature=self._config.temperature, max_tokens=self._config.max_tokens)

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        history, prompt = to_message_history(messages)
        agent = self._get_agent()
        logger.debug(f"Requesting completion ({len(messages)} messages, prompt length {len(prompt)})")
        result = await agent.run(prompt, message_history=history, model_settings=self.model_settings())
        return str(result.output)
