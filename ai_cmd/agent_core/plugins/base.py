from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from ..schemas.domain import ChatMessage, StepKind

if TYPE_CHECKING:
    from ..context import EngineContext
    from ..planning.steps import Step

logger = logging.getLogger(__name__)


class BasePlugin:
    """Base class for plugins.

    Every callback is a no-op. Transform callbacks may return a replacement
    value; returning ``None`` leaves the running value unchanged. Observer
    callbacks have no return contract. Overrides may be sync or async.
    """

    def __init__(self, context: "EngineContext") -> None:
        self.context = context

    @property
    def name(self) -> str:
        return type(self).__name__

    async def on_initialize(self) -> None:
        """Called once after the engine context is wired."""

    async def on_before_ai_request(self, messages: List[ChatMessage]) -> Optional[List[ChatMessage]]:
        return messages

    async def on_after_ai_request(self, raw_reply: str) -> Optional[str]:
        return raw_reply

    async def on_after_parse(self, steps: List["Step"]) -> Optional[List["Step"]]:
        return steps

    async def on_before_step(self, steps: Sequence["Step"], index: int, step: "Step") -> Optional["Step"]:
        return step

    async def on_after_step(
        self, steps: Sequence["Step"], index: int, step: "Step", outputs: Sequence[Any]
    ) -> None:
        """Observe a step whose result was just appended at ``outputs[-1]``."""

    async def on_after_all_steps(self, steps: Sequence["Step"], outputs: Sequence[Any]) -> None:
        """Observe a run that reached the end of its plan."""


class DefaultPlugin(BasePlugin):
    """Built-in plugin, always first in the pipeline.

    Echoes the parsed plan when ``output_ai_result`` is enabled, except for a
    plan that is a single text answer.
    """

    async def on_after_parse(self, steps: List["Step"]) -> Optional[List["Step"]]:
        if not self.context.settings.output_ai_result:
            return steps
        if len(steps) == 1 and steps[0].kind is StepKind.text_answer:
            return steps
        self.context.console.info(json.dumps([s.to_wire() for s in steps], indent=2, ensure_ascii=False))
        return steps
