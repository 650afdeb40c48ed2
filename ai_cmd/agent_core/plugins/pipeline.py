from __future__ import annotations

"""Hook pipeline.

Plugins participate in five lifecycle points of a run, plus initialization:

==========================  =========  ===========================================
hook                        style      value
==========================  =========  ===========================================
``before_ai_request``       transform  message list sent to the provider
``after_ai_request``        transform  raw provider reply
``after_parse``             transform  parsed step list
``before_step``             transform  the step about to execute
``after_step``              observer   step, index and output snapshot
``after_all_steps``         observer   steps and output snapshot
==========================  =========  ===========================================

Participants run strictly in registration order; the built-in plugin is always
first. A transform participant receives the previous participant's output. A
participant that raises is isolated: the failure is reported and the chain
continues with the last good value.
"""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from ..errors import HookFailure
from ..planning.steps import Step, coerce_step
from ..schemas.domain import ChatMessage
from .base import BasePlugin

if TYPE_CHECKING:
    from ai_cmd.console import Console

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class HookPipeline:
    """Ordered chain of plugins invoked at the run lifecycle points."""

    def __init__(self, plugins: Optional[Sequence[BasePlugin]] = None, *, console: Optional["Console"] = None) -> None:
        self._plugins: List[BasePlugin] = list(plugins or [])
        self._console = console
        self.failures: List[HookFailure] = []

    @property
    def plugins(self) -> Sequence[BasePlugin]:
        return tuple(self._plugins)

    def add(self, plugin: BasePlugin) -> None:
        self._plugins.append(plugin)
        logger.debug(f"Installed plugin {plugin.name} at position {len(self._plugins) - 1}")

    def _report(self, plugin: BasePlugin, hook: str, error: Exception) -> None:
        failure = HookFailure(plugin.name, hook, error)
        self.failures.append(failure)
        logger.debug(str(failure), exc_info=error)
        if self._console is not None:
            self._console.error(str(failure))

    async def _transform(self, hook: str, value: Any, call: Callable[[BasePlugin, Any], Any], accept: Callable[[Any], Any]) -> Any:
        result = value
        for plugin in self._plugins:
            try:
                candidate = await _maybe_await(call(plugin, result))
                if candidate is not None:
                    result = accept(candidate)
            except Exception as e:
                self._report(plugin, hook, e)
        return result

    async def _observe(self, hook: str, call: Callable[[BasePlugin], Any]) -> None:
        for plugin in self._plugins:
            try:
                await _maybe_await(call(plugin))
            except Exception as e:
                self._report(plugin, hook, e)

    async def initialize(self) -> None:
        await self._observe("on_initialize", lambda p: p.on_initialize())

    async def before_ai_request(self, messages: List[ChatMessage]) -> List[ChatMessage]:
        return await self._transform(
            "on_before_ai_request", messages, lambda p, v: p.on_before_ai_request(v), _accept_messages
        )

    async def after_ai_request(self, raw_reply: str) -> str:
        return await self._transform("on_after_ai_request", raw_reply, lambda p, v: p.on_after_ai_request(v), str)

    async def after_parse(self, steps: List[Step]) -> List[Step]:
        return await self._transform("on_after_parse", steps, lambda p, v: p.on_after_parse(v), _accept_steps)

    async def before_step(self, steps: Sequence[Step], index: int, step: Step) -> Step:
        return await self._transform(
            "on_before_step", step, lambda p, v: p.on_before_step(steps, index, v), _accept_step
        )

    async def after_step(self, steps: Sequence[Step], index: int, step: Step, outputs: Sequence[Any]) -> None:
        await self._observe("on_after_step", lambda p: p.on_after_step(steps, index, step, outputs))

    async def after_all_steps(self, steps: Sequence[Step], outputs: Sequence[Any]) -> None:
        await self._observe("on_after_all_steps", lambda p: p.on_after_all_steps(steps, outputs))


def _accept_messages(value: Any) -> List[ChatMessage]:
    return [m if isinstance(m, ChatMessage) else ChatMessage.model_validate(m) for m in value]


def _accept_steps(value: Any) -> List[Step]:
    if isinstance(value, (list, tuple)):
        return [coerce_step(s) for s in value]
    raise TypeError(f"after_parse must return a list of steps, got {type(value).__name__}")


def _accept_step(value: Any) -> Step:
    if isinstance(value, (Step, dict)):
        return coerce_step(value)
    raise TypeError(f"before_step must return a Step or dict, got {type(value).__name__}")
