from __future__ import annotations

"""High-level orchestration service for ai-cmd runs.

``AICommandService`` takes one natural-language request from prompt to a
terminal dispatcher state.

Workflow
--------

- ``run``:

  1. Builds the message list (system prompt, conversation history, user
     prompt with the capability catalogue) and passes it through
     ``before_ai_request``.
  2. Asks the completion provider for a reply and passes it through
     ``after_ai_request``.
  3. Parses the reply into steps and passes them through ``after_parse``.
  4. Executes the steps with ``StepDispatcher``.
  5. Records the exchange in the conversation history.

A ``recurse`` step calls back into ``run`` with the step content as the new
request, up to ``settings.max_recursion_depth`` levels deep.

``AICommandService`` is intentionally thin: it delegates execution semantics
to the dispatcher and plugin behaviour to the hook pipeline.
"""

import logging
from typing import List, Optional, Sequence

from .abstraction.prompts import SYSTEM_PROMPT, build_user_prompt
from .context import EngineContext
from .errors import RecursionDepthExceededError
from .planning.steps import parse_reply
from .runtime.dispatcher import StepDispatcher
from .runtime.models import DispatchOutcome
from .schemas.domain import ChatMessage, StepKind

logger = logging.getLogger(__name__)


class AICommandService:
    """Orchestrate completion + execution for one run at a time."""

    def __init__(self, context: EngineContext) -> None:
        self._ctx = context
        self._history: List[ChatMessage] = []
        self._depth = 0
        self._initialized = False
        self._dispatcher = StepDispatcher(context, recurse=self._recurse)

    @property
    def context(self) -> EngineContext:
        return self._ctx

    @property
    def history(self) -> Sequence[ChatMessage]:
        return tuple(self._history)

    def clear_history(self) -> None:
        self._history = []

    async def initialize(self) -> None:
        """Fire the ``on_initialize`` observers. Later calls are no-ops."""
        if self._initialized:
            return
        self._initialized = True
        await self._ctx.pipeline.initialize()

    def build_messages(self, user_prompt: str) -> List[ChatMessage]:
        registry = self._ctx.registry
        content = build_user_prompt(user_prompt, registry.catalogue(), root_namespace=registry.root_namespace)
        return [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            *self._history,
            ChatMessage(role="user", content=content),
        ]

    async def run(self, user_prompt: str) -> DispatchOutcome:
        """
        Execute one request.

        Returns:
            The dispatcher outcome of the top-level plan.

        Raises:
            Exception: Completion provider errors propagate unchanged.
        """
        pipeline = self._ctx.pipeline
        console = self._ctx.console

        messages = await pipeline.before_ai_request(self.build_messages(user_prompt))
        try:
            reply = await self._ctx.completion.complete(messages)
        except Exception:
            logger.debug("Completion request failed", exc_info=True)
            raise
        reply = await pipeline.after_ai_request(reply)

        steps = await pipeline.after_parse(parse_reply(reply))
        single_text = len(steps) == 1 and steps[0].kind is StepKind.text_answer
        if len(steps) > 1:
            console.info("Executing steps...")

        outcome = await self._dispatcher.execute_steps(steps)
        if not single_text:
            console.success("Execution completed.")

        self._history.append(ChatMessage(role="user", content=user_prompt))
        self._history.append(ChatMessage(role="assistant", content=reply))
        logger.debug(
            f"Run ended in {outcome.state.value} after {outcome.steps_executed} steps "
            f"({len(outcome.outputs)} outputs, depth {self._depth})"
        )
        return outcome

    async def _recurse(self, content: str) -> Optional[DispatchOutcome]:
        limit = self._ctx.settings.max_recursion_depth
        if self._depth >= limit:
            raise RecursionDepthExceededError(limit)
        self._depth += 1
        try:
            return await self.run(content)
        except Exception as e:
            self._ctx.console.error(f"Nested request failed: {e}")
            logger.debug("Nested request failed", exc_info=True)
            return None
        finally:
            self._depth -= 1
