from __future__ import annotations

"""LangGraph step dispatcher.

``StepDispatcher`` executes a parsed plan one step at a time.

Execution model
---------------

- The dispatcher runs a LangGraph state machine over a mutable ``_GraphState``:
  ``start -> execute (loop) -> finish | recurse``.
- Each ``execute`` iteration runs exactly one step at index ``idx``.
- The output buffer is reset once, in ``start``. Every step that completes
  appends exactly one entry, so ``outputList[i]`` in a later step refers to the
  ``i``-th completed step of the same run.

Step kinds
----------

- ``text_answer``: show the content and record it.
- ``capability_call``: parse the content as a call expression, resolve the
  back-references and invoke the capability. Content that does not parse is
  handled as a text answer.
- ``shell_command`` / ``code_block``: content that starts with the registry
  prefix and parses as a call expression runs as a capability call; anything
  else goes to the command runner or the code executor.
- ``recurse``: hand the content to the ``recurse`` callback and end the run.

Failure policy
--------------

An exception raised while executing a step is reported on the console,
logged, and the dispatcher moves on to the next step. ``after_step`` only
fires for steps that completed. ``after_all_steps`` fires exactly once when the
plan is exhausted, and never for a run that ended in ``recurse``.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, Sequence

from langgraph.graph import END, StateGraph

from ai_cmd.core.logging_config import get_logger

from ..errors import CapabilityNotFoundError, CommandFailedError, HandlerFailure
from ..planning.call_expression import CallExpression, ParseFailure, parse_call_expression
from ..planning.steps import Step, coerce_step
from ..schemas.domain import StepKind
from .models import DispatcherState, DispatchOutcome, _GraphState

if TYPE_CHECKING:
    from ..context import EngineContext

logger = get_logger(__name__)

RecurseCallback = Callable[[str], Awaitable[Any]]

# start, finish/recurse and END on top of one superstep per plan item
_GRAPH_OVERHEAD = 10


class StepDispatcher:
    """Execute a list of steps against the engine context."""

    def __init__(self, context: "EngineContext", *, recurse: Optional[RecurseCallback] = None) -> None:
        """
        Args:
            context: Engine context holding the registry, buffer, pipeline and runners.
            recurse: Coroutine function that starts a nested run for a ``recurse`` step.
        """
        self._ctx = context
        self._recurse = recurse
        self._state = DispatcherState.idle
        self._graph = self._build_graph()

    @property
    def state(self) -> DispatcherState:
        return self._state

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("execute", self._node_execute_next)
        g.add_node("finish", self._node_finish)
        g.add_node("recurse", self._node_recurse)

        g.set_entry_point("start")
        g.add_edge("start", "execute")

        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {
                "recurse": "recurse",
                "finish": "finish",
                "continue": "execute",
            },
        )
        g.add_edge("recurse", END)
        g.add_edge("finish", END)
        return g.compile()

    async def execute_steps(self, steps: Sequence[Any]) -> DispatchOutcome:
        plan: List[Step] = [coerce_step(s) for s in steps]
        state: _GraphState = {"steps": plan, "idx": 0, "executed": 0}
        final = await self._graph.ainvoke(state, config={"recursion_limit": len(plan) + _GRAPH_OVERHEAD})
        outputs = final.get("_outputs")
        if outputs is None:
            outputs = self._ctx.buffer.snapshot()
        return DispatchOutcome(state=self._state, steps_executed=int(final.get("executed") or 0), outputs=outputs)

    async def _node_start(self, state: _GraphState) -> _GraphState:
        """Graph entry node. Resets the output buffer for the new run."""
        self._ctx.buffer.reset()
        self._state = DispatcherState.running
        logger.debug(f"Dispatching {len(state['steps'])} steps")
        return state

    async def _node_execute_next(self, state: _GraphState) -> _GraphState:
        """Execute the next step, or mark the run finished when the plan is exhausted."""
        steps = state["steps"]
        idx = int(state.get("idx") or 0)
        if idx >= len(steps):
            state["_finished"] = True
            return state

        self._state = DispatcherState.running
        state["executed"] = int(state.get("executed") or 0) + 1
        step = steps[idx]
        try:
            step = await self._ctx.pipeline.before_step(steps, idx, step)
            if step.description:
                self._ctx.console.info(step.description)
            if step.kind is StepKind.recurse:
                await self._start_recursion(state, step)
                return state
            result = await self._run_step(step)
        except Exception as e:
            self._ctx.console.error(f"Step {idx + 1} failed: {e}")
            logger.debug(f"Step {idx + 1} ({step.kind.name}) failed", exc_info=True)
            state["idx"] = idx + 1
            return state

        self._ctx.buffer.append(result)
        await self._ctx.pipeline.after_step(steps, idx, step, self._ctx.buffer.snapshot())
        state["idx"] = idx + 1
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        """Finish node. Fires ``after_all_steps`` exactly once."""
        outputs = self._ctx.buffer.snapshot()
        await self._ctx.pipeline.after_all_steps(state["steps"], outputs)
        state["_outputs"] = outputs
        self._state = DispatcherState.done
        return state

    async def _node_recurse(self, state: _GraphState) -> _GraphState:
        """Recurse node. The nested run already happened; this run ends here."""
        self._state = DispatcherState.recursing
        return state

    def _route_after_execute(self, state: _GraphState) -> str:
        if state.get("_recurse_content") is not None:
            return "recurse"
        if state.get("_finished"):
            return "finish"
        return "continue"

    async def _start_recursion(self, state: _GraphState, step: Step) -> None:
        if self._recurse is None:
            raise HandlerFailure("recurse step has no handler in this context")
        state["_outputs"] = self._ctx.buffer.snapshot()
        logger.debug(f"Recursing with: {step.content}")
        await self._recurse(step.content)
        state["_recurse_content"] = step.content

    async def _run_step(self, step: Step) -> Any:
        if step.kind is StepKind.capability_call:
            call = parse_call_expression(step.content, root_namespace=self._ctx.registry.root_namespace)
            if isinstance(call, ParseFailure):
                logger.debug(f"Capability call did not parse ({call.reason}); answering as text")
                return await self._emit_text(step.content)
            return await self._call_capability(call)

        if step.kind is StepKind.shell_command:
            call = self._prefixed_call(step.content)
            if call is not None:
                return await self._call_capability(call)
            return await self._run_command(step.content)

        if step.kind is StepKind.code_block:
            call = self._prefixed_call(step.content)
            if call is not None:
                return await self._call_capability(call)
            return await self._ctx.code_executor.execute(step.content)

        return await self._emit_text(step.content)

    def _prefixed_call(self, content: str) -> Optional[CallExpression]:
        text = content.strip()
        # multi-line source is a code body, not a single call
        if not text.startswith(self._ctx.registry.prefix) or "\n" in text:
            return None
        call = parse_call_expression(text, root_namespace=self._ctx.registry.root_namespace)
        if isinstance(call, ParseFailure):
            return None
        return call

    async def _call_capability(self, call: CallExpression) -> Any:
        entry = self._ctx.registry.resolve(call.function_name, namespace=call.namespace)
        if entry is None:
            raise CapabilityNotFoundError(call.function_name, call.namespace)
        args = self._ctx.registry.resolve_arguments(call, self._ctx.buffer)
        logger.debug(f"Invoking {entry.qualified_name} with {len(args)} args")
        return await self._ctx.registry.invoke(entry, args)

    async def _run_command(self, command: str) -> str:
        result = await self._ctx.command_runner.run(command)
        if not result.success:
            raise CommandFailedError(command, result.exit_code, detail=result.error or result.stderr.strip() or None)
        if result.stdout:
            self._ctx.console.plain(result.stdout.rstrip("\n"))
        return result.stdout

    async def _emit_text(self, content: str) -> str:
        settings = self._ctx.settings
        if settings.ai.stream:
            await self._ctx.console.stream(content, settings.stream_delay_ms)
        else:
            self._ctx.console.success(content)
        return content
