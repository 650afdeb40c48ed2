from __future__ import annotations

"""Dispatcher state types.

- ``DispatcherState`` is the lifecycle of one ``execute_steps`` call.
- ``DispatchOutcome`` is what the dispatcher hands back to the caller.
- ``_GraphState`` is the mutable state passed between LangGraph nodes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, NotRequired, Required, Tuple, TypedDict

from ..planning.steps import Step


class DispatcherState(str, Enum):
    idle = "idle"
    running = "running"
    recursing = "recursing"
    done = "done"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of ``StepDispatcher.execute_steps``.

    ``steps_executed`` counts the steps the dispatcher started, including
    steps that failed. ``outputs`` is the buffer as it stood when the run
    ended (before a nested run took over the buffer, for ``recursing``).
    """

    state: DispatcherState
    steps_executed: int
    outputs: Tuple[Any, ...]


class _GraphState(TypedDict):
    """Mutable LangGraph state for a single ``execute_steps`` call.

    Required keys:

    - ``steps``: the plan being executed.
    - ``idx``: index of the next step.
    - ``executed``: number of steps started so far.

    Optional keys:

    - ``_finished``: every step was processed.
    - ``_recurse_content``: set by a Recurse step; ends the run.
    - ``_outputs``: buffer snapshot taken when the run ended.
    """

    steps: Required[List[Step]]
    idx: Required[int]
    executed: Required[int]
    _finished: NotRequired[bool]
    _recurse_content: NotRequired[str]
    _outputs: NotRequired[Tuple[Any, ...]]
