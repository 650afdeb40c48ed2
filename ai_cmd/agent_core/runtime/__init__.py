"""Step execution runtime.

The runtime executes a parsed plan against the engine context:

- ``OutputBuffer`` holds the per-step results of the current run.
- ``StepDispatcher`` walks the plan with a LangGraph state machine.
- ``CommandRunner`` and ``CodeExecutor`` back the shell and code step kinds.

The main entry point is ``StepDispatcher``.
"""

from .buffer import MISSING_OUTPUT, OutputBuffer
from .code import CodeExecutor
from .commands import CommandResult, CommandRunner
from .dispatcher import StepDispatcher
from .models import DispatcherState, DispatchOutcome

__all__ = [
    "MISSING_OUTPUT",
    "CodeExecutor",
    "CommandResult",
    "CommandRunner",
    "DispatchOutcome",
    "DispatcherState",
    "OutputBuffer",
    "StepDispatcher",
]
