"""Step execution engine.

Design overview
---------------

A run turns one request into a plan and executes it:

- The completion provider replies with a JSON array of typed steps
  (``planning``).
- ``runtime.StepDispatcher`` executes the steps in order, appending each
  result to the ``OutputBuffer`` so later steps can refer to it as
  ``outputList[i]``.
- Capability-call steps are resolved through ``capabilities.CapabilityRegistry``
  under qualified names ``<name>_<load_index>``.
- ``plugins.HookPipeline`` lets plugins observe or rewrite the messages, the
  reply, the plan and each step.

No engine failure aborts a run: a failing step is reported and skipped, a
failing plugin callback is reported and ignored.

Typical usage
-------------

Most applications should use ``factory.build_service`` and
``service.AICommandService.run``.
"""

from .context import EngineContext
from .factory import build_context, build_service
from .service import AICommandService

__all__ = [
    "AICommandService",
    "EngineContext",
    "build_context",
    "build_service",
]
