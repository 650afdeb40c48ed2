from __future__ import annotations

"""Engine context.

``EngineContext`` bundles everything a run needs. It is built once per
process by ``factory.build_context`` and handed to extensions, plugins, the
dispatcher and the service; nothing in the engine reaches for module-level
state.
"""

from dataclasses import dataclass

from ai_cmd.console import Console
from ai_cmd.core.config import Settings

from .abstraction.base import CompletionProvider
from .capabilities.registry import CapabilityRegistry
from .plugins.pipeline import HookPipeline
from .runtime.buffer import OutputBuffer
from .runtime.code import CodeExecutor
from .runtime.commands import CommandRunner


@dataclass(frozen=True)
class EngineContext:
    """Dependency bundle for the step execution engine.

    - ``registry``/``pipeline``: populated by the factory, in load order.
    - ``buffer``: the output buffer shared by the dispatcher, argument
      resolution and code blocks.
    - ``code_executor``/``command_runner``: back the code and shell step kinds.
    """

    settings: Settings
    console: Console
    completion: CompletionProvider
    registry: CapabilityRegistry
    pipeline: HookPipeline
    buffer: OutputBuffer
    code_executor: CodeExecutor
    command_runner: CommandRunner
