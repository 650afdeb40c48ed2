"""Execution of provider-authored Python code.

TRUST BOUNDARY: ``CodeExecutor`` runs arbitrary source text produced by the
completion provider in the current process, with the current user's
permissions. There is no sandbox. Whoever configures the provider and accepts
its plans is trusting it with the machine.

The code sees exactly two bindings besides the Python builtins:

- ``base_function``: attribute view over the capability registry, e.g.
  ``await base_function.read_file_0("a.txt")``;
- ``outputList``: the output buffer of the current run, e.g. ``outputList[0]``.

The source becomes the body of an ``async def``, so ``await`` works at the
top level and ``return`` yields the step's result. Source that starts with the
registry prefix is a single expression and is returned directly.
"""

import builtins
import inspect
import textwrap
from typing import TYPE_CHECKING, Any, Dict

from ai_cmd.core.logging_config import get_logger

from ..errors import HandlerFailure
from ..schemas.domain import OUTPUT_LIST_NAME

if TYPE_CHECKING:
    from ..capabilities.registry import CapabilityRegistry
    from .buffer import OutputBuffer

logger = get_logger(__name__)

_ENTRYPOINT = "__ai_cmd_code_step__"
_FILENAME = "<ai-code>"


class CodeExecutor:
    def __init__(self, registry: "CapabilityRegistry", buffer: "OutputBuffer") -> None:
        self._registry = registry
        self._buffer = buffer

    def bindings(self) -> Dict[str, Any]:
        return {
            "__builtins__": builtins,
            "__name__": "__ai_code__",
            self._registry.root_namespace: self._registry.namespace(),
            OUTPUT_LIST_NAME: self._buffer,
        }

    def wrap(self, code: str) -> str:
        source = textwrap.dedent(code).strip()
        if source.startswith(self._registry.prefix) and "\n" not in source:
            source = f"return {source}"
        body = textwrap.indent(source or "pass", "    ")
        return f"async def {_ENTRYPOINT}():\n{body}\n"

    async def execute(self, code: str) -> Any:
        """Run ``code`` and return its result.

        Exceptions propagate to the caller. ``exit()`` and interrupts raised by
        the code become ``HandlerFailure`` so they cannot end the process.
        """
        wrapped = self.wrap(code)
        namespace = self.bindings()
        logger.debug(f"Executing code block ({len(code)} chars)")
        exec(compile(wrapped, _FILENAME, "exec"), namespace)
        try:
            result = await namespace[_ENTRYPOINT]()
            if inspect.isawaitable(result):
                result = await result
        except (SystemExit, KeyboardInterrupt) as e:
            raise HandlerFailure(f"code block raised {type(e).__name__}: {e}") from e
        return result
