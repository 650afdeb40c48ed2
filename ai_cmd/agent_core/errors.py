"""Error taxonomy for the step execution engine.

Nothing raised here aborts a run:

- ``HandlerFailure`` and its subclasses are raised while executing one step;
  the dispatcher reports them and moves on to the next step.
- ``HookFailure`` wraps an exception raised by a plugin callback; the hook
  pipeline reports it and keeps the last good value.
- Malformed call expressions are not exceptions at all: the parser returns a
  ``ParseFailure`` value (see ``planning.call_expression``).
"""

from __future__ import annotations


class AICmdError(Exception):
    """Base class for ai-cmd errors."""


class HandlerFailure(AICmdError):
    """A capability, command or code block failed while executing a step."""


class CapabilityNotFoundError(HandlerFailure):
    def __init__(self, qualified_name: str, namespace: str) -> None:
        super().__init__(f"unknown capability: {namespace}.{qualified_name}")
        self.qualified_name = qualified_name
        self.namespace = namespace


class CommandFailedError(HandlerFailure):
    def __init__(self, command: str, exit_code: int | None, detail: str | None = None) -> None:
        message = f"command failed with exit code {exit_code}: {command}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code


class RecursionDepthExceededError(HandlerFailure):
    def __init__(self, limit: int) -> None:
        super().__init__(f"recurse step refused: maximum recursion depth {limit} reached")
        self.limit = limit


class HookFailure(AICmdError):
    """A plugin callback raised; carries the plugin and hook names."""

    def __init__(self, plugin: str, hook: str, cause: BaseException) -> None:
        super().__init__(f"Error in plugin {plugin}.{hook}: {cause}")
        self.plugin = plugin
        self.hook = hook
        self.cause = cause


class DuplicateCapabilityError(AICmdError):
    def __init__(self, qualified_name: str) -> None:
        super().__init__(f"capability already registered: {qualified_name}")
        self.qualified_name = qualified_name


class ExtensionLoadError(AICmdError):
    """An extension or plugin reference could not be imported or instantiated."""
