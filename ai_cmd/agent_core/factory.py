from __future__ import annotations

"""Convenience factories for wiring the engine.

``build_context`` assembles an ``EngineContext`` from ``Settings``: the
built-in extension always gets load index 0 and the built-in plugin always
runs first; configured extensions and plugins follow in the order they are
listed. A reference that fails to load is reported and skipped.

Tests and embedding applications can inject their own completion provider
and console.
"""

import logging
from typing import Any, Optional

from ai_cmd.console import Console
from ai_cmd.core.config import Settings

from .abstraction.adapters.pydantic_ai import PydanticAICompletionProvider
from .abstraction.base import CompletionProvider
from .capabilities.base import BaseExtension
from .capabilities.builtin import DefaultExtension
from .capabilities.registry import CapabilityRegistry
from .context import EngineContext
from .errors import ExtensionLoadError
from .loading import load_object
from .plugins.base import BasePlugin, DefaultPlugin
from .plugins.pipeline import HookPipeline
from .runtime.buffer import OutputBuffer
from .runtime.code import CodeExecutor
from .runtime.commands import CommandRunner
from .service import AICommandService

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION_ATTR = "Extension"
DEFAULT_PLUGIN_ATTR = "Plugin"


def _instantiate(ref: str, default_attr: str, base: type, context: EngineContext) -> Any:
    obj = load_object(ref, default_attr)
    if isinstance(obj, type):
        if not issubclass(obj, base):
            raise ExtensionLoadError(f"{ref} is not a {base.__name__} subclass")
        return obj(context)
    if isinstance(obj, base):
        return obj
    raise ExtensionLoadError(f"{ref} is neither a {base.__name__} subclass nor an instance")


def build_context(
    settings: Settings,
    *,
    completion: Optional[CompletionProvider] = None,
    console: Optional[Console] = None,
) -> EngineContext:
    """Wire an ``EngineContext`` and load the configured extensions and plugins."""
    console = console or Console()
    registry = CapabilityRegistry()
    buffer = OutputBuffer()
    context = EngineContext(
        settings=settings,
        console=console,
        completion=completion or PydanticAICompletionProvider(settings.ai),
        registry=registry,
        pipeline=HookPipeline(console=console),
        buffer=buffer,
        code_executor=CodeExecutor(registry, buffer),
        command_runner=CommandRunner(timeout=settings.command_timeout),
    )

    registry.register_extension(DefaultExtension(context))
    for ref in settings.extensions:
        try:
            extension = _instantiate(ref, DEFAULT_EXTENSION_ATTR, BaseExtension, context)
            registry.register_extension(extension)
        except Exception as e:
            console.error(f"Failed to load extension {ref}: {e}")
            logger.debug(f"Failed to load extension {ref}", exc_info=True)

    context.pipeline.add(DefaultPlugin(context))
    for ref in settings.plugins:
        try:
            context.pipeline.add(_instantiate(ref, DEFAULT_PLUGIN_ATTR, BasePlugin, context))
        except Exception as e:
            console.error(f"Failed to load plugin {ref}: {e}")
            logger.debug(f"Failed to load plugin {ref}", exc_info=True)

    logger.debug(
        f"Engine context ready: {len(registry.extensions)} extensions, "
        f"{len(registry)} capabilities, {len(context.pipeline.plugins)} plugins"
    )
    return context


async def build_service(
    settings: Settings,
    *,
    completion: Optional[CompletionProvider] = None,
    console: Optional[Console] = None,
) -> AICommandService:
    """Build the context and return an initialized ``AICommandService``."""
    service = AICommandService(build_context(settings, completion=completion, console=console))
    await service.initialize()
    return service
