"""Plugins and the hook pipeline.

A plugin subclasses ``BasePlugin`` and overrides the callbacks it cares
about. ``HookPipeline`` calls them in registration order.
"""

from .base import BasePlugin, DefaultPlugin
from .pipeline import HookPipeline

__all__ = ["BasePlugin", "DefaultPlugin", "HookPipeline"]
