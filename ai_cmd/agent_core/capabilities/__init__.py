"""Capability registry and extensions.

A *capability* is a host function or value the completion provider may use
in a plan.

- An extension declares capabilities through ``describe_capabilities()``.
- ``CapabilityRegistry`` binds every declaration to a handler under a
  qualified name ``<name>_<load_index>``.
- The dispatcher resolves call expressions through the registry; code blocks
  see it as the ``base_function`` binding.

This package exports:

- ``BaseExtension``: base class for extensions.
- ``CapabilityDescriptor``/``CapabilityEntry``: declaration and registered form.
- ``CapabilityRegistry``: qualified name to capability mapping.
- ``DefaultExtension``: the built-in capabilities.
"""

from .base import BaseExtension, CapabilityDescriptor, CapabilityEntry
from .builtin import DefaultExtension
from .registry import CapabilityNamespace, CapabilityRegistry

__all__ = [
    "BaseExtension",
    "CapabilityDescriptor",
    "CapabilityEntry",
    "CapabilityNamespace",
    "CapabilityRegistry",
    "DefaultExtension",
]
