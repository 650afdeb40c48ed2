"""Shared schema types for the agent core."""

from .base import BaseSchema
from .domain import (
    ARG_MARKER,
    OUTPUT_LIST_NAME,
    ROOT_NAMESPACE,
    CapabilityKind,
    ChatMessage,
    StepKind,
)

__all__ = [
    "ARG_MARKER",
    "OUTPUT_LIST_NAME",
    "ROOT_NAMESPACE",
    "BaseSchema",
    "CapabilityKind",
    "ChatMessage",
    "StepKind",
]
