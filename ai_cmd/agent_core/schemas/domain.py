from __future__ import annotations

from enum import Enum, IntEnum
from typing import Literal

from .base import BaseSchema

ROOT_NAMESPACE = "base_function"
"""Namespace under which every registered capability is addressed."""

ARG_MARKER = "@@ai-arg@@"
"""Marker the provider puts in front of each argument of a capability call."""

OUTPUT_LIST_NAME = "outputList"
"""Name of the output buffer in back-references and inside code blocks."""


class StepKind(IntEnum):
    """Step kinds; the integer values are the ``type`` codes of the wire format."""

    text_answer = 1
    capability_call = 2
    shell_command = 3
    code_block = 4
    recurse = 5


class CapabilityKind(str, Enum):
    function = "function"
    value = "value"


class ChatMessage(BaseSchema):
    role: Literal["system", "user", "assistant"]
    content: str
