from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Sequence

from pydantic import ConfigDict, Field, ValidationError, field_validator

from ..schemas.base import BaseSchema
from ..schemas.domain import StepKind

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"^```(?:json)?\s*\n?|\n?```\s*$")


class Step(BaseSchema):
    """One planned unit of execution.

    On the wire the kind is carried in the ``type`` field as an integer code.
    Unknown codes fall back to a text answer.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    kind: StepKind = Field(default=StepKind.text_answer, alias="type")
    content: str = ""
    description: str = ""

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> StepKind:
        if isinstance(value, StepKind):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            if name in StepKind.__members__:
                return StepKind[name]
            if name.isdigit():
                value = int(name)
        try:
            return StepKind(value)
        except (ValueError, TypeError):
            return StepKind.text_answer

    @field_validator("content", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)

    def to_wire(self) -> Dict[str, Any]:
        return {"type": int(self.kind), "content": self.content, "description": self.description}


def text_step(content: str, description: str = "") -> Step:
    return Step(kind=StepKind.text_answer, content=content, description=description)


def coerce_step(raw: Any) -> Step:
    """Turn a plan item into a ``Step``; anything that does not validate becomes a text answer."""
    if isinstance(raw, Step):
        return raw
    if isinstance(raw, dict):
        try:
            return Step.model_validate(raw)
        except ValidationError as e:
            logger.debug(f"Plan item failed validation, treating as text: {e}")
    if isinstance(raw, str):
        return text_step(raw)
    return text_step(json.dumps(raw, ensure_ascii=False, default=str))


def normalize_plan(plan: Sequence[Any]) -> List[Step]:
    return [coerce_step(raw) for raw in plan]


def strip_json_fence(reply: str) -> str:
    return _JSON_FENCE.sub("", reply.strip()).strip()


def parse_reply(reply: str) -> List[Step]:
    """Parse a raw provider reply into steps.

    A JSON array (optionally inside a ```json fence) becomes a plan; any other
    reply, including text that fails to decode, is a single text answer
    carrying the reply.
    """
    text = strip_json_fence(reply or "")
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Reply is not JSON, treating it as a text answer: {e}")
        return [text_step(text)]
    if isinstance(decoded, list):
        return normalize_plan(decoded)
    return [text_step(text)]
