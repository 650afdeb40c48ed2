from __future__ import annotations

"""Capability descriptors, registry entries and the extension base class.

An *extension* is a class that declares capabilities through
``describe_capabilities()`` and implements one attribute per declared name:

- ``function`` capabilities are methods; the provider calls them with
  positional string arguments.
- ``value`` capabilities are plain attributes (e.g. a library module) that are
  mainly useful inside code blocks.

The registry binds each declaration to its handler once, at registration
time, and stores the result as a ``CapabilityEntry``.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Tuple

from pydantic import Field, field_validator

from ..schemas.base import BaseSchema
from ..schemas.domain import CapabilityKind

if TYPE_CHECKING:
    from ..context import EngineContext


class CapabilityDescriptor(BaseSchema):
    """What an extension declares about one capability."""

    name: str = Field(..., min_length=1)
    kind: CapabilityKind = CapabilityKind.function
    params: List[str] = Field(default_factory=list)
    description: str = ""

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> CapabilityKind:
        if value is None or value == "" or value == CapabilityKind.function:
            return CapabilityKind.function
        if isinstance(value, str) and value.strip().lower() == "function":
            return CapabilityKind.function
        return CapabilityKind.value


@dataclass(frozen=True)
class CapabilityEntry:
    """A registered capability.

    Attributes
    ----------
    qualified_name:
        ``<base_name>_<load_index>``; unique across the registry.
    base_name:
        The name the extension declared.
    arity:
        Declared parameter names, in call order.
    kind:
        ``function`` or ``value``.
    description:
        Human-readable description shown in the catalogue.
    handler:
        Bound method for functions, the exposed object for values.
    load_index:
        Position of the owning extension in registration order.
    """

    qualified_name: str
    base_name: str
    arity: Tuple[str, ...]
    kind: CapabilityKind
    description: str
    handler: Any
    load_index: int

    @classmethod
    def build(cls, descriptor: CapabilityDescriptor, *, handler: Any, load_index: int) -> "CapabilityEntry":
        return cls(
            qualified_name=f"{descriptor.name}_{load_index}",
            base_name=descriptor.name,
            arity=tuple(descriptor.params),
            kind=descriptor.kind,
            description=descriptor.description,
            handler=handler,
            load_index=load_index,
        )

    def signature(self) -> str:
        if self.kind is CapabilityKind.function:
            return f"{self.qualified_name}({', '.join(self.arity)})"
        return self.qualified_name


class BaseExtension:
    """Base class for capability extensions.

    Subclasses override ``describe_capabilities`` and implement one method
    (or attribute, for values) per declared name.
    """

    def __init__(self, context: "EngineContext") -> None:
        self.context = context

    @property
    def name(self) -> str:
        return type(self).__name__

    def describe_capabilities(self) -> List[CapabilityDescriptor]:
        return []
