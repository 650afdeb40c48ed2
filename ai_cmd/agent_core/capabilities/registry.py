from __future__ import annotations

"""Capability registry.

The registry maps a qualified capability name to a ``CapabilityEntry``.

Qualified names are ``<name>_<load_index>``, where the load index is the
position of the owning extension in registration order (the built-in
extension is always ``0``). Two extensions may therefore both export
``read_file``; they become ``read_file_0`` and ``read_file_1``. The registry
refuses any registration that would make two entries share a qualified name.

``describe_all`` enumerates entries in registration order, declaration order
within an extension. Its output is the capability catalogue the completion
provider sees, so the order must not depend on anything else.
"""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from ..errors import DuplicateCapabilityError, HandlerFailure
from ..planning.call_expression import BackReference, CallExpression
from ..schemas.domain import ROOT_NAMESPACE, CapabilityKind
from .base import BaseExtension, CapabilityDescriptor, CapabilityEntry

if TYPE_CHECKING:
    from ..runtime.buffer import OutputBuffer

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """
    In-memory, insertion-ordered mapping of qualified names to capabilities.

    Notes:
        - ``register`` raises ``DuplicateCapabilityError`` on a qualified-name collision.
        - ``resolve`` returns ``None`` for unknown names; callers decide how to fail.
    """

    def __init__(self, root_namespace: str = ROOT_NAMESPACE) -> None:
        self._root_namespace = root_namespace
        self._entries: Dict[str, CapabilityEntry] = {}
        self._extensions: List[BaseExtension] = []

    @property
    def root_namespace(self) -> str:
        return self._root_namespace

    @property
    def prefix(self) -> str:
        """Text that opens a direct capability call, e.g. ``base_function.``."""
        return f"{self._root_namespace}."

    @property
    def extensions(self) -> Sequence[BaseExtension]:
        return tuple(self._extensions)

    def register(self, entry: CapabilityEntry) -> None:
        """
        Register a single entry.

        Raises:
            DuplicateCapabilityError: If the qualified name is already taken.
        """
        if entry.qualified_name in self._entries:
            raise DuplicateCapabilityError(entry.qualified_name)
        self._entries[entry.qualified_name] = entry

    def register_extension(self, extension: BaseExtension) -> int:
        """
        Register every capability an extension declares.

        The whole batch is validated before anything is registered, so a faulty
        extension leaves the registry untouched.

        Returns:
            The load index assigned to the extension.

        Raises:
            ValueError: If a declaration is invalid or names a missing attribute.
            DuplicateCapabilityError: If a qualified name would collide.
        """
        load_index = len(self._extensions)
        entries: List[CapabilityEntry] = []
        seen: set[str] = set()
        for raw in extension.describe_capabilities() or []:
            try:
                descriptor = (
                    raw if isinstance(raw, CapabilityDescriptor) else CapabilityDescriptor.model_validate(raw)
                )
            except ValidationError as e:
                raise ValueError(f"invalid capability declaration in {extension.name}: {e}") from e
            if not hasattr(extension, descriptor.name):
                raise ValueError(f"{extension.name} declares '{descriptor.name}' but does not implement it")
            handler = getattr(extension, descriptor.name)
            if descriptor.kind is CapabilityKind.function and not callable(handler):
                raise ValueError(f"{extension.name}.{descriptor.name} is declared as a function but is not callable")
            entry = CapabilityEntry.build(descriptor, handler=handler, load_index=load_index)
            if entry.qualified_name in self._entries or entry.qualified_name in seen:
                raise DuplicateCapabilityError(entry.qualified_name)
            seen.add(entry.qualified_name)
            entries.append(entry)

        for entry in entries:
            self.register(entry)
        self._extensions.append(extension)
        logger.debug(f"Registered extension {extension.name} at index {load_index} ({len(entries)} capabilities)")
        return load_index

    def resolve(self, qualified_name: str, *, namespace: Optional[str] = None) -> Optional[CapabilityEntry]:
        """
        Look up a capability.

        Args:
            qualified_name: Name including the load-index suffix, e.g. ``read_file_0``.
            namespace: Namespace from the call expression; ``None`` means the root namespace.

        Returns:
            The entry, or ``None`` if nothing is registered under that name.
        """
        if namespace is not None and namespace != self._root_namespace:
            return None
        return self._entries.get(qualified_name)

    def has(self, qualified_name: str) -> bool:
        return qualified_name in self._entries

    def entries(self) -> List[CapabilityEntry]:
        return list(self._entries.values())

    def describe_all(self) -> List[str]:
        lines: List[str] = []
        for number, entry in enumerate(self._entries.values(), start=1):
            if entry.description:
                lines.append(f"{number}. {entry.signature()} - {entry.description}")
            else:
                lines.append(f"{number}. {entry.signature()}")
        return lines

    def catalogue(self) -> str:
        return "\n".join(self.describe_all())

    def resolve_arguments(self, call: CallExpression, buffer: "OutputBuffer") -> List[Any]:
        """Replace back-references with buffered outputs; literals pass through."""
        resolved: List[Any] = []
        for arg in call.args:
            if isinstance(arg, BackReference):
                resolved.append(buffer.get(arg.index))
            else:
                resolved.append(arg.value)
        return resolved

    async def invoke(self, entry: CapabilityEntry, args: Sequence[Any]) -> Any:
        """
        Call a capability with positional arguments.

        Arity is not checked; a mismatch surfaces as whatever the handler raises.
        """
        handler = entry.handler
        if entry.kind is CapabilityKind.value:
            if not args:
                return handler
            if not callable(handler):
                raise HandlerFailure(f"{entry.qualified_name} is a value and cannot be called with arguments")
        result = handler(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def namespace(self) -> "CapabilityNamespace":
        return CapabilityNamespace(self)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CapabilityEntry]:
        return iter(list(self._entries.values()))


class CapabilityNamespace:
    """Attribute view over a registry, bound as ``base_function`` inside code blocks."""

    def __init__(self, registry: CapabilityRegistry) -> None:
        self._registry = registry

    def __getattr__(self, name: str) -> Any:
        entry = self._registry.resolve(name)
        if entry is None:
            raise AttributeError(f"{self._registry.root_namespace} has no capability '{name}'")
        return entry.handler

    def __dir__(self) -> List[str]:
        return [entry.qualified_name for entry in self._registry.entries()]

    def as_mapping(self) -> Mapping[str, Any]:
        return {entry.qualified_name: entry.handler for entry in self._registry.entries()}
