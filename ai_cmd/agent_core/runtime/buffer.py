from __future__ import annotations

from typing import Any, Iterator, List, Tuple

MISSING_OUTPUT = ""
"""Value returned for indices that do not exist in the current run."""


class OutputBuffer:
    """Ordered, append-only store of per-step results for one run.

    Index ``i`` always holds the result of the ``i``-th step that reached the
    append stage. Lookups are best-effort: the provider generates indices
    speculatively, so an out-of-range index yields ``MISSING_OUTPUT`` instead
    of raising.
    """

    def __init__(self) -> None:
        self._items: List[Any] = []

    def append(self, result: Any) -> int:
        self._items.append(result)
        return len(self._items) - 1

    def get(self, index: int) -> Any:
        if isinstance(index, bool) or not isinstance(index, int):
            return MISSING_OUTPUT
        if 0 <= index < len(self._items):
            return self._items[index]
        return MISSING_OUTPUT

    def reset(self) -> None:
        """Drop every entry. Only called at the start of a top-level run."""
        self._items = []

    def snapshot(self) -> Tuple[Any, ...]:
        return tuple(self._items)

    def __getitem__(self, index: int) -> Any:
        return self.get(index)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"OutputBuffer(size={len(self._items)})"
