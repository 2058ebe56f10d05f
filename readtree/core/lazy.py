# readtree/core/lazy.py
"""
Deferred values for the tree walker.

A node's value is only computed (and its files only executed) once somebody
asks for it. ``Thunk`` memoises one deferred computation; ``LazyNamespace``
is a read-only mapping of thunks that forces an entry on lookup.
"""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator

from readtree.exceptions import InfiniteRecursionError

_PENDING = object()
_RUNNING = object()

class Thunk:
    __slots__ = ("_compute", "_value", "label")

    def __init__(self, compute: Callable[[], Any], label: str = "<thunk>"):
        self._compute = compute
        self._value = _PENDING
        self.label = label

    @classmethod
    def of(cls, value: Any, label: str = "<value>") -> "Thunk":
        thunk = cls(lambda: value, label)
        thunk._value = value
        thunk._compute = None
        return thunk

    @property
    def is_forced(self) -> bool:
        return self._value is not _PENDING and self._value is not _RUNNING

    def force(self) -> Any:
        if self._value is _RUNNING:
            raise InfiniteRecursionError(f"infinite recursion encountered while forcing {self.label}")
        if self._value is _PENDING:
            compute = self._compute
            self._value = _RUNNING
            try:
                value = compute()
            except BaseException:
                # a failed computation fails again on the next force.
                self._value = _PENDING
                raise
            self._value = value
            self._compute = None
        return self._value

    def __repr__(self) -> str:
        if self.is_forced:
            return f"Thunk({self._value!r})"
        return f"Thunk(<unforced {self.label}>)"

class LazyNamespace(Mapping):
    """Read-only mapping whose values are forced on first access."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Thunk]):
        self._entries: Dict[str, Thunk] = dict(entries)

    def __getitem__(self, key: str) -> Any:
        return self._entries[key].force()

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def thunk(self, key: str) -> Thunk:
        return self._entries[key]

    def __repr__(self) -> str:
        return f"LazyNamespace({list(self._entries)!r})"

def force_all(value: Any) -> Any:
    # deep-forces a namespace into plain dicts; non-mapping values are left as they are.
    if isinstance(value, Thunk):
        value = value.force()
    if isinstance(value, LazyNamespace):
        return {key: force_all(value.thunk(key)) for key in value}
    return value
