# readtree/core/fixpoint.py
from typing import Any, Callable

from readtree.exceptions import InfiniteRecursionError

_UNSET = object()

class _FixedPointRef:
    # stands in for the result of fix(f) while f is still running.
    __slots__ = ("_target",)

    def __init__(self):
        self._target = _UNSET

    def _resolve(self) -> Any:
        if self._target is _UNSET:
            raise InfiniteRecursionError("infinite recursion encountered: fix(f) argument used before f returned")
        return self._target

    def __getattr__(self, name: str) -> Any:
        return getattr(self._resolve(), name)

    def __getitem__(self, key: Any) -> Any:
        return self._resolve()[key]

    def __contains__(self, key: Any) -> bool:
        return key in self._resolve()

    def __iter__(self):
        return iter(self._resolve())

    def __len__(self) -> int:
        return len(self._resolve())

    def __call__(self, *args, **kwargs) -> Any:
        return self._resolve()(*args, **kwargs)

    def __repr__(self) -> str:
        if self._target is _UNSET:
            return "<fix: unresolved>"
        return f"<fix: {self._target!r}>"

def fix(f: Callable[[Any], Any]) -> Any:
    """
    Least fixed point of f, i.e. x where x = f(x).

    f receives a reference to its own result. The reference may be captured
    (in closures, lambdas, nested structures) but only dereferenced after f
    returns:

        args = fix(lambda self: {"name": "pq", "greet": lambda: "hi " + self["name"]})
        args["greet"]()  # -> "hi pq"

    This is usable for building an argument bundle before any other library
    is available.
    """
    ref = _FixedPointRef()
    result = f(ref)
    ref._target = result
    return result
