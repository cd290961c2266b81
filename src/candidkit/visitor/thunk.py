from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_UNSET = object()


class RecursiveThunk(Generic[T]):
    """Zero-argument deferred computation, memoized for the owning node only.

    Each recursive occurrence owns its own thunk, so two occurrences of the
    same recursive type at different paths never share an expansion. The
    first evaluation runs under a lock; concurrent callers wait for it and
    all receive the same value.
    """

    __slots__ = ("_compute", "_value", "_lock")

    def __init__(self, compute: Callable[[], T]):
        self._compute: Optional[Callable[[], T]] = compute
        self._value: object = _UNSET
        self._lock = threading.RLock()

    @property
    def is_resolved(self) -> bool:
        return self._value is not _UNSET

    def get(self) -> T:
        if self._value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    compute = self._compute
                    if compute is None:
                        raise RuntimeError("RecursiveThunk has no computation to run")
                    value = compute()
                    self._value = value
                    # Drop the closure so the expanded tree does not pin the builder.
                    self._compute = None
        return self._value  # type: ignore[return-value]

    def __call__(self) -> T:
        return self.get()

    def __repr__(self) -> str:
        state = "resolved" if self.is_resolved else "pending"
        return f"RecursiveThunk({state})"
