"""Ordered post-processing callbacks for computed link values."""

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

Hook = Callable[[T, Any], T]


class HookChain(Generic[T]):
    """
    An ordered list of callbacks run after a core computation.

    Each callback receives the in-progress value and the link it was computed
    for, and returns the value to hand to the next callback.
    """

    def __init__(self) -> None:
        self._callbacks: list[Hook[T]] = []

    def register(self, callback: Hook[T]) -> Hook[T]:
        """Append a callback. Returns it unchanged so this works as a decorator."""
        self._callbacks.append(callback)
        return callback

    def unregister(self, callback: Hook[T]) -> None:
        self._callbacks.remove(callback)

    def __call__(self, value: T, link: Any) -> T:
        for callback in self._callbacks:
            value = callback(value, link)
        return value

    def __len__(self) -> int:
        return len(self._callbacks)
