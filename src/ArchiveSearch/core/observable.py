"""Explicit change notification for engine state holders."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from ArchiveSearch.utils.log import log

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscription:
    """Handle returned by `Observable.subscribe`; call `unsubscribe()` once done."""

    __slots__ = ("_detach", "active")

    def __init__(self, detach: Callable[[], None]) -> None:
        self._detach = detach
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._detach()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unsubscribe()


class Observable(Generic[T]):
    """Holds a snapshot and pushes every new snapshot to listeners."""

    def __init__(self, initial: T) -> None:
        self._snapshot = initial
        self._listeners: list[Listener] = []

    def get_snapshot(self) -> T:
        return self._snapshot

    def subscribe(self, listener: Listener, *, emit_current: bool = False) -> Subscription:
        """Register a listener.

        Args:
            listener: Called with each new snapshot.
            emit_current: Also call the listener right away with the
                current snapshot.

        Returns:
            Handle that detaches the listener.
        """
        self._listeners.append(listener)
        if emit_current:
            listener(self._snapshot)
        return Subscription(lambda: self._remove(listener))

    def _remove(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            log.debug("Listener already detached")

    def _publish(self, snapshot: T) -> None:
        self._snapshot = snapshot
        for listener in tuple(self._listeners):
            listener(snapshot)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
