"""Capability object handed to event listeners."""

from typing import Optional


class ModelHandle:
    """Narrow write access to a model, given to event listeners.

    Exposes only ``queue_update``, ``schedule`` and ``clear``. Each call
    goes through the same public methods any other caller uses.
    """

    __slots__ = ("_state", "_scheduler")

    def __init__(self, state, scheduler):
        """Initialize handle.

        Args:
            state: StateStore receiving queued updates
            scheduler: EventScheduler receiving schedule/clear calls
        """
        self._state = state
        self._scheduler = scheduler

    def queue_update(self, persons, label: str) -> None:
        """Queue a state change for ``persons`` at the next commit."""
        self._state.queue_update(persons, label)

    def schedule(self, targets, delays, event_label: str):
        """Schedule ``event_label`` for ``targets`` after ``delays`` steps."""
        return self._scheduler.schedule(targets, delays, event_label)

    def clear(self, targets, event_label: Optional[str] = None) -> int:
        """Cancel pending events for ``targets``."""
        return self._scheduler.clear(targets, event_label)

    def __repr__(self) -> str:
        return f"ModelHandle({self._state!r}, {self._scheduler!r})"
