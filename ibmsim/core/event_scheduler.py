"""Delay-queue event scheduling for individual-based models."""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

import numpy as np

from ..errors import InvalidParameter, LengthMismatch, UnknownLabel
from ..utils.indexing import as_person_indices, validate_label_universe
from ..utils.logger import setup_logger

Listener = Callable[..., None]


@dataclass(frozen=True)
class ScheduledEntry:
    """A pending event for one person.

    Attributes:
        person: Person index
        event_label: Event kind
        delay: Remaining whole steps until the event fires
    """
    person: int
    event_label: str
    delay: int


class EventScheduler:
    """Per-person event schedule with whole-step delays.

    Each entry counts down once per :meth:`tick`. When its delay reaches
    zero, :meth:`process` hands the person to every listener registered
    for the entry's event label and removes the entry. Entries are kept in
    parallel arrays so ticking is one vectorised decrement.

    A person may hold several entries for the same label; scheduling never
    deduplicates. Callers wanting at most one outstanding entry check
    :meth:`get_scheduled` first.
    """

    def __init__(self, population_size: int, event_labels: Iterable[str] = ()):
        """Initialize scheduler.

        Args:
            population_size: Number of persons N
            event_labels: Event labels to declare up front
        """
        if int(population_size) != population_size or population_size < 0:
            raise InvalidParameter(
                f"population_size must be a non-negative integer, got {population_size}"
            )

        self.population_size = int(population_size)
        self.logger = setup_logger(self.__class__.__name__)

        self._labels: List[str] = []
        self._codes: Dict[str, int] = {}
        self._listeners: List[List[Listener]] = []

        self._ids = np.zeros(0, dtype=np.int64)
        self._persons = np.zeros(0, dtype=np.int64)
        self._events = np.zeros(0, dtype=np.int64)
        self._delays = np.zeros(0, dtype=np.int64)
        self._next_id = 0

        event_labels = list(event_labels)
        if event_labels:
            for label in validate_label_universe(event_labels, kind="event"):
                self.add_event(label)

    @property
    def event_labels(self) -> List[str]:
        """Declared event labels, in declaration order."""
        return list(self._labels)

    def add_event(self, event_label: str, listeners: Optional[Iterable[Listener]] = None) -> None:
        """Declare a new event label.

        Args:
            event_label: Name of the event kind
            listeners: Optional initial listeners, in firing order

        Raises:
            InvalidParameter: If the label exists, is not a string, or a
                listener is not callable
        """
        if not isinstance(event_label, str):
            raise InvalidParameter(f"event labels must be strings, got {event_label!r}")
        if event_label in self._codes:
            raise InvalidParameter(f"event {event_label!r} is already declared")

        listeners = list(listeners or [])
        for listener in listeners:
            self._check_listener(listener)

        self._codes[event_label] = len(self._labels)
        self._labels.append(event_label)
        self._listeners.append(listeners)

    def register_listener(self, event_label: str, listener: Listener) -> None:
        """Append ``listener`` to the listeners of ``event_label``.

        Listeners are called as ``listener(handle, targets, current_time)``.

        Raises:
            UnknownLabel: If the event is not declared
            InvalidParameter: If listener is not callable
        """
        code = self._code(event_label)
        self._check_listener(listener)
        self._listeners[code].append(listener)

    def listeners(self, event_label: str) -> List[Listener]:
        """Registered listeners for ``event_label``, in firing order."""
        return list(self._listeners[self._code(event_label)])

    def schedule(self, targets, delays, event_label: str) -> np.ndarray:
        """Schedule ``event_label`` for each person in ``targets``.

        Args:
            targets: Person indices
            delays: One delay per target, or a scalar for all of them;
                every delay must be an integer >= 1
            event_label: Event to fire

        Returns:
            Ids of the created entries

        Raises:
            UnknownLabel: If the event is not declared
            InvalidIndex: If a target is out of range
            LengthMismatch: If delays and targets differ in length
            InvalidParameter: If a delay is below 1 or not an integer
        """
        code = self._code(event_label)
        persons = as_person_indices(targets, self.population_size)
        delays = self._validate_delays(delays, len(persons))

        ids = np.arange(self._next_id, self._next_id + len(persons), dtype=np.int64)
        self._next_id += len(persons)

        self._ids = np.concatenate([self._ids, ids])
        self._persons = np.concatenate([self._persons, persons])
        self._events = np.concatenate([self._events, np.full(len(persons), code, dtype=np.int64)])
        self._delays = np.concatenate([self._delays, delays])
        return ids

    def get_scheduled(self, event_label: str) -> np.ndarray:
        """Persons with at least one pending entry for ``event_label``.

        Returns:
            Sorted array of unique person indices
        """
        code = self._code(event_label)
        return np.unique(self._persons[self._events == code])

    def clear(self, targets, event_label: Optional[str] = None) -> int:
        """Remove pending entries for ``targets``.

        Args:
            targets: Person indices
            event_label: Only remove entries of this event, if given

        Returns:
            Number of entries removed
        """
        mask = np.isin(self._persons, as_person_indices(targets, self.population_size))
        if event_label is not None:
            mask &= self._events == self._code(event_label)

        removed = int(np.count_nonzero(mask))
        if removed:
            self._keep(~mask)
        return removed

    def remaining_delays(self, person: int, event_label: Optional[str] = None) -> List[int]:
        """Sorted remaining delays of one person's pending entries."""
        index = int(as_person_indices(person, self.population_size)[0])
        mask = self._persons == index
        if event_label is not None:
            mask &= self._events == self._code(event_label)
        return sorted(int(d) for d in self._delays[mask])

    def entries(self) -> List[ScheduledEntry]:
        """Snapshot of all pending entries, in scheduling order."""
        return [
            ScheduledEntry(int(p), self._labels[e], int(d))
            for p, e, d in zip(self._persons, self._events, self._delays)
        ]

    def tick(self) -> None:
        """Decrement every remaining delay by one step.

        Must run exactly once per step before :meth:`process`; prefer
        :meth:`advance`, which does both.
        """
        np.subtract(self._delays, 1, out=self._delays)
        np.maximum(self._delays, 0, out=self._delays)

    def process(self, current_time: int, handle) -> Dict[str, np.ndarray]:
        """Fire and remove every entry whose delay has reached zero.

        Events fire in declaration order. For each event with due entries
        every listener is called once, in registration order, with the
        sorted unique due persons. Listener calls to ``schedule`` and
        ``clear`` take effect immediately; an entry cleared by an earlier
        listener in the same pass does not fire.

        Args:
            current_time: Current step, passed through to listeners
            handle: Capability object passed to listeners

        Returns:
            Mapping of fired event label to its targets
        """
        fired = {}
        for code, label in enumerate(self._labels):
            due = (self._delays == 0) & (self._events == code)
            if not np.any(due):
                continue

            due_ids = self._ids[due]
            targets = np.unique(self._persons[due])

            self.logger.debug(
                f"t={current_time}: firing {label!r} for {len(targets)} persons"
            )
            for listener in self._listeners[code]:
                listener(handle, targets, current_time)

            self._keep(~np.isin(self._ids, due_ids))
            fired[label] = targets
        return fired

    def advance(self, current_time: int, handle) -> Dict[str, np.ndarray]:
        """Run one step of the schedule: :meth:`tick` then :meth:`process`."""
        self.tick()
        return self.process(current_time, handle)

    def reset(self) -> None:
        """Drop every pending entry, keeping events and listeners."""
        self._keep(np.zeros(len(self._ids), dtype=bool))

    def _keep(self, mask: np.ndarray) -> None:
        self._ids = self._ids[mask]
        self._persons = self._persons[mask]
        self._events = self._events[mask]
        self._delays = self._delays[mask]

    def _code(self, event_label: str) -> int:
        try:
            return self._codes[event_label]
        except (KeyError, TypeError):
            raise UnknownLabel(f"unknown event label: {event_label!r}") from None

    def _validate_delays(self, delays, n_targets: int) -> np.ndarray:
        values = np.asarray(delays)
        if values.ndim == 0:
            values = np.full(n_targets, values)
        elif values.ndim != 1 or len(values) != n_targets:
            raise LengthMismatch(f"{values.size} delays given for {n_targets} targets")

        if values.size == 0:
            return np.zeros(0, dtype=np.int64)
        if values.dtype.kind not in "iuf" or not np.all(np.mod(values, 1) == 0):
            raise InvalidParameter("delays must be whole numbers of steps")
        if np.any(values < 1):
            raise InvalidParameter(f"delays must be at least 1, got {values.min()}")
        return values.astype(np.int64)

    @staticmethod
    def _check_listener(listener) -> None:
        if not callable(listener):
            raise InvalidParameter(f"listener must be callable, got {listener!r}")

    def __len__(self) -> int:
        """Number of pending entries."""
        return len(self._ids)

    def __repr__(self) -> str:
        return f"EventScheduler(events={self._labels}, pending={len(self._ids)})"
