"""Double-buffered categorical state storage for a fixed population."""

from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from ..errors import (
    InvalidParameter,
    LengthMismatch,
    ModelNotInitialized,
    UnknownLabel,
)
from ..utils.indexing import as_label_list, as_person_indices, validate_label_universe
from ..utils.logger import setup_logger

UNSET = -1


class StateStore:
    """Current and pending state of every person.

    Each person holds exactly one state code, the position of its label in
    the ordered label list. Updates are queued into a pending buffer and
    only become visible when :meth:`apply_updates` commits them, so every
    process function in a step reads the same snapshot.

    Attributes:
        population_size: Number of persons N (fixed)
    """

    def __init__(self, population_size: int):
        """Initialize an empty store.

        Args:
            population_size: Number of persons N (>= 0)
        """
        if int(population_size) != population_size or population_size < 0:
            raise InvalidParameter(
                f"population_size must be a non-negative integer, got {population_size}"
            )

        self.population_size = int(population_size)
        self.logger = setup_logger(self.__class__.__name__)

        self._labels: List[str] = []
        self._codes: Dict[str, int] = {}
        self._current = np.full(self.population_size, UNSET, dtype=np.int64)
        self._pending = np.full(self.population_size, UNSET, dtype=np.int64)
        self._initialized = False

    @property
    def state_labels(self) -> List[str]:
        """Ordered state labels."""
        return list(self._labels)

    @property
    def n_states(self) -> int:
        """Size of the state space."""
        return len(self._labels)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def code(self, label: str) -> int:
        """Return the integer code of ``label``.

        Raises:
            UnknownLabel: If the label is not declared
        """
        try:
            return self._codes[label]
        except (KeyError, TypeError):
            raise UnknownLabel(f"unknown state label: {label!r}") from None

    def initialize(
        self,
        initial_states: Sequence[Union[str, int]],
        state_labels: Iterable[str],
    ) -> None:
        """Define the label universe and set everyone's state.

        Args:
            initial_states: Length-N sequence of label names or codes
            state_labels: Ordered, unique state labels

        Raises:
            InvalidParameter: If the labels are empty or duplicated
            LengthMismatch: If len(initial_states) != N
            UnknownLabel: For unresolvable names or codes
        """
        labels = validate_label_universe(state_labels, kind="state")
        codes = {label: i for i, label in enumerate(labels)}
        current = self._resolve_states(initial_states, labels, codes)

        self._labels = labels
        self._codes = codes
        self._current = current
        self._pending.fill(UNSET)
        self._initialized = True

        self.logger.debug(
            f"Initialized {self.population_size} persons over states {labels}"
        )

    def reset(self, initial_states: Sequence[Union[str, int]]) -> None:
        """Set everyone's state again, keeping the label universe.

        Raises:
            LengthMismatch: If len(initial_states) != N
            UnknownLabel: For unresolvable names or codes
        """
        self._require_initialized()
        self._current = self._resolve_states(initial_states, self._labels, self._codes)
        self._pending.fill(UNSET)

    def query_by_state(
        self, labels: Optional[Union[str, Iterable[str]]] = None
    ) -> np.ndarray:
        """Return the persons currently in any of ``labels``.

        Args:
            labels: A label, a collection of labels, or None for everyone

        Returns:
            Ascending array of person indices
        """
        self._require_initialized()
        if labels is None:
            return np.arange(self.population_size, dtype=np.int64)

        codes = self._codes_for(labels)
        return np.flatnonzero(np.isin(self._current, codes)).astype(np.int64)

    def count_by_state(self, labels: Union[str, Iterable[str]]) -> int:
        """Count the persons currently in any of ``labels``."""
        self._require_initialized()
        codes = self._codes_for(labels)
        return int(np.count_nonzero(np.isin(self._current, codes)))

    def count(self) -> int:
        """Total population size."""
        return self.population_size

    def output_states(self) -> np.ndarray:
        """Count persons per state, in label order."""
        self._require_initialized()
        return np.bincount(self._current, minlength=self.n_states).astype(np.int64)

    def get_states(self, persons) -> List[str]:
        """Return the current label of each person in ``persons``."""
        self._require_initialized()
        indices = as_person_indices(persons, self.population_size)
        return [self._labels[code] for code in self._current[indices]]

    def queue_update(self, persons, label: str) -> None:
        """Queue a state change for ``persons``, applied at the next commit.

        A later call for the same person in the same step overwrites the
        earlier one.

        Raises:
            InvalidIndex: If any person index is out of range
            UnknownLabel: If the label is not declared
        """
        self._require_initialized()
        code = self.code(label)
        indices = as_person_indices(persons, self.population_size)
        self._pending[indices] = code

    def apply_updates(self) -> int:
        """Commit pending updates and clear the buffer.

        Returns:
            Number of persons whose pending update was applied
        """
        self._require_initialized()
        queued = self._pending != UNSET
        n_updated = int(np.count_nonzero(queued))
        if n_updated:
            self._current[queued] = self._pending[queued]
            self._pending.fill(UNSET)
        return n_updated

    def pending_count(self) -> int:
        """Number of persons with a queued update."""
        return int(np.count_nonzero(self._pending != UNSET))

    def _codes_for(self, labels: Union[str, Iterable[str]]) -> List[int]:
        return [self.code(label) for label in as_label_list(labels)]

    def _resolve_states(
        self,
        states: Sequence[Union[str, int]],
        labels: List[str],
        codes: Dict[str, int],
    ) -> np.ndarray:
        states = np.asarray(states)
        if states.ndim != 1 or len(states) != self.population_size:
            raise LengthMismatch(
                f"expected {self.population_size} initial states, got {states.size}"
            )
        if states.size == 0:
            return np.zeros(0, dtype=np.int64)

        if states.dtype.kind in "iu":
            resolved = states.astype(np.int64)
            bad = (resolved < 0) | (resolved >= len(labels))
            if np.any(bad):
                raise UnknownLabel(f"unknown state code: {resolved[bad][0]}")
            return resolved

        if states.dtype.kind not in "US":
            raise UnknownLabel(f"initial states must be names or codes, got {states.dtype}")

        resolved = np.empty(self.population_size, dtype=np.int64)
        for i, name in enumerate(states.tolist()):
            if name not in codes:
                raise UnknownLabel(f"unknown state label: {name!r}")
            resolved[i] = codes[name]
        return resolved

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise ModelNotInitialized("state store has not been initialized")

    def __repr__(self) -> str:
        return f"StateStore(N={self.population_size}, states={self._labels})"
