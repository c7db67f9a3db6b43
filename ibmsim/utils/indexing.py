"""Validation helpers for person indices and label arguments."""

from typing import Iterable, List, Optional, Union

import numpy as np

from ..errors import InvalidIndex, InvalidParameter


def as_person_indices(persons, population_size: int) -> np.ndarray:
    """Convert ``persons`` to a 1-D int64 array of valid indices.

    Args:
        persons: A single index or a sequence of indices
        population_size: Number of persons N

    Returns:
        Array of indices in [0, N)

    Raises:
        InvalidIndex: If any index is outside [0, N) or not an integer
    """
    indices = np.atleast_1d(np.asarray(persons))
    if indices.ndim != 1:
        raise InvalidIndex("person indices must be a flat sequence")
    if indices.size == 0:
        return np.zeros(0, dtype=np.int64)

    if indices.dtype.kind not in "iu":
        if indices.dtype.kind != "f" or not np.all(np.mod(indices, 1) == 0):
            raise InvalidIndex(f"person indices must be integers, got {indices.dtype}")

    indices = indices.astype(np.int64)
    bad = (indices < 0) | (indices >= population_size)
    if np.any(bad):
        raise InvalidIndex(
            f"person index {indices[bad][0]} out of range [0, {population_size})"
        )
    return indices


def as_label_list(labels: Optional[Union[str, Iterable[str]]]) -> Optional[List[str]]:
    """Normalize a label argument to a list.

    A bare string is one label, not a sequence of characters.
    """
    if labels is None:
        return None
    if isinstance(labels, str):
        return [labels]
    return list(labels)


def validate_label_universe(labels: Iterable[str], kind: str = "state") -> List[str]:
    """Check that ``labels`` is a non-empty list of unique strings.

    Raises:
        InvalidParameter: If the list is empty, has duplicates or non-strings
    """
    labels = as_label_list(labels) or []
    if not labels:
        raise InvalidParameter(f"at least one {kind} label is required")
    if not all(isinstance(label, str) for label in labels):
        raise InvalidParameter(f"{kind} labels must be strings")
    if len(set(labels)) != len(labels):
        raise InvalidParameter(f"duplicate {kind} labels in {labels}")
    return labels
