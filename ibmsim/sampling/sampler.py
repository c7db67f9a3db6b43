"""Stochastic sampling primitives for individual-based models.

Every function takes an explicit ``numpy.random.Generator``. Nothing here
touches global random state, so two models seeded identically draw
identical sequences regardless of what else runs in the process.
"""

from typing import Optional, Sequence, Union

import numpy as np

from ..errors import InvalidParameter, LengthMismatch

ArrayLike = Union[Sequence, np.ndarray]


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a random number generator.

    Args:
        seed: Seed for reproducibility (None draws fresh entropy)

    Returns:
        A new numpy Generator
    """
    return np.random.default_rng(seed)


def _as_collection(values, name: str) -> np.ndarray:
    """Convert a sequence, array, set or other iterable to a 1-D array.

    Sets are sorted so the result does not depend on hash order.

    Raises:
        InvalidParameter: If the input cannot be read as a flat collection
    """
    if isinstance(values, (set, frozenset)):
        values = sorted(values)
    elif not isinstance(values, (np.ndarray, Sequence)):
        try:
            values = list(values)
        except TypeError:
            raise InvalidParameter(f"{name} must be a collection, got {type(values).__name__}") from None

    array = np.asarray(values)
    if array.ndim != 1:
        raise InvalidParameter(f"{name} must be one-dimensional, got shape {array.shape}")
    return array


def rate_to_probability(rate, dt: float):
    """Convert a per-capita rate into a per-step event probability.

    Uses p = 1 - exp(-rate * dt), the probability that an exponential
    waiting time with the given rate ends within one step.

    Args:
        rate: Scalar rate or array of rates (>= 0)
        dt: Step size (> 0)

    Returns:
        Probability with the same shape as ``rate``

    Raises:
        InvalidParameter: If a rate is negative or not finite, or dt <= 0
    """
    if not np.isfinite(dt) or dt <= 0:
        raise InvalidParameter(f"dt must be positive, got {dt}")

    rates = np.asarray(rate, dtype=float)
    if not np.all(np.isfinite(rates)) or np.any(rates < 0):
        raise InvalidParameter("rate must be finite and non-negative")

    probability = -np.expm1(-rates * dt)
    if probability.ndim == 0:
        return float(probability)
    return probability


def bernoulli_select(
    rng: np.random.Generator,
    target: ArrayLike,
    probability,
    dt: Optional[float] = None,
) -> np.ndarray:
    """Select each element of ``target`` independently.

    ``probability`` is either a scalar shared by all elements or a vector
    with one entry per element. When ``dt`` is given, ``probability`` is
    read as a rate and converted with :func:`rate_to_probability`.

    Args:
        rng: Random number generator
        target: Candidate elements (e.g. person indices)
        probability: Inclusion probability, or rate when dt is given
        dt: Step size; switches ``probability`` to rate semantics

    Returns:
        The selected elements, in their original order

    Raises:
        InvalidParameter: If a probability is outside [0, 1] or a rate is
            negative
        LengthMismatch: If a probability vector does not match the target
    """
    target = _as_collection(target, "target")
    values = np.asarray(probability, dtype=float)

    if values.ndim > 1:
        raise InvalidParameter("probability must be a scalar or a vector")
    if values.ndim == 1 and len(values) != len(target):
        raise LengthMismatch(
            f"{len(values)} probabilities given for {len(target)} targets"
        )

    if dt is not None:
        values = np.asarray(rate_to_probability(values, dt))
    elif not np.all((values >= 0.0) & (values <= 1.0)):
        raise InvalidParameter("probability must lie in [0, 1]")

    if len(target) == 0:
        return target[:0]

    # 0 never selects and 1 always selects because uniform draws lie in [0, 1)
    draws = rng.random(len(target))
    return target[draws < values]


def delay_sample(
    rng: np.random.Generator,
    count: int,
    rate: float,
    dt: float,
) -> np.ndarray:
    """Sample whole-step delays until an event fires.

    Each delay is geometric with per-step success probability
    1 - exp(-rate * dt), counting the step of the first success, so the
    smallest possible delay is 1.

    Args:
        rng: Random number generator
        count: Number of delays to draw (>= 0)
        rate: Event rate (> 0)
        dt: Step size (> 0)

    Returns:
        Integer array of length ``count``

    Raises:
        InvalidParameter: For negative count or non-positive rate/dt
    """
    if isinstance(count, (bool, np.bool_)) or int(count) != count or count < 0:
        raise InvalidParameter(f"count must be a non-negative integer, got {count}")
    if not np.isfinite(rate) or rate <= 0:
        raise InvalidParameter(f"rate must be positive, got {rate}")

    probability = rate_to_probability(rate, dt)
    if count == 0:
        return np.zeros(0, dtype=np.int64)

    return rng.geometric(probability, size=int(count)).astype(np.int64)


def choose(rng: np.random.Generator, collection: ArrayLike, k: int) -> np.ndarray:
    """Sample ``k`` elements uniformly without replacement.

    Args:
        rng: Random number generator
        collection: Elements to choose from
        k: Number of elements (0 <= k <= len(collection))

    Returns:
        Array of the chosen elements

    Raises:
        InvalidParameter: If k is negative or exceeds the collection size
    """
    collection = _as_collection(collection, "collection")
    if isinstance(k, (bool, np.bool_)) or int(k) != k:
        raise InvalidParameter(f"k must be an integer, got {k}")
    if k < 0 or k > len(collection):
        raise InvalidParameter(
            f"cannot choose {k} elements from a collection of {len(collection)}"
        )

    return rng.choice(collection, size=int(k), replace=False)
