"""Exceptions raised by the simulation kernel.

Every error is a synchronous contract violation raised at the call that
triggered it. A call that raises leaves the state store and the event
scheduler unchanged.
"""


class IBMError(Exception):
    """Base class for all kernel errors."""


class InvalidParameter(IBMError, ValueError):
    """Malformed probability, rate, delay, count or size argument."""


class UnknownLabel(IBMError, LookupError):
    """Unrecognized state or event label."""


class InvalidIndex(IBMError, IndexError):
    """Person index outside [0, N)."""


class LengthMismatch(IBMError, ValueError):
    """Paired sequences of unequal length."""


class ModelNotInitialized(IBMError, RuntimeError):
    """State store used before its states were initialized."""
