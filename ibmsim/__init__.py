"""ibmsim: discrete-time individual-based model simulation kernel."""

from .core.model import Model
from .core.state_store import StateStore
from .core.event_scheduler import EventScheduler, ScheduledEntry
from .core.handle import ModelHandle
from .core.trajectory import TrajectoryRecorder
from .errors import (
    IBMError,
    InvalidParameter,
    UnknownLabel,
    InvalidIndex,
    LengthMismatch,
    ModelNotInitialized,
)
from .sampling import make_rng, rate_to_probability, bernoulli_select, delay_sample, choose
from .utils.logger import setup_logger

__version__ = "0.1.0"
__all__ = [
    "Model",
    "StateStore",
    "EventScheduler",
    "ScheduledEntry",
    "ModelHandle",
    "TrajectoryRecorder",
    "IBMError",
    "InvalidParameter",
    "UnknownLabel",
    "InvalidIndex",
    "LengthMismatch",
    "ModelNotInitialized",
    "make_rng",
    "rate_to_probability",
    "bernoulli_select",
    "delay_sample",
    "choose",
    "setup_logger",
]
