"""Core simulation components."""

from .state_store import StateStore
from .event_scheduler import EventScheduler, ScheduledEntry
from .handle import ModelHandle
from .trajectory import TrajectoryRecorder
from .model import Model

__all__ = [
    "StateStore",
    "EventScheduler",
    "ScheduledEntry",
    "ModelHandle",
    "TrajectoryRecorder",
    "Model",
]
