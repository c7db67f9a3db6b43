"""Reference models built on the kernel."""

from .sir import (
    SIRParameters,
    build_sir_model,
    build_sir_scheduling_model,
    build_model,
)

__all__ = [
    "SIRParameters",
    "build_sir_model",
    "build_sir_scheduling_model",
    "build_model",
]
