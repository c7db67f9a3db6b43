"""Random sampling primitives."""

from .sampler import (
    make_rng,
    rate_to_probability,
    bernoulli_select,
    delay_sample,
    choose,
)

__all__ = [
    "make_rng",
    "rate_to_probability",
    "bernoulli_select",
    "delay_sample",
    "choose",
]
