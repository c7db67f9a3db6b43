"""Utility functions and helpers."""

from .logger import setup_logger, set_global_level
from .io import save_yaml, save_trajectory

__all__ = ["setup_logger", "set_global_level", "save_yaml", "save_trajectory"]
