"""Helpers for writing run results and trajectories."""

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import yaml


def _to_builtin(obj: Any) -> Any:
    """Convert numpy scalars and arrays into plain Python values."""
    if isinstance(obj, dict):
        return {key: _to_builtin(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_builtin(value) for value in obj]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    return obj


def save_yaml(obj: Any, file_path: str):
    """Save object as YAML."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        yaml.safe_dump(_to_builtin(obj), f, default_flow_style=False)


def save_trajectory(frame: pd.DataFrame, file_path: str):
    """Save a trajectory DataFrame as CSV."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)
