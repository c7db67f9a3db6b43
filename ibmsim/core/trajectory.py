"""Per-step state count collection and aggregation."""

from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from ..utils.logger import setup_logger


class TrajectoryRecorder:
    """Collect the number of persons in each state after every step.

    Rows are appended in call order; :meth:`to_dataframe` and
    :meth:`compute_summary` turn them into tables and aggregate figures.
    """

    def __init__(self, state_labels: Sequence[str], dt: float = 1.0):
        """Initialize recorder.

        Args:
            state_labels: Ordered state labels (one column each)
            dt: Step size, used to derive simulated time
        """
        self.state_labels = list(state_labels)
        self.dt = dt
        self.logger = setup_logger(self.__class__.__name__)

        self.steps: List[int] = []
        self.counts: List[np.ndarray] = []

    def record(self, step: int, counts: Sequence[int]) -> None:
        """Record state counts for one step.

        Args:
            step: Step number
            counts: Persons per state, in label order
        """
        counts = np.asarray(counts, dtype=np.int64)
        if counts.shape != (len(self.state_labels),):
            raise ValueError(
                f"expected {len(self.state_labels)} counts, got shape {counts.shape}"
            )
        self.steps.append(int(step))
        self.counts.append(counts)

    def clear(self) -> None:
        """Forget all recorded rows."""
        if self.steps:
            self.logger.debug(f"Discarding {len(self.steps)} recorded steps")
        self.steps.clear()
        self.counts.clear()

    def as_array(self) -> np.ndarray:
        """Recorded counts as an (n_rows, n_states) array."""
        if not self.counts:
            return np.zeros((0, len(self.state_labels)), dtype=np.int64)
        return np.vstack(self.counts)

    def to_dataframe(self) -> pd.DataFrame:
        """Recorded counts as a DataFrame with step, time and one column per state."""
        frame = pd.DataFrame(self.as_array(), columns=self.state_labels)
        steps = np.asarray(self.steps, dtype=np.int64)
        frame.insert(0, "time", steps * self.dt)
        frame.insert(0, "step", steps)
        return frame

    def compute_summary(self) -> Dict:
        """Compute aggregate figures from the recorded trajectory.

        Returns:
            Dictionary with the number of recorded steps and, per state,
            final count, peak count and the step of the peak
        """
        results = {'num_steps': len(self.steps)}
        if not self.counts:
            return results

        data = self.as_array()
        steps = np.asarray(self.steps)

        for column, label in enumerate(self.state_labels):
            series = data[:, column]
            peak_row = int(np.argmax(series))
            results[f'final_{label}'] = int(series[-1])
            results[f'peak_{label}'] = int(series[peak_row])
            results[f'peak_step_{label}'] = int(steps[peak_row])

        return results

    def get_summary(self) -> str:
        """Get human-readable summary of the trajectory.

        Returns:
            Formatted string with key figures
        """
        if not self.counts:
            return "No steps recorded"

        summary = self.compute_summary()
        lines = [
            "=== Trajectory Summary ===",
            f"Steps: {summary['num_steps']} (t = {self.steps[-1] * self.dt:g})",
        ]
        for label in self.state_labels:
            lines.append(
                f"{label}: final {summary[f'final_{label}']}, "
                f"peak {summary[f'peak_{label}']} at step {summary[f'peak_step_{label}']}"
            )
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)
