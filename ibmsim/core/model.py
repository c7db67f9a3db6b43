"""Model object composing state, schedule and the step driver."""

import time
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
from tqdm import tqdm

from .event_scheduler import EventScheduler, Listener
from .handle import ModelHandle
from .state_store import StateStore
from .trajectory import TrajectoryRecorder
from ..errors import InvalidParameter
from ..sampling import make_rng
from ..utils.logger import setup_logger

Process = Callable[["Model", int], None]


class Model:
    """A discrete-time individual-based model.

    Owns the state store, the event scheduler, the random number generator
    and the trajectory recorder for one run. One step is:

    1. every process function, in registration order, reads the committed
       state and queues updates or schedules events;
    2. the scheduler ticks and fires due events;
    3. the state store commits all queued updates;
    4. the state counts are recorded.
    """

    def __init__(
        self,
        population_size: int,
        state_labels: Sequence[str],
        initial_states: Sequence[Union[str, int]],
        event_labels: Iterable[str] = (),
        seed: Optional[int] = None,
        dt: float = 1.0,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize model.

        Args:
            population_size: Number of persons N
            state_labels: Ordered state labels
            initial_states: Length-N initial labels or codes
            event_labels: Event labels to declare
            seed: Random seed for the model's generator
            dt: Step size, used for reporting simulated time
            rng: Generator to use instead of one seeded from ``seed``
        """
        if not np.isfinite(dt) or dt <= 0:
            raise InvalidParameter(f"dt must be positive, got {dt}")

        self.logger = setup_logger(self.__class__.__name__)
        self.dt = dt
        self.seed = seed
        self.rng = rng if rng is not None else make_rng(seed)

        self.state = StateStore(population_size)
        self.state.initialize(initial_states, state_labels)
        self.scheduler = EventScheduler(population_size, event_labels)
        self.handle = ModelHandle(self.state, self.scheduler)
        self.recorder = TrajectoryRecorder(self.state.state_labels, dt)

        self.processes: List[Process] = []
        self.current_step = 0

        self.logger.info(
            f"Model initialized: N={population_size}, states={self.state.state_labels}, "
            f"events={self.scheduler.event_labels}"
        )

    # State store passthroughs

    def query_by_state(self, labels=None) -> np.ndarray:
        return self.state.query_by_state(labels)

    def count_by_state(self, labels) -> int:
        return self.state.count_by_state(labels)

    def count(self) -> int:
        return self.state.count()

    def output_states(self) -> np.ndarray:
        return self.state.output_states()

    def queue_update(self, persons, label: str) -> None:
        self.state.queue_update(persons, label)

    # Scheduler passthroughs

    def add_event(self, event_label: str, listeners: Optional[Iterable[Listener]] = None) -> None:
        self.scheduler.add_event(event_label, listeners)

    def register_listener(self, event_label: str, listener: Listener) -> None:
        self.scheduler.register_listener(event_label, listener)

    def schedule(self, targets, delays, event_label: str) -> np.ndarray:
        return self.scheduler.schedule(targets, delays, event_label)

    def get_scheduled(self, event_label: str) -> np.ndarray:
        return self.scheduler.get_scheduled(event_label)

    def clear(self, targets, event_label: Optional[str] = None) -> int:
        return self.scheduler.clear(targets, event_label)

    # Driver

    def add_process(self, process: Process) -> None:
        """Register a process function, called as ``process(model, t)``."""
        if not callable(process):
            raise InvalidParameter(f"process must be callable, got {process!r}")
        self.processes.append(process)

    def step(self, t: int) -> Dict[str, np.ndarray]:
        """Advance the model by one step.

        Args:
            t: Step number passed to processes and listeners

        Returns:
            Events fired this step, keyed by label
        """
        for process in self.processes:
            process(self, t)

        fired = self.scheduler.advance(t, self.handle)
        n_updated = self.state.apply_updates()

        self.current_step = t
        self.recorder.record(t, self.state.output_states())
        self.logger.debug(
            f"Step {t}: {n_updated} state updates, fired {list(fired)}"
        )
        return fired

    def run(self, steps: int, show_progress: bool = False) -> Dict:
        """Run steps ``1..steps`` from the current state.

        The committed state before the first step is recorded as step 0.

        Args:
            steps: Number of steps (>= 0)
            show_progress: Display a progress bar

        Returns:
            Dictionary of run results and trajectory summary
        """
        if int(steps) != steps or steps < 0:
            raise InvalidParameter(f"steps must be a non-negative integer, got {steps}")

        start_time = time.time()
        self.logger.info(f"Starting run of {steps} steps (dt={self.dt})...")

        self.recorder.clear()
        self.recorder.record(0, self.state.output_states())

        for t in tqdm(range(1, int(steps) + 1), disable=not show_progress, desc="steps"):
            self.step(t)

        elapsed_time = time.time() - start_time
        self.logger.info(f"Run completed in {elapsed_time:.2f}s")

        return self._finalize(steps, elapsed_time)

    def _finalize(self, steps: int, elapsed_time: float) -> Dict:
        results = {
            'population_size': self.state.population_size,
            'state_labels': self.state.state_labels,
            'steps': int(steps),
            'dt': self.dt,
            'seed': self.seed,
            'pending_events': len(self.scheduler),
            'wall_time_s': elapsed_time,
            **self.recorder.compute_summary(),
        }
        return results

    def __repr__(self) -> str:
        return f"Model({self.state!r}, {self.scheduler!r}, step={self.current_step})"
