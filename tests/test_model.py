"""Tests for the model, step driver and reference SIR models."""

import tempfile
import unittest
from pathlib import Path

import numpy as np
import pandas as pd
import yaml

from configs import load_config, load_run_config, merge_configs
from ibmsim.core.model import Model
from ibmsim.core.trajectory import TrajectoryRecorder
from ibmsim.errors import InvalidParameter
from ibmsim.main import main
from ibmsim.models.sir import (
    RECOVERY,
    SIRParameters,
    build_model,
    build_sir_model,
    build_sir_scheduling_model,
)


class TestModelStep(unittest.TestCase):
    """Test cases for the step ordering contract."""

    def setUp(self):
        """Set up test fixtures."""
        self.model = Model(5, ["S", "I", "R"], ["S", "S", "I", "S", "S"],
                           event_labels=["Recovery"], seed=1)

    def test_processes_see_same_snapshot(self):
        """Test every process reads the pre-commit state."""
        seen = []

        def infect_all(model, t):
            model.queue_update(model.query_by_state("S"), "I")

        def observe(model, t):
            seen.append(model.count_by_state("I"))

        self.model.add_process(infect_all)
        self.model.add_process(observe)
        self.model.step(1)

        self.assertEqual(seen, [1])
        self.assertEqual(self.model.count_by_state("I"), 5)

    def test_scheduled_event_commits_in_firing_step(self):
        """Test a listener's update is committed in the step it fires."""
        self.model.register_listener(
            "Recovery", lambda handle, targets, t: handle.queue_update(targets, "R")
        )
        self.model.schedule([2], 2, "Recovery")

        self.model.step(1)
        self.assertEqual(self.model.state.get_states([2]), ["I"])

        fired = self.model.step(2)
        self.assertEqual(self.model.state.get_states([2]), ["R"])
        np.testing.assert_array_equal(fired["Recovery"], [2])
        self.assertEqual(len(self.model.get_scheduled("Recovery")), 0)

    def test_run_records_every_step(self):
        """Test run records step 0 plus one row per step."""
        results = self.model.run(4)
        frame = self.model.recorder.to_dataframe()

        self.assertEqual(results['num_steps'], 5)
        self.assertEqual(list(frame['step']), [0, 1, 2, 3, 4])
        self.assertTrue((frame[["S", "I", "R"]].sum(axis=1) == 5).all())

    def test_invalid_arguments(self):
        """Test invalid step counts, processes and dt are rejected."""
        with self.assertRaises(InvalidParameter):
            self.model.run(-1)
        with self.assertRaises(InvalidParameter):
            self.model.add_process(None)
        with self.assertRaises(InvalidParameter):
            Model(2, ["S"], ["S", "S"], dt=0.0)


class TestTrajectoryRecorder(unittest.TestCase):
    """Test cases for TrajectoryRecorder."""

    def test_summary(self):
        """Test final and peak figures."""
        recorder = TrajectoryRecorder(["S", "I", "R"], dt=0.5)
        recorder.record(0, [9, 1, 0])
        recorder.record(1, [6, 4, 0])
        recorder.record(2, [5, 3, 2])

        summary = recorder.compute_summary()

        self.assertEqual(summary['num_steps'], 3)
        self.assertEqual(summary['final_R'], 2)
        self.assertEqual(summary['peak_I'], 4)
        self.assertEqual(summary['peak_step_I'], 1)
        self.assertIn("Trajectory Summary", recorder.get_summary())

    def test_dataframe(self):
        """Test DataFrame layout."""
        recorder = TrajectoryRecorder(["S", "I"], dt=0.5)
        recorder.record(0, [3, 1])
        recorder.record(1, [2, 2])

        frame = recorder.to_dataframe()

        self.assertIsInstance(frame, pd.DataFrame)
        self.assertEqual(list(frame.columns), ["step", "time", "S", "I"])
        self.assertEqual(list(frame['time']), [0.0, 0.5])

    def test_clear_logs_discarded_rows(self):
        """Test clear forgets rows and reports how many."""
        recorder = TrajectoryRecorder(["S", "I"])
        recorder.record(0, [3, 1])
        recorder.record(1, [2, 2])

        with self.assertLogs("ibmsim.TrajectoryRecorder", level="DEBUG") as logs:
            recorder.clear()

        self.assertEqual(len(recorder), 0)
        self.assertIn("Discarding 2 recorded steps", logs.output[0])

    def test_wrong_shape(self):
        """Test count vectors must match the labels."""
        recorder = TrajectoryRecorder(["S", "I"])
        with self.assertRaises(ValueError):
            recorder.record(0, [1, 2, 3])


class TestSIRModels(unittest.TestCase):
    """Test cases for the reference SIR models."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = {
            'type': 'sir_scheduling',
            'population': 500,
            'initial_infected': 5,
            'gamma': 0.1,
            'R0': 2.5,
            'dt': 0.1,
            'tmax': 30,
        }

    def test_parameters(self):
        """Test beta derivation and step count."""
        params = SIRParameters(self.config)

        self.assertAlmostEqual(params.beta, 0.25)
        self.assertAlmostEqual(params.R0, 2.5)
        self.assertEqual(params.steps, 300)

    def test_invalid_parameters(self):
        """Test out-of-range parameters are rejected."""
        with self.assertRaises(InvalidParameter):
            SIRParameters({**self.config, 'initial_infected': 501})
        with self.assertRaises(InvalidParameter):
            SIRParameters({**self.config, 'gamma': 0.0})

    def test_non_finite_parameters(self):
        """Test NaN and infinite rates are rejected with the key name."""
        for key in ("gamma", "beta", "dt"):
            with self.assertRaisesRegex(InvalidParameter, key):
                SIRParameters({**self.config, key: float("nan")})
        with self.assertRaisesRegex(InvalidParameter, "beta"):
            SIRParameters({**self.config, "R0": float("inf")})

    def check_trajectory(self, model, steps):
        model.run(steps)
        data = model.recorder.as_array()

        self.assertTrue(np.all(data.sum(axis=1) == 500))
        self.assertEqual(data[0, 1], 5)
        self.assertTrue(np.all(np.diff(data[:, 0]) <= 0))
        self.assertTrue(np.all(np.diff(data[:, 2]) >= 0))

    def test_markov_sir(self):
        """Test the Markov SIR conserves population and is monotone."""
        params = SIRParameters(self.config)
        self.check_trajectory(build_sir_model(params, seed=3), params.steps)

    def test_scheduling_sir(self):
        """Test the scheduling SIR conserves population and is monotone."""
        params = SIRParameters(self.config)
        model = build_sir_scheduling_model(params, seed=3)
        self.check_trajectory(model, params.steps)

        infected = set(model.query_by_state("I").tolist())
        self.assertTrue(set(model.get_scheduled(RECOVERY).tolist()) <= infected)

    def test_scheduling_sir_no_double_scheduling(self):
        """Test every infected person holds at most one recovery."""
        params = SIRParameters(self.config)
        model = build_sir_scheduling_model(params, seed=11)
        for t in range(1, 50):
            model.step(t)
            self.assertEqual(len(model.scheduler), len(model.get_scheduled(RECOVERY)))

    def test_reproducible(self):
        """Test identical seeds give identical trajectories."""
        params = SIRParameters(self.config)
        first = build_sir_scheduling_model(params, seed=8)
        second = build_sir_scheduling_model(params, seed=8)
        first.run(100)
        second.run(100)

        np.testing.assert_array_equal(first.recorder.as_array(), second.recorder.as_array())

    def test_build_model_dispatch(self):
        """Test build_model picks the builder by type."""
        model = build_model({**self.config, 'type': 'sir'}, seed=1)
        self.assertEqual(model.scheduler.event_labels, [])

        with self.assertRaises(ValueError):
            build_model({**self.config, 'type': 'seir'})


class TestConfigAndCLI(unittest.TestCase):
    """Test cases for configuration loading and the command line."""

    def test_default_config(self):
        """Test the default configuration has every section."""
        config = load_run_config()

        self.assertIn('simulation', config)
        self.assertEqual(config['model']['population'], 1000)

    def test_override_config(self):
        """Test override files are merged over the defaults."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "override.yaml"
            with open(path, 'w') as f:
                yaml.safe_dump({'model': {'population': 200}}, f)

            config = load_run_config(str(path))

        self.assertEqual(config['model']['population'], 200)
        self.assertEqual(config['model']['gamma'], 0.1)

    def test_merge_configs(self):
        """Test nested dictionaries are merged key by key."""
        merged = merge_configs({'a': {'x': 1, 'y': 2}}, {'a': {'y': 3}, 'b': 4})
        self.assertEqual(merged, {'a': {'x': 1, 'y': 3}, 'b': 4})

    def test_cli_run(self):
        """Test the command line writes results and trajectory."""
        with tempfile.TemporaryDirectory() as tmp:
            exit_code = main(["--output-dir", tmp, "--steps", "20", "--seed", "4"])

            self.assertEqual(exit_code, 0)
            results = load_config(str(Path(tmp) / "results.yaml"))
            self.assertEqual(results['steps'], 20)
            frame = pd.read_csv(Path(tmp) / "trajectory.csv")
            self.assertEqual(len(frame), 21)

    def test_cli_failure(self):
        """Test a missing config file gives exit code 1."""
        with tempfile.TemporaryDirectory() as tmp:
            exit_code = main(["--config", str(Path(tmp) / "missing.yaml")])
        self.assertEqual(exit_code, 1)


if __name__ == '__main__':
    unittest.main()
