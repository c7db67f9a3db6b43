"""Tests for the double-buffered state store."""

import unittest
import numpy as np

from ibmsim.core.state_store import StateStore
from ibmsim.errors import (
    InvalidIndex,
    InvalidParameter,
    LengthMismatch,
    ModelNotInitialized,
    UnknownLabel,
)

LABELS = ["S", "I", "R"]


class TestStateStoreInitialization(unittest.TestCase):
    """Test cases for initialize and reset."""

    def test_initialize_from_names(self):
        """Test counts after initializing from label names."""
        store = StateStore(6)
        store.initialize(["S", "I", "S", "R", "S", "I"], LABELS)

        self.assertEqual(store.count(), 6)
        self.assertEqual(store.count_by_state("S"), 3)
        self.assertEqual(store.count_by_state(["I", "R"]), 3)
        self.assertEqual(store.count_by_state(LABELS), store.count())
        np.testing.assert_array_equal(store.output_states(), [3, 2, 1])

    def test_initialize_from_codes(self):
        """Test initializing from integer codes."""
        store = StateStore(4)
        store.initialize([0, 2, 2, 1], LABELS)

        self.assertEqual(store.get_states([0, 1, 3]), ["S", "R", "I"])
        self.assertEqual(store.n_states, 3)
        self.assertEqual(store.state_labels, LABELS)

    def test_length_mismatch(self):
        """Test initial states must cover the population exactly."""
        store = StateStore(3)
        with self.assertRaises(LengthMismatch):
            store.initialize(["S", "I"], LABELS)

    def test_unknown_labels(self):
        """Test unresolvable names and codes are rejected."""
        store = StateStore(2)
        with self.assertRaises(UnknownLabel):
            store.initialize(["S", "X"], LABELS)
        with self.assertRaises(UnknownLabel):
            store.initialize([0, 3], LABELS)
        self.assertFalse(store.is_initialized)

    def test_invalid_label_universe(self):
        """Test empty or duplicated label sets are rejected."""
        store = StateStore(2)
        with self.assertRaises(InvalidParameter):
            store.initialize(["S", "S"], [])
        with self.assertRaises(InvalidParameter):
            store.initialize(["S", "S"], ["S", "S"])

    def test_negative_population(self):
        """Test population size must be non-negative."""
        with self.assertRaises(InvalidParameter):
            StateStore(-1)

    def test_use_before_initialize(self):
        """Test queries fail before initialization."""
        store = StateStore(3)
        with self.assertRaises(ModelNotInitialized):
            store.query_by_state("S")
        with self.assertRaises(ModelNotInitialized):
            store.queue_update([0], "S")

    def test_reset_round_trip(self):
        """Test reset with the initial labels leaves states unchanged."""
        initial = ["S", "I", "R", "S"]
        store = StateStore(4)
        store.initialize(initial, LABELS)
        before = store.output_states().copy()

        store.reset(initial)

        np.testing.assert_array_equal(store.output_states(), before)
        self.assertEqual(store.get_states(range(4)), initial)

    def test_failed_reset_leaves_states_unchanged(self):
        """Test a reset with an unknown label changes nothing."""
        store = StateStore(4)
        store.initialize(["S", "I", "R", "S"], LABELS)
        store.queue_update([0], "I")

        with self.assertRaises(UnknownLabel):
            store.reset(["S", "X", "S", "S"])
        with self.assertRaises(LengthMismatch):
            store.reset(["S", "S"])

        self.assertEqual(store.get_states(range(4)), ["S", "I", "R", "S"])
        self.assertEqual(store.pending_count(), 1)

    def test_failed_reinitialize_keeps_labels(self):
        """Test a failing initialize on a live store changes nothing."""
        store = StateStore(3)
        store.initialize(["S", "I", "R"], LABELS)

        with self.assertRaises(LengthMismatch):
            store.initialize(["A", "B"], ["A", "B"])
        with self.assertRaises(UnknownLabel):
            store.initialize(["A", "C", "A"], ["A", "B"])

        self.assertEqual(store.state_labels, LABELS)
        self.assertEqual(store.get_states(range(3)), ["S", "I", "R"])

    def test_reset_clears_pending(self):
        """Test reset discards queued updates."""
        store = StateStore(3)
        store.initialize(["S", "S", "S"], LABELS)
        store.queue_update([1], "I")

        store.reset(["R", "R", "R"])

        self.assertEqual(store.pending_count(), 0)
        self.assertEqual(store.apply_updates(), 0)
        self.assertEqual(store.count_by_state("R"), 3)


class TestStateStoreQueries(unittest.TestCase):
    """Test cases for query_by_state."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = StateStore(8)
        self.store.initialize(["I", "S", "R", "S", "I", "S", "S", "R"], LABELS)

    def test_query_is_ascending(self):
        """Test persons are returned in ascending index order."""
        np.testing.assert_array_equal(self.store.query_by_state("S"), [1, 3, 5, 6])
        np.testing.assert_array_equal(self.store.query_by_state(["R", "I"]), [0, 2, 4, 7])

    def test_query_everyone(self):
        """Test no argument returns all persons."""
        np.testing.assert_array_equal(self.store.query_by_state(), np.arange(8))

    def test_query_unknown_label(self):
        """Test unknown labels are rejected."""
        with self.assertRaises(UnknownLabel):
            self.store.query_by_state("E")
        with self.assertRaises(UnknownLabel):
            self.store.count_by_state(["S", "E"])


class TestStateStoreUpdates(unittest.TestCase):
    """Test cases for queue_update and apply_updates."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = StateStore(10)
        self.store.initialize(["S"] * 8 + ["I"] * 2, LABELS)

    def test_updates_apply_at_commit(self):
        """Test queued updates are invisible until apply_updates."""
        self.store.queue_update([0, 3], "I")

        self.assertEqual(self.store.count_by_state("I"), 2)
        self.assertEqual(self.store.pending_count(), 2)

        self.assertEqual(self.store.apply_updates(), 2)

        infected = self.store.query_by_state("I")
        self.assertTrue(set([0, 3]).issubset(infected))
        np.testing.assert_array_equal(self.store.query_by_state("S"), [1, 2, 4, 5, 6, 7])
        self.assertEqual(self.store.pending_count(), 0)

    def test_last_write_wins(self):
        """Test a later update for the same person overrides an earlier one."""
        self.store.queue_update([4], "I")
        self.store.queue_update([4], "R")
        self.store.apply_updates()

        self.assertEqual(self.store.get_states([4]), ["R"])

    def test_apply_without_pending_is_noop(self):
        """Test apply_updates with nothing queued changes nothing."""
        before = self.store.output_states().copy()
        self.assertEqual(self.store.apply_updates(), 0)
        np.testing.assert_array_equal(self.store.output_states(), before)

    def test_empty_update(self):
        """Test an empty person set is accepted."""
        self.store.queue_update([], "R")
        self.assertEqual(self.store.apply_updates(), 0)

    def test_invalid_index_leaves_buffer_untouched(self):
        """Test a bad index fails the whole call."""
        with self.assertRaises(InvalidIndex):
            self.store.queue_update([0, 10], "R")
        with self.assertRaises(InvalidIndex):
            self.store.queue_update([-1], "R")
        self.assertEqual(self.store.pending_count(), 0)

    def test_unknown_label(self):
        """Test updates to undeclared states are rejected."""
        with self.assertRaises(UnknownLabel):
            self.store.queue_update([0], "D")
        self.assertEqual(self.store.pending_count(), 0)

    def test_counts_conserved(self):
        """Test the population is conserved across commits."""
        self.store.queue_update([0, 1, 2], "I")
        self.store.queue_update([8], "R")
        self.store.apply_updates()

        self.assertEqual(self.store.output_states().sum(), 10)
        np.testing.assert_array_equal(self.store.output_states(), [5, 4, 1])


if __name__ == '__main__':
    unittest.main()
