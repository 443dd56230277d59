"""Tests for signal selector resolution and matrix extraction."""

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_array_equal

from neurotuning.signals import (
    SignalSelector,
    as_trial_list,
    check_signals,
    get_vars,
    resolve_trial_idx,
)
from neurotuning.validation import ConfigurationError


@pytest.fixture
def small_trials():
    return [
        {
            "vel": np.arange(8.0).reshape(4, 2),
            "acc": np.arange(12.0).reshape(4, 3),
            "spikes": np.ones((4, 3)),
            "speed": np.arange(4.0),
        },
        {
            "vel": 100 + np.arange(6.0).reshape(3, 2),
            "acc": np.zeros((3, 3)),
            "spikes": 2 * np.ones((3, 3)),
            "speed": np.arange(3.0),
        },
    ]


class TestCheckSignals:
    """Tests for check_signals."""

    def test_name_selects_all_columns(self, small_trials):
        """A bare name resolves to every column."""
        assert check_signals(small_trials[0], "acc") == [SignalSelector("acc", (0, 1, 2))]

    def test_name_with_columns(self, small_trials):
        """A (name, columns) pair keeps the given columns."""
        assert check_signals(small_trials[0], ("acc", [0, 2])) == [
            SignalSelector("acc", (0, 2))
        ]

    def test_list_of_specs(self, small_trials):
        """A list resolves each entry in order."""
        selectors = check_signals(small_trials[0], ["vel", ("acc", [1, 2])])
        assert [s.name for s in selectors] == ["vel", "acc"]
        assert [s.n_columns for s in selectors] == [2, 2]

    def test_list_of_two_names(self, small_trials):
        """A pair of names is two selectors, not a name with columns."""
        selectors = check_signals(small_trials[0], ["vel", "acc"])
        assert [s.name for s in selectors] == ["vel", "acc"]

    def test_one_dimensional_signal(self, small_trials):
        """1-D signals have a single column."""
        assert check_signals(small_trials[0], "speed")[0].n_columns == 1

    def test_negative_columns_normalized(self, small_trials):
        """Negative indices count from the end."""
        assert check_signals(small_trials[0], ("acc", [-1]))[0].columns == (2,)

    def test_selector_passthrough(self, small_trials):
        """SignalSelector instances are validated and kept."""
        selector = SignalSelector("vel", (1, 0))
        assert check_signals(small_trials[0], selector) == [selector]

    def test_unknown_signal_raises(self, small_trials):
        """Unknown names raise ConfigurationError listing available signals."""
        with pytest.raises(ConfigurationError, match="not found"):
            check_signals(small_trials[0], "pos")

    def test_column_out_of_range_raises(self, small_trials):
        """Out-of-range columns raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="out of range"):
            check_signals(small_trials[0], ("vel", [0, 5]))


class TestResolveTrialIdx:
    """Tests for resolve_trial_idx."""

    def test_default_is_all(self):
        assert_array_equal(resolve_trial_idx(3), [0, 1, 2])

    def test_boolean_mask(self):
        assert_array_equal(resolve_trial_idx(3, [True, False, True]), [0, 2])

    def test_integer_indices(self):
        assert_array_equal(resolve_trial_idx(4, [3, 1]), [3, 1])

    def test_out_of_range_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_trial_idx(3, [0, 3])

    def test_wrong_mask_length_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_trial_idx(3, [True, False])


class TestGetVars:
    """Tests for get_vars."""

    def test_stacks_trials(self, small_trials):
        """Trials are stacked vertically in order."""
        selectors = check_signals(small_trials[0], "vel")
        result = get_vars(small_trials, None, selectors)
        assert result.shape == (7, 2)
        assert_array_equal(result[:4], small_trials[0]["vel"])
        assert_array_equal(result[4:], small_trials[1]["vel"])

    def test_concatenates_signals(self, small_trials):
        """Selected columns of several signals are concatenated per trial."""
        selectors = check_signals(small_trials[0], ["vel", ("acc", [2])])
        result = get_vars(small_trials, [0], selectors)
        assert_array_equal(result[:, :2], small_trials[0]["vel"])
        assert_array_equal(result[:, 2], small_trials[0]["acc"][:, 2])

    def test_trial_subset_row_aligned(self, small_trials):
        """Calls with the same trial subset return aligned rows."""
        out = get_vars(small_trials, [1], check_signals(small_trials[0], "spikes"))
        inp = get_vars(small_trials, [1], check_signals(small_trials[0], "vel"))
        assert out.shape[0] == inp.shape[0] == 3

    def test_mismatched_lengths_raise(self, small_trials):
        """Signals with different sample counts in a trial raise."""
        trials = [dict(small_trials[0], vel=np.zeros((5, 2)))]
        selectors = check_signals(trials[0], ["vel", "spikes"])
        with pytest.raises(ConfigurationError, match="different sample counts"):
            get_vars(trials, None, selectors)

    def test_dataframe_input(self, small_trials):
        """A DataFrame with one trial per row is accepted."""
        columns = {}
        for name in small_trials[0]:
            column = np.empty(len(small_trials), dtype=object)
            for i, trial in enumerate(small_trials):
                column[i] = trial[name]
            columns[name] = column
        frame = pd.DataFrame(columns)
        selectors = check_signals(as_trial_list(frame)[0], "vel")
        assert get_vars(frame, None, selectors).shape == (7, 2)


class TestAsTrialList:
    """Tests for as_trial_list."""

    def test_single_mapping(self, small_trials):
        result = as_trial_list(small_trials[0])
        assert len(result) == 1
        assert result[0] is small_trials[0]

    def test_empty_raises(self):
        with pytest.raises(ConfigurationError, match="empty"):
            as_trial_list([])

    def test_empty_dataframe_raises(self):
        with pytest.raises(ConfigurationError, match="empty"):
            as_trial_list(pd.DataFrame(columns=["vel", "spikes"]))
