"""Signal extraction from trial-structured datasets.

A dataset is an ordered sequence of trials. Each trial maps signal names to
numeric arrays of shape (n_samples, n_channels), all sampled at a common
rate within the trial. This module resolves signal selectors into fixed
column indices once, then pulls row-aligned matrices for a subset of trials.

Selector Forms
--------------
- ``"vel"`` : every column of the ``vel`` signal
- ``("vel", [0, 1])`` : columns 0 and 1 of ``vel``
- ``SignalSelector("vel", (0, 1))`` : already resolved
- a list of any of the above, e.g. ``["vel", ("acc", [0, 1])]``

Examples
--------
>>> import numpy as np
>>> from neurotuning.signals import check_signals, get_vars
>>> trials = [
...     {"vel": np.zeros((5, 2)), "spikes": np.ones((5, 3))},
...     {"vel": np.zeros((4, 2)), "spikes": np.ones((4, 3))},
... ]
>>> selectors = check_signals(trials[0], "spikes")
>>> get_vars(trials, None, selectors).shape
(9, 3)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from neurotuning.validation import ConfigurationError

__all__ = [
    "SignalSelector",
    "as_trial_list",
    "check_signals",
    "get_vars",
    "resolve_trial_idx",
]


@dataclass(frozen=True)
class SignalSelector:
    """A named signal and the columns to take from it.

    Attributes
    ----------
    name : str
        Signal name as stored in each trial.
    columns : tuple of int
        Zero-based column indices within the signal.
    """

    name: str
    columns: tuple[int, ...]

    @property
    def n_columns(self) -> int:
        """Number of selected columns."""
        return len(self.columns)


def as_trial_list(trial_data: Any) -> list[Mapping[str, Any]]:
    """Normalize a dataset to a list of per-trial mappings.

    Parameters
    ----------
    trial_data : sequence of mapping or pandas.DataFrame
        Trials. A DataFrame is read as one trial per row.

    Returns
    -------
    list of mapping
        One mapping of signal name to array per trial.
    """
    if isinstance(trial_data, pd.DataFrame):
        trials = trial_data.to_dict("records")
    elif isinstance(trial_data, Mapping):
        # A single trial
        return [trial_data]
    else:
        trials = list(trial_data)
    if len(trials) == 0:
        raise ConfigurationError(
            "trial_data is empty.\nFix: Provide at least one trial."
        )
    return trials


def _as_2d(values: Any) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 1:
        return arr[:, np.newaxis]
    if arr.ndim != 2:
        raise ConfigurationError(
            f"Signals must be 1-D or 2-D arrays, got shape {arr.shape}."
        )
    return arr


def _is_column_spec(obj: Any) -> bool:
    if isinstance(obj, bool):
        return False
    if isinstance(obj, (int, np.integer)):
        return True
    if isinstance(obj, (str, bytes, Mapping)):
        return False
    try:
        items = list(obj)
    except TypeError:
        return False
    return all(
        isinstance(item, (int, np.integer)) and not isinstance(item, bool)
        for item in items
    )


def _is_single_spec(spec: Any) -> bool:
    if isinstance(spec, (str, SignalSelector)):
        return True
    # ("vel", [0, 1]) as opposed to ["vel", "acc"] or ["vel", ("acc", [0, 1])]
    return (
        isinstance(spec, (tuple, list))
        and len(spec) == 2
        and isinstance(spec[0], str)
        and _is_column_spec(spec[1])
    )


def _resolve_one(trial: Mapping[str, Any], spec: Any) -> SignalSelector:
    if isinstance(spec, SignalSelector):
        name, columns = spec.name, spec.columns
    elif isinstance(spec, str):
        name, columns = spec, None
    else:
        name, columns = spec[0], spec[1]

    if name not in trial:
        available = sorted(str(key) for key in trial.keys())
        raise ConfigurationError(
            f"Signal {name!r} not found in trial data. "
            f"Available signals: {available}.\n"
            f"Fix: Check the signal name for typos."
        )

    n_channels = _as_2d(trial[name]).shape[1]
    if columns is None:
        return SignalSelector(name, tuple(range(n_channels)))

    columns = tuple(int(c) for c in np.atleast_1d(columns))
    out_of_range = [c for c in columns if not -n_channels <= c < n_channels]
    if out_of_range:
        raise ConfigurationError(
            f"Columns {out_of_range} are out of range for signal {name!r} "
            f"with {n_channels} columns."
        )
    return SignalSelector(name, tuple(c % n_channels for c in columns))


def check_signals(trial: Mapping[str, Any], signals: Any) -> list[SignalSelector]:
    """Resolve a selector specification against a representative trial.

    Parameters
    ----------
    trial : mapping
        A trial used to look up signal names and channel counts.
    signals : str, tuple, SignalSelector, or list of these
        Selector specification (see module docstring).

    Returns
    -------
    list of SignalSelector
        One resolved selector per named signal, in declared order.

    Raises
    ------
    ConfigurationError
        If a signal is missing from the trial or a column index is out of
        range.
    """
    if _is_single_spec(signals):
        return [_resolve_one(trial, signals)]
    return [_resolve_one(trial, spec) for spec in signals]


def resolve_trial_idx(n_trials: int, trial_idx: Any = None) -> NDArray[np.int64]:
    """Convert a trial subset specification to integer indices.

    ``None`` selects all trials. Integer indices and boolean masks are
    accepted.
    """
    all_idx = np.arange(n_trials)
    if trial_idx is None:
        return all_idx
    idx = np.asarray(trial_idx)
    if idx.dtype == bool:
        if idx.shape != (n_trials,):
            raise ConfigurationError(
                f"Boolean trial_idx must have length {n_trials}, got {idx.shape}."
            )
        return all_idx[idx]
    idx = idx.astype(np.int64).ravel()
    if np.any((idx < -n_trials) | (idx >= n_trials)):
        raise ConfigurationError(
            f"trial_idx contains indices outside [0, {n_trials})."
        )
    return all_idx[idx]


def get_vars(
    trial_data: Sequence[Mapping[str, Any]],
    trial_idx: Any,
    selectors: Sequence[SignalSelector],
) -> NDArray[np.float64]:
    """Extract a row-aligned matrix for a subset of trials.

    Parameters
    ----------
    trial_data : sequence of mapping
        Trials.
    trial_idx : array-like of int or bool, or None
        Trials to use. None selects every trial.
    selectors : sequence of SignalSelector
        Resolved selectors; their columns are concatenated in order.

    Returns
    -------
    NDArray[np.float64], shape (n_samples, n_selected_columns)
        Samples from all selected trials, stacked in trial order. Repeated
        calls with the same ``trial_idx`` are row-aligned.

    Raises
    ------
    ConfigurationError
        If the selected signals disagree on sample count within a trial.
    """
    trials = as_trial_list(trial_data)
    blocks = []
    for i in resolve_trial_idx(len(trials), trial_idx):
        trial = trials[i]
        columns = [_as_2d(trial[sel.name])[:, list(sel.columns)] for sel in selectors]
        lengths = {col.shape[0] for col in columns}
        if len(lengths) > 1:
            names = [sel.name for sel in selectors]
            raise ConfigurationError(
                f"Signals {names} have different sample counts in trial {i}: "
                f"{sorted(lengths)}.\n"
                f"Fix: Resample all signals to a common time base."
            )
        blocks.append(np.hstack(columns))

    n_columns = sum(sel.n_columns for sel in selectors)
    if not blocks:
        return np.empty((0, n_columns), dtype=np.float64)
    return np.vstack(blocks)
