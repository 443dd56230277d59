"""
Preferred-direction estimation for recorded units.

For every unit and every two-column input signal (e.g. hand velocity), a GLM
of the unit's response on the covariates gives a coefficient pair whose
angle is the preferred direction (PD) and whose length is the modulation
depth. Bootstrapping gives confidence intervals on both, and a scramble
test against a null distribution decides whether the unit is tuned.

Which Function Should I Use?
----------------------------
**Full result table for a dataset?**
    Use ``compute_preferred_directions()``.

**Tuning of a single response vector?**
    Use ``estimate_unit_tuning()`` with an already extracted covariate matrix.

Typical Workflow
----------------
>>> table = compute_preferred_directions(
...     trial_data,
...     out_signals="M1_spikes",
...     in_signals=[("vel", [0, 1])],
...     num_boots=1000,
...     rng=42,
... )  # doctest: +SKIP
>>> table.loc[table["vel_Tuned"], "vel_PD"]  # doctest: +SKIP

Result Schema
-------------
The columns depend on whether the run is bootstrapped. With fewer than two
bootstrap draws, or ``boot_for_tuning=False``, only ``PD`` and ``Moddepth``
columns are produced. See ``neurotuning.results`` for the full schema.

Parallelism
-----------
Units are independent. With ``n_workers > 1`` they are distributed over a
process pool. Each unit gets its own random generator spawned from ``rng``,
so results are identical for any ``n_workers`` given the same seed.
"""

from __future__ import annotations

import logging
import time
import warnings
from collections.abc import Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, fields, replace
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from tqdm import tqdm

from neurotuning.direction import SignalTuning, summarize_signal
from neurotuning.glm import Distribution, check_coefficients, fit_glm
from neurotuning.results import build_result_table
from neurotuning.signals import as_trial_list, check_signals, get_vars
from neurotuning.stats.resampling import _ensure_rng, bootstrap_fits, scramble_fits
from neurotuning.validation import (
    ConfigurationError,
    normalize_prefix,
    use_bootstrap,
    validate_in_signals,
    validate_out_signal_names,
    validate_out_signals,
)

logger = logging.getLogger("neurotuning.tuning")

__all__ = [
    "TuningParams",
    "compute_preferred_directions",
    "estimate_unit_tuning",
]

# Legacy option names accepted by TuningParams.from_mapping
_PARAM_ALIASES = {"bootForTuning": "boot_for_tuning"}


@dataclass(frozen=True)
class TuningParams:
    """Options for ``compute_preferred_directions``.

    Attributes
    ----------
    out_signals : Any
        Selector of the response signal(s); one column per unit. Required.
    out_signal_names : sequence, optional
        Labels for the units, used as the result index.
    trial_idx : array-like of int or bool, optional
        Trials to use. Default is all trials.
    in_signals : Any, default="vel"
        Selector(s) of the covariate signals. Each must resolve to exactly
        two columns.
    distribution : str or Distribution, default="poisson"
        GLM family: ``"poisson"`` (log link) or ``"normal"`` (identity link).
    boot_for_tuning : bool, default=True
        Bootstrap for confidence intervals and tuning significance. Forced
        off when ``num_boots < 2``.
    num_boots : int, default=1000
        Number of bootstrap (and scramble) draws per unit.
    do_plot : bool, default=False
        Diagnostic plotting is not supported; setting this only warns.
    prefix : str, default=""
        Prefix for result column names; ``_`` is appended if missing.
    verbose : bool, default=True
        Report per-unit progress.
    rng : np.random.Generator | int | None, default=None
        Seed or generator for all resampling.
    n_workers : int, default=1
        Number of worker processes used for the per-unit fits.
    """

    out_signals: Any = None
    out_signal_names: Sequence[Any] | None = None
    trial_idx: Any = None
    in_signals: Any = "vel"
    distribution: str | Distribution = Distribution.POISSON
    boot_for_tuning: bool = True
    num_boots: int = 1000
    do_plot: bool = False
    prefix: str = ""
    verbose: bool = True
    rng: np.random.Generator | int | None = None
    n_workers: int = 1

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]) -> TuningParams:
        """Build params from a plain dict of option names.

        Both snake_case names and the legacy ``bootForTuning`` key are
        accepted.

        Raises
        ------
        ConfigurationError
            If an option name is not recognized.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in params.items():
            name = _PARAM_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(
                    f"Unknown option {key!r}.\n"
                    f"Fix: Use one of {sorted(known)}."
                )
            kwargs[name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class _UnitTask:
    """Everything one worker needs to estimate one unit."""

    unit: int
    response: NDArray[np.float64]
    covariates: NDArray[np.float64]
    n_in_signals: int
    distribution: Distribution
    bootstrapped: bool
    num_boots: int
    rng: np.random.Generator


def estimate_unit_tuning(
    response: NDArray[np.float64],
    covariates: NDArray[np.float64],
    *,
    n_in_signals: int | None = None,
    distribution: str | Distribution = Distribution.POISSON,
    bootstrapped: bool = True,
    num_boots: int = 1000,
    rng: np.random.Generator | int | None = None,
) -> list[SignalTuning]:
    """Estimate the tuning of one unit to each input signal.

    Runs the point fit, then (if ``bootstrapped``) the bootstrap and scramble
    ensembles, and summarizes each input signal.

    Parameters
    ----------
    response : NDArray[np.float64], shape (n_samples,)
        Response of the unit.
    covariates : NDArray[np.float64], shape (n_samples, 2 * n_in_signals)
        Covariate matrix, one two-column block per input signal.
    n_in_signals : int, optional
        Number of input signals. Defaults to ``covariates.shape[1] // 2``.
    distribution : str or Distribution, default="poisson"
        GLM family.
    bootstrapped : bool, default=True
        Compute bootstrap and scramble ensembles.
    num_boots : int, default=1000
        Draws per ensemble.
    rng : np.random.Generator | int | None, default=None
        Random number generator for the resampling.

    Returns
    -------
    list of SignalTuning
        One entry per input signal.

    Raises
    ------
    FitError
        If any fit returns a coefficient count other than
        ``1 + 2 * n_in_signals``.
    """
    distribution = Distribution.resolve(distribution)
    response = np.asarray(response, dtype=np.float64).ravel()
    covariates = np.asarray(covariates, dtype=np.float64)
    if n_in_signals is None:
        n_in_signals = covariates.shape[1] // 2
    generator = _ensure_rng(rng)

    coefs = fit_glm(response, covariates, distribution)
    check_coefficients(coefs, n_in_signals)

    scramble_coefs = None
    if bootstrapped:
        data = np.column_stack([response, covariates])
        coefs = bootstrap_fits(
            lambda d: fit_glm(d[:, 0], d[:, 1:], distribution),
            data,
            n_boots=num_boots,
            rng=generator,
        )
        check_coefficients(coefs, n_in_signals)
        scramble_coefs = scramble_fits(
            lambda y, x: fit_glm(y, x, distribution),
            response,
            covariates,
            n_boots=num_boots,
            rng=generator,
        )
        check_coefficients(scramble_coefs, n_in_signals)

    return [
        summarize_signal(coefs, signal_idx, scramble_coefs)
        for signal_idx in range(n_in_signals)
    ]


def _run_unit_task(task: _UnitTask) -> list[SignalTuning]:
    """Worker entry point; module level so it can be pickled."""
    return estimate_unit_tuning(
        task.response,
        task.covariates,
        n_in_signals=task.n_in_signals,
        distribution=task.distribution,
        bootstrapped=task.bootstrapped,
        num_boots=task.num_boots,
        rng=task.rng,
    )


def compute_preferred_directions(
    trial_data: Any,
    params: TuningParams | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> pd.DataFrame:
    """Compute preferred directions, modulation depths and tuning significance.

    Parameters
    ----------
    trial_data : sequence of mapping or pandas.DataFrame
        Trials; each maps signal names to arrays of shape
        (n_samples, n_channels).
    params : TuningParams or mapping, optional
        Options. Keyword arguments override entries in ``params``.
    **kwargs
        Individual options, see ``TuningParams``.

    Returns
    -------
    pandas.DataFrame
        One row per unit (response column), in response-column order.
        Columns ``{prefix}{signal}_PD`` and ``{prefix}{signal}_Moddepth``
        for every input signal, plus ``PDCI``, ``ModdepthCI``, ``Tuned`` and
        ``bootstraps`` columns when bootstrapped. Column kinds
        (circular/linear/logical) are in ``attrs["column_kinds"]``.

    Raises
    ------
    ConfigurationError
        If no output signal is given, an input signal does not resolve to
        exactly two columns, or another option is invalid. Raised before
        any fitting.
    FitError
        If a GLM fit returns the wrong number of coefficients.

    Notes
    -----
    The preferred direction is the circular mean of the bootstrap
    directions and its interval is computed on directions centered on that
    mean, so intervals straddling +/-pi are not inflated. Modulation depth
    is the coefficient-vector length for every family, which is only an
    approximation under the Poisson log link.

    Examples
    --------
    >>> import numpy as np
    >>> rng = np.random.default_rng(0)
    >>> vel = rng.standard_normal((500, 2))
    >>> spikes = rng.poisson(np.exp(0.5 + vel @ [[0.6], [0.0]]))
    >>> table = compute_preferred_directions(
    ...     [{"vel": vel, "spikes": spikes}],
    ...     out_signals="spikes",
    ...     num_boots=50,
    ...     verbose=False,
    ...     rng=1,
    ... )
    >>> list(table.columns)  # doctest: +NORMALIZE_WHITESPACE
    ['vel_PD', 'vel_PDCI', 'vel_Moddepth', 'vel_ModdepthCI', 'vel_Tuned',
     'vel_bootstraps']
    """
    if params is None:
        params = TuningParams(**kwargs)
    elif isinstance(params, TuningParams):
        params = replace(params, **kwargs) if kwargs else params
    else:
        params = TuningParams.from_mapping({**params, **kwargs})

    # Validate everything before the first fit
    validate_out_signals(params.out_signals)
    distribution = Distribution.resolve(params.distribution)
    if params.n_workers < 1:
        raise ConfigurationError(f"n_workers must be >= 1, got {params.n_workers}.")
    if params.do_plot:
        warnings.warn(
            "do_plot is not supported; no diagnostic plots are produced.",
            UserWarning,
            stacklevel=2,
        )

    trials = as_trial_list(trial_data)
    out_selectors = check_signals(trials[0], params.out_signals)
    in_selectors = check_signals(trials[0], params.in_signals)
    validate_in_signals(in_selectors)

    response_var = get_vars(trials, params.trial_idx, out_selectors)
    input_var = get_vars(trials, params.trial_idx, in_selectors)
    if response_var.shape[0] != input_var.shape[0]:
        raise ConfigurationError(
            f"Output signals have {response_var.shape[0]} samples but input "
            f"signals have {input_var.shape[0]}.\n"
            "Fix: Make every trial's output and input signals the same length."
        )
    if response_var.shape[0] == 0:
        raise ConfigurationError(
            "No samples selected.\n"
            "Fix: Check that trial_idx selects at least one non-empty trial."
        )
    n_units = response_var.shape[1]
    names = validate_out_signal_names(params.out_signal_names, n_units)
    prefix = normalize_prefix(params.prefix)
    bootstrapped = use_bootstrap(params.boot_for_tuning, params.num_boots)
    n_in_signals = len(in_selectors)

    logger.debug(
        "Estimating tuning for %d units on %d input signals from %d samples "
        "(distribution=%s, bootstrapped=%s)",
        n_units,
        n_in_signals,
        response_var.shape[0],
        distribution.value,
        bootstrapped,
    )

    unit_rngs = _ensure_rng(params.rng).spawn(n_units)
    tasks = [
        _UnitTask(
            unit=uid,
            response=response_var[:, uid],
            covariates=input_var,
            n_in_signals=n_in_signals,
            distribution=distribution,
            bootstrapped=bootstrapped,
            num_boots=params.num_boots,
            rng=unit_rngs[uid],
        )
        for uid in range(n_units)
    ]

    # Preallocated per-unit slots, each written exactly once
    unit_rows: list[list[SignalTuning] | None] = [None] * n_units
    if params.n_workers == 1:
        unit_tic = time.perf_counter()
        for task in tasks:
            unit_rows[task.unit] = _run_unit_task(task)
            if params.verbose:
                logger.info(
                    "  Bootstrapping GLM PD computation %d of %d (ET=%f s)",
                    task.unit + 1,
                    n_units,
                    time.perf_counter() - unit_tic,
                )
    else:
        with ProcessPoolExecutor(max_workers=params.n_workers) as executor:
            results = tqdm(
                executor.map(_run_unit_task, tasks),
                total=n_units,
                desc="Units",
                disable=not params.verbose,
            )
            for task, rows in zip(tasks, results):
                unit_rows[task.unit] = rows

    return build_result_table(
        unit_rows,
        [sel.name for sel in in_selectors],
        prefix=prefix,
        bootstrapped=bootstrapped,
        index=names,
    )
