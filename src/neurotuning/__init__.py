"""
neurotuning: preferred-direction tuning of recorded units.

Estimates, for each unit in a trial-structured behavioral/neural dataset,
the preferred direction (PD) of its tuning to two-dimensional kinematic
covariates such as velocity, together with a modulation depth, bootstrap
confidence intervals on both, and a flag marking units whose tuning exceeds
a scramble null distribution.

Main Entry Point
----------------
compute_preferred_directions
    Fit GLMs per unit, bootstrap, scramble-test, and return a result table.

Subpackages
-----------
stats
    Circular statistics and bootstrap/scramble resampling.

Examples
--------
Compute a velocity PD table for all units in ``S1_spikes``::

    >>> from neurotuning import compute_preferred_directions
    >>> table = compute_preferred_directions(
    ...     trial_data,
    ...     out_signals="S1_spikes",
    ...     in_signals=[("vel", [0, 1])],
    ...     distribution="poisson",
    ...     num_boots=1000,
    ...     prefix="S1",
    ...     rng=0,
    ... )  # doctest: +SKIP
    >>> table[["S1_vel_PD", "S1_vel_Tuned"]].head()  # doctest: +SKIP
"""

import logging

from neurotuning.direction import SignalTuning
from neurotuning.glm import Distribution, FitError
from neurotuning.signals import SignalSelector
from neurotuning.tuning import (
    TuningParams,
    compute_preferred_directions,
    estimate_unit_tuning,
)
from neurotuning.validation import ConfigurationError

# Add NullHandler to prevent "No handler found" warnings if user doesn't configure logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigurationError",
    "Distribution",
    "FitError",
    "SignalSelector",
    "SignalTuning",
    "TuningParams",
    "compute_preferred_directions",
    "estimate_unit_tuning",
]
