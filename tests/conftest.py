"""Shared test fixtures for neurotuning test suite.

Fixture Naming Convention
=========================

**Synthetic datasets** follow the pattern:
    {tuning}_{n_units}unit_trials

Where:
    - tuning: tuned (cosine-tuned Poisson units), untuned (no covariate
      dependence)
    - n_units: number of response columns

Each dataset is a list of trials; each trial is a dict with a ``vel``
signal (n_samples, 2), an ``acc`` signal (n_samples, 3) and a ``spikes``
signal (n_samples, n_units).
"""

import os

import numpy as np
import pytest
from hypothesis import Phase, Verbosity, settings
from numpy.typing import NDArray

# =============================================================================
# Hypothesis Configuration for Performance
# =============================================================================
# - "ci": Fast profile for CI pipelines (fewer examples, no deadline)
# - "dev": Standard development profile (moderate examples)
# - "thorough": Full property testing (many examples, for pre-release)

settings.register_profile(
    "ci",
    max_examples=10,
    deadline=None,  # Disable deadline in CI (variable performance)
    suppress_health_check=[],
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
    verbosity=Verbosity.quiet,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=5000,  # 5 second deadline
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "thorough",
    max_examples=100,
    deadline=None,
    verbosity=Verbosity.verbose,
)

# Set HYPOTHESIS_PROFILE=ci in CI environments for faster tests
_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)

# =============================================================================
# Test Configuration Constants
# =============================================================================

DEFAULT_SEED = 42
ALT_SEED_1 = 43

# Samples in the standard synthetic dataset (5 trials x 100 samples)
N_TRIALS = 5
SAMPLES_PER_TRIAL = 100


def make_trials(
    preferred_directions: NDArray[np.float64],
    gains: NDArray[np.float64],
    *,
    n_trials: int = N_TRIALS,
    samples_per_trial: int = SAMPLES_PER_TRIAL,
    baseline: float = 1.0,
    seed: int = DEFAULT_SEED,
) -> list[dict[str, NDArray[np.float64]]]:
    """Cosine-tuned Poisson units driven by a 2-D velocity.

    The log firing rate of unit ``u`` is
    ``baseline + gains[u] * (cos(pd[u]) * vx + sin(pd[u]) * vy)``.
    """
    rng = np.random.default_rng(seed)
    preferred_directions = np.asarray(preferred_directions, dtype=np.float64)
    gains = np.asarray(gains, dtype=np.float64)
    weights = np.vstack(
        [gains * np.cos(preferred_directions), gains * np.sin(preferred_directions)]
    )

    trials = []
    for _ in range(n_trials):
        vel = rng.standard_normal((samples_per_trial, 2))
        acc = rng.standard_normal((samples_per_trial, 3))
        rates = np.exp(baseline + vel @ weights)
        spikes = rng.poisson(rates).astype(np.float64)
        trials.append({"vel": vel, "acc": acc, "spikes": spikes})
    return trials


# =============================================================================
# --- Fixtures ---
# =============================================================================
@pytest.fixture(scope="session")
def tuned_3unit_trials() -> list[dict[str, NDArray[np.float64]]]:
    """Three strongly tuned units with PDs of 0, pi/2 and close to pi."""
    return make_trials(
        preferred_directions=np.array([0.0, np.pi / 2, np.pi - 0.05]),
        gains=np.array([0.6, 0.6, 0.6]),
    )


@pytest.fixture(scope="session")
def untuned_2unit_trials() -> list[dict[str, NDArray[np.float64]]]:
    """Two units whose firing does not depend on velocity."""
    return make_trials(
        preferred_directions=np.array([0.0, 0.0]),
        gains=np.array([0.0, 0.0]),
        seed=ALT_SEED_1,
    )


@pytest.fixture(scope="session")
def trial_factory():
    """Factory for custom synthetic datasets (see ``make_trials``)."""
    return make_trials
