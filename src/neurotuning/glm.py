"""GLM fitting for directional tuning.

Fits a generalized linear model of one unit's response on paired covariate
columns and returns the coefficient vector ``[b0, b1x, b1y, b2x, b2y, ...]``.
The error distribution is one of a small closed set of families, each of
which supplies its canonical link to ``statsmodels``.

Examples
--------
>>> import numpy as np
>>> from neurotuning.glm import Distribution, fit_glm
>>> rng = np.random.default_rng(0)
>>> X = rng.standard_normal((200, 2))
>>> y = rng.poisson(np.exp(0.5 + 0.8 * X[:, 0]))
>>> coefs = fit_glm(y, X, Distribution.POISSON)
>>> coefs.shape
(3,)
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
import statsmodels.api as sm
from numpy.typing import NDArray

from neurotuning.validation import ConfigurationError

logger = logging.getLogger("neurotuning.glm")

# Rate floor for the intercept of a silent unit under the log link
_MIN_RATE = 1e-10

__all__ = [
    "Distribution",
    "FitError",
    "check_coefficients",
    "expected_n_coefficients",
    "fit_glm",
]


class FitError(RuntimeError):
    """Raised when a GLM fit does not match the expected coefficient layout.

    A fit must return one intercept plus two coefficients per input signal.
    Any other count means the covariates and the solver disagree, and the
    run is aborted rather than emitting malformed rows.
    """

    pass


class Distribution(str, Enum):
    """Error distribution of the GLM.

    POISSON uses the canonical log link; NORMAL uses the identity link.
    Direction and modulation depth are extracted identically for both.
    """

    POISSON = "poisson"
    NORMAL = "normal"

    @classmethod
    def resolve(cls, value: str | Distribution) -> Distribution:
        """Parse a distribution name (case-insensitive).

        Raises
        ------
        ConfigurationError
            If the name is not a supported family.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key == "gaussian":
            key = "normal"
        try:
            return cls(key)
        except ValueError:
            supported = [member.value for member in cls]
            raise ConfigurationError(
                f"Unsupported distribution {value!r}. Supported: {supported}."
            ) from None

    @property
    def family(self) -> sm.families.Family:
        """The statsmodels family (with canonical link) for this distribution."""
        if self is Distribution.POISSON:
            return sm.families.Poisson()
        return sm.families.Gaussian()


def expected_n_coefficients(n_in_signals: int) -> int:
    """Intercept plus two coefficients per input signal."""
    return 1 + 2 * n_in_signals


def check_coefficients(coefs: NDArray[np.float64], n_in_signals: int) -> None:
    """Verify a coefficient vector (or stack of them) has ``1 + 2k`` entries.

    Parameters
    ----------
    coefs : NDArray[np.float64], shape (n_coef,) or (n_fits, n_coef)
        Coefficients from one fit or an ensemble of fits.
    n_in_signals : int
        Number of two-column input signals, ``k``.

    Raises
    ------
    FitError
        If the trailing dimension is not ``1 + 2k``.
    """
    expected = expected_n_coefficients(n_in_signals)
    got = np.shape(coefs)[-1] if np.ndim(coefs) > 0 else 0
    if got != expected:
        raise FitError(
            f"GLM doesn't have correct number of inputs: expected {expected} "
            f"coefficients (intercept + 2 x {n_in_signals} input signals), "
            f"got {got}."
        )


def _intercept_only(
    response: NDArray[np.float64],
    n_covariates: int,
    distribution: Distribution,
) -> NDArray[np.float64]:
    """Coefficients of a fit with no dependence on the covariates.

    The intercept is the link of the mean response; a silent unit under the
    log link gets the link of ``_MIN_RATE`` so the intercept stays finite.
    """
    mean = float(np.mean(response)) if response.size else 0.0
    if distribution is Distribution.POISSON:
        mean = max(mean, _MIN_RATE)
    intercept = float(distribution.family.link(mean))
    return np.concatenate([[intercept], np.zeros(n_covariates)])


def fit_glm(
    response: NDArray[np.float64],
    covariates: NDArray[np.float64],
    distribution: str | Distribution = Distribution.POISSON,
) -> NDArray[np.float64]:
    """Fit a GLM of ``response`` on ``covariates`` with an intercept.

    Parameters
    ----------
    response : NDArray[np.float64], shape (n_samples,)
        Response of one unit (e.g., spike counts per bin).
    covariates : NDArray[np.float64], shape (n_samples, n_covariates)
        Design matrix without an intercept column.
    distribution : str or Distribution, default=Distribution.POISSON
        Error distribution.

    Returns
    -------
    NDArray[np.float64], shape (n_covariates + 1,)
        Intercept followed by one coefficient per covariate column.

    Notes
    -----
    A constant response (for example a unit that never fires, or a
    bootstrap draw of a sparse unit that contains no spikes) carries no
    directional information. It returns the intercept-only solution with
    zero covariate coefficients instead of being passed to the solver. A
    fit that fails numerically or returns non-finite coefficients falls
    back to the same solution, so a single degenerate unit or draw never
    aborts a run.
    """
    distribution = Distribution.resolve(distribution)
    response = np.asarray(response, dtype=np.float64).ravel()
    covariates = np.asarray(covariates, dtype=np.float64)
    if covariates.ndim == 1:
        covariates = covariates[:, np.newaxis]
    n_covariates = covariates.shape[1]

    if response.size == 0 or np.ptp(response) == 0:
        return _intercept_only(response, n_covariates, distribution)

    design = sm.add_constant(covariates, prepend=True, has_constant="add")
    model = sm.GLM(response, design, family=distribution.family)
    try:
        params = np.asarray(model.fit().params, dtype=np.float64)
    except (ValueError, np.linalg.LinAlgError) as exc:
        logger.debug("GLM fit failed (%s); using intercept-only fit", exc)
        return _intercept_only(response, n_covariates, distribution)
    if not np.all(np.isfinite(params)):
        logger.debug(
            "GLM fit returned non-finite coefficients; using intercept-only fit"
        )
        return _intercept_only(response, n_covariates, distribution)
    return params
