"""Preferred direction and modulation depth from GLM coefficients.

For an input signal with covariate columns ``(x, y)`` the fitted coefficient
pair ``(b_x, b_y)`` defines a tuning vector. Its angle is the preferred
direction (PD) and its length is the modulation depth::

    PD       = atan2(b_y, b_x)
    moddepth = sqrt(b_x**2 + b_y**2)

The same formulas are used for every distribution family. Under the normal
family with the identity link the length is the classic cosine-tuning
modulation depth; under a log link it is only an approximation kept for
compatibility, since the response is modulated multiplicatively there.

Significance
------------
A unit is tuned to an input signal when the mean of its bootstrap
modulation depths exceeds the 95th percentile of its scramble modulation
depths (the null distribution built by resampling the response alone).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from neurotuning.stats.circular import (
    PERCENTILE_METHOD,
    circular_confidence_interval,
    circular_mean,
    linear_confidence_interval,
)

__all__ = [
    "SignalTuning",
    "is_tuned",
    "modulation_depths",
    "preferred_directions",
    "summarize_signal",
]


def _coefficient_pair(
    coefs: NDArray[np.float64], signal_idx: int
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    # Column 0 is the intercept; signal i occupies columns 1 + 2i and 2 + 2i
    coefs = np.atleast_2d(np.asarray(coefs, dtype=np.float64))
    first = 1 + 2 * signal_idx
    if first + 1 >= coefs.shape[1]:
        raise IndexError(
            f"signal_idx={signal_idx} is out of range for "
            f"{(coefs.shape[1] - 1) // 2} input signals."
        )
    return coefs[:, first], coefs[:, first + 1]


def preferred_directions(
    coefs: NDArray[np.float64], signal_idx: int
) -> NDArray[np.float64]:
    """Direction of the tuning vector for every fit in ``coefs``.

    Parameters
    ----------
    coefs : NDArray[np.float64], shape (n_coef,) or (n_fits, n_coef)
        Coefficient vectors ``[b0, b1x, b1y, b2x, b2y, ...]``.
    signal_idx : int
        Zero-based index of the input signal.

    Returns
    -------
    NDArray[np.float64], shape (n_fits,)
        Angles in radians, in [-pi, pi].

    Examples
    --------
    >>> import numpy as np
    >>> preferred_directions(np.array([0.1, 0.0, 1.0]), 0)
    array([1.57079633])
    """
    coef_x, coef_y = _coefficient_pair(coefs, signal_idx)
    return np.arctan2(coef_y, coef_x)


def modulation_depths(
    coefs: NDArray[np.float64], signal_idx: int
) -> NDArray[np.float64]:
    """Length of the tuning vector for every fit in ``coefs``.

    Returns
    -------
    NDArray[np.float64], shape (n_fits,)
        Non-negative modulation depths.
    """
    coef_x, coef_y = _coefficient_pair(coefs, signal_idx)
    return np.hypot(coef_x, coef_y)


def is_tuned(
    moddepths: NDArray[np.float64],
    scramble_moddepths: NDArray[np.float64],
    *,
    percentile: float = 95.0,
) -> bool:
    """Compare mean bootstrap modulation depth against the scramble null.

    Parameters
    ----------
    moddepths : array, shape (n_boots,)
        Bootstrap modulation depths.
    scramble_moddepths : array, shape (n_boots,)
        Modulation depths of fits with the response scrambled.
    percentile : float, default=95.0
        Percentile of the null distribution used as the threshold.

    Returns
    -------
    bool
        True if ``mean(moddepths)`` is strictly greater than the threshold.

    Examples
    --------
    >>> import numpy as np
    >>> null = np.linspace(0.0, 1.0, 100)
    >>> is_tuned(np.array([2.0, 2.5]), null)
    True
    >>> is_tuned(np.array([0.1, 0.2]), null)
    False
    """
    threshold = np.percentile(
        np.asarray(scramble_moddepths, dtype=np.float64),
        percentile,
        method=PERCENTILE_METHOD,
    )
    return bool(np.mean(moddepths) > threshold)


@dataclass(frozen=True)
class SignalTuning:
    """Tuning of one unit to one input signal.

    Attributes
    ----------
    pd : float
        Preferred direction (circular mean of the direction samples), radians.
    moddepth : float
        Mean modulation depth.
    pd_ci : NDArray[np.float64] or None
        95% interval of the preferred direction (wrap-corrected). None
        without bootstrapping.
    moddepth_ci : NDArray[np.float64] or None
        95% interval of the modulation depth. None without bootstrapping.
    tuned : bool or None
        Significance against the scramble null. None without bootstrapping.
    bootstraps : NDArray[np.float64] or None
        Per-draw preferred directions. None without bootstrapping.
    """

    pd: float
    moddepth: float
    pd_ci: NDArray[np.float64] | None = None
    moddepth_ci: NDArray[np.float64] | None = None
    tuned: bool | None = None
    bootstraps: NDArray[np.float64] | None = None


def summarize_signal(
    coefs: NDArray[np.float64],
    signal_idx: int,
    scramble_coefs: NDArray[np.float64] | None = None,
) -> SignalTuning:
    """Reduce a coefficient ensemble to the tuning of one input signal.

    Parameters
    ----------
    coefs : NDArray[np.float64], shape (n_coef,) or (n_boots, n_coef)
        A single point fit, or the bootstrap ensemble.
    signal_idx : int
        Zero-based index of the input signal.
    scramble_coefs : NDArray[np.float64], shape (n_boots, n_coef), optional
        Scramble ensemble. When given, ``coefs`` is treated as a bootstrap
        ensemble and intervals and significance are computed.

    Returns
    -------
    SignalTuning
    """
    dirs = preferred_directions(coefs, signal_idx)
    moddepths = modulation_depths(coefs, signal_idx)
    pd = circular_mean(dirs)
    moddepth = float(np.mean(moddepths))

    if scramble_coefs is None:
        return SignalTuning(pd=pd, moddepth=moddepth)

    scramble_moddepths = modulation_depths(scramble_coefs, signal_idx)
    return SignalTuning(
        pd=pd,
        moddepth=moddepth,
        pd_ci=circular_confidence_interval(dirs),
        moddepth_ci=linear_confidence_interval(moddepths),
        tuned=is_tuned(moddepths, scramble_moddepths),
        bootstraps=dirs,
    )
