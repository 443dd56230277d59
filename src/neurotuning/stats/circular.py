"""
Circular statistics for preferred-direction estimates.

Directions extracted from GLM coefficients live on the circle, so averaging
and percentile intervals must account for the wrap-around at +/-pi. A naive
percentile over angles that straddle the boundary reports an interval close
to the full circle; the helpers here center the samples on their circular
mean first.

Angles
------
All angles are in radians. Output directions lie in the interval (-pi, pi].

Percentiles
-----------
Percentiles use numpy's ``"hazen"`` method, i.e. the sample at rank ``k`` is
placed at the ``(k - 0.5) / n`` quantile.

References
----------
Mardia, K.V. & Jupp, P.E. (2000). Directional Statistics. Wiley.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.stats import directional_stats

__all__ = [
    "circular_confidence_interval",
    "circular_mean",
    "linear_confidence_interval",
    "mean_resultant_length",
    "wrap_angle",
]

PERCENTILE_METHOD = "hazen"


def _validate_angles(angles: NDArray[np.float64], name: str = "angles") -> NDArray[np.float64]:
    angles = np.asarray(angles, dtype=np.float64).ravel()
    if len(angles) == 0:
        raise ValueError(
            f"{name} is empty. Cannot compute circular statistics.\n"
            f"Fix: Provide at least one angle."
        )
    if not np.all(np.isfinite(angles)):
        n_bad = int(np.sum(~np.isfinite(angles)))
        raise ValueError(
            f"{name} contains {n_bad} NaN or infinite values.\n"
            f"Fix: Check for failed GLM fits before computing statistics."
        )
    return angles


def wrap_angle(angles: NDArray[np.float64] | float) -> NDArray[np.float64]:
    """Wrap angles to the interval (-pi, pi].

    Parameters
    ----------
    angles : array or float
        Angles in radians.

    Returns
    -------
    NDArray[np.float64]
        Wrapped angles, same shape as input.

    Examples
    --------
    >>> import numpy as np
    >>> wrap_angle(np.array([3 * np.pi / 2, -np.pi, np.pi]))
    array([-1.57079633,  3.14159265,  3.14159265])
    """
    angles = np.asarray(angles, dtype=np.float64)
    wrapped = np.mod(angles + np.pi, 2 * np.pi) - np.pi
    # mod maps the +pi boundary to -pi; keep the closed end at +pi
    return np.where(wrapped <= -np.pi, np.pi, wrapped)


def _resultant(angles: NDArray[np.float64]):
    """Resultant of unit vectors at ``angles`` (scipy ``DirectionalStats``)."""
    vectors = np.column_stack([np.cos(angles), np.sin(angles)])
    # A zero resultant has no direction; scipy divides by its length
    with np.errstate(invalid="ignore", divide="ignore"):
        return directional_stats(vectors, normalize=False)


def mean_resultant_length(angles: NDArray[np.float64]) -> float:
    """
    Compute mean resultant length R in [0, 1].

    R = |mean(exp(i * angles))|. Values near 1 indicate tightly clustered
    directions; values near 0 indicate spread around the circle.
    """
    return float(_resultant(_validate_angles(angles)).mean_resultant_length)


def circular_mean(angles: NDArray[np.float64]) -> float:
    """
    Circular mean direction.

    Parameters
    ----------
    angles : array, shape (n,)
        Sample of angles in radians.

    Returns
    -------
    float
        Mean direction in radians, in (-pi, pi]. 0.0 when the resultant
        vanishes and no mean direction exists.

    Examples
    --------
    >>> import numpy as np
    >>> round(circular_mean(np.array([np.pi - 0.1, -np.pi + 0.1])), 6)
    3.141593
    """
    resultant = _resultant(_validate_angles(angles))
    if resultant.mean_resultant_length == 0:
        return 0.0
    x, y = resultant.mean_direction
    return float(wrap_angle(np.arctan2(y, x)))


def circular_confidence_interval(
    angles: NDArray[np.float64],
    percentiles: Sequence[float] = (2.5, 97.5),
) -> NDArray[np.float64]:
    """
    Percentile interval of angular samples, corrected for wrap-around.

    Each sample's deviation from the circular mean is wrapped into
    (-pi, pi], percentiles are taken on the deviations, and the mean is
    added back.

    Parameters
    ----------
    angles : array, shape (n,)
        Angular samples, e.g. bootstrap preferred directions.
    percentiles : sequence of float, default=(2.5, 97.5)
        Percentiles in [0, 100].

    Returns
    -------
    NDArray[np.float64], shape (len(percentiles),)
        Interval endpoints in radians. Endpoints are *not* re-wrapped, so the
        lower bound never exceeds the upper bound; they can extend past
        +/-pi when the mean lies near the boundary.

    Examples
    --------
    >>> import numpy as np
    >>> band = np.concatenate([np.linspace(3.0, np.pi, 50), np.linspace(-np.pi, -3.0, 50)])
    >>> low, high = circular_confidence_interval(band)
    >>> bool(high - low < 0.3)
    True
    """
    angles = _validate_angles(angles)
    center = circular_mean(angles)
    centered = wrap_angle(angles - center)
    return np.percentile(centered, percentiles, method=PERCENTILE_METHOD) + center


def linear_confidence_interval(
    values: NDArray[np.float64],
    percentiles: Sequence[float] = (2.5, 97.5),
) -> NDArray[np.float64]:
    """Plain percentile interval of non-angular samples."""
    values = np.asarray(values, dtype=np.float64).ravel()
    return np.percentile(values, percentiles, method=PERCENTILE_METHOD)
