"""Bootstrap and scramble resampling of row-aligned data.

Two ensembles are built per unit:

| Ensemble | Rows drawn | Covariates used | Null hypothesis |
|----------|-----------|-----------------|-----------------|
| **Bootstrap** | response and covariates jointly | resampled with the response | none; sampling distribution of the fit |
| **Scramble** | response alone | original, unresampled | no association between response and covariates |

The scramble ensemble resamples only the response column, which breaks the
pairing with the covariates. The one-sided resampling is intentional.

All functions accept an ``rng`` parameter for reproducible results.

Examples
--------
>>> import numpy as np
>>> from neurotuning.stats.resampling import bootstrap_fits
>>> data = np.arange(10.0).reshape(5, 2)
>>> fits = bootstrap_fits(lambda d: d.mean(axis=0), data, n_boots=3, rng=42)
>>> fits.shape
(3, 2)
"""

from __future__ import annotations

from collections.abc import Callable, Generator

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "bootstrap_fits",
    "bootstrap_rows",
    "scramble_fits",
]


def _ensure_rng(
    rng: np.random.Generator | int | None,
) -> np.random.Generator:
    """Convert rng parameter to a Generator instance.

    Parameters
    ----------
    rng : np.random.Generator | int | None
        Random number generator, seed, or None.

    Returns
    -------
    np.random.Generator
        A random number generator instance.
    """
    if rng is None:
        return np.random.default_rng()
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def bootstrap_rows(
    n_rows: int,
    *,
    n_boots: int = 1000,
    rng: np.random.Generator | int | None = None,
) -> Generator[NDArray[np.int64], None, None]:
    """Yield row indices drawn with replacement.

    Parameters
    ----------
    n_rows : int
        Number of rows in the data being resampled.
    n_boots : int, default=1000
        Number of draws.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

        - If Generator: Use directly
        - If int: Seed for ``np.random.default_rng()``
        - If None: Use default RNG (not reproducible)

    Yields
    ------
    NDArray[np.int64], shape (n_rows,)
        Indices of the rows in one bootstrap sample.
    """
    generator = _ensure_rng(rng)
    for _ in range(n_boots):
        yield generator.integers(0, n_rows, size=n_rows)


def bootstrap_fits(
    fit_func: Callable[[NDArray[np.float64]], NDArray[np.float64]],
    data: NDArray[np.float64],
    *,
    n_boots: int = 1000,
    rng: np.random.Generator | int | None = None,
) -> NDArray[np.float64]:
    """Apply ``fit_func`` to bootstrap resamples of the rows of ``data``.

    Whole rows are resampled, so the response and covariates in each row
    stay paired.

    Parameters
    ----------
    fit_func : callable
        Maps a resampled data matrix to a 1-D coefficient vector.
    data : NDArray[np.float64], shape (n_samples, n_columns)
        Per-unit dataset, e.g. ``[response | covariates]``.
    n_boots : int, default=1000
        Number of bootstrap draws.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

    Returns
    -------
    NDArray[np.float64], shape (n_boots, n_coef)
        One coefficient vector per draw, in draw order.
    """
    data = np.asarray(data)
    return np.vstack(
        [
            np.atleast_1d(fit_func(data[idx]))
            for idx in bootstrap_rows(len(data), n_boots=n_boots, rng=rng)
        ]
    )


def scramble_fits(
    fit_func: Callable[[NDArray[np.float64], NDArray[np.float64]], NDArray[np.float64]],
    response: NDArray[np.float64],
    covariates: NDArray[np.float64],
    *,
    n_boots: int = 1000,
    rng: np.random.Generator | int | None = None,
) -> NDArray[np.float64]:
    """Refit against the original covariates with the response resampled alone.

    Each draw resamples the response with replacement, independently of the
    covariates, and fits it against the unresampled ``covariates``. The
    resulting coefficients form a null distribution under no association.

    Parameters
    ----------
    fit_func : callable
        ``fit_func(response, covariates)`` returning a 1-D coefficient vector.
    response : NDArray[np.float64], shape (n_samples,)
        Response of one unit.
    covariates : NDArray[np.float64], shape (n_samples, n_covariates)
        Covariate matrix, never resampled.
    n_boots : int, default=1000
        Number of draws.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

    Returns
    -------
    NDArray[np.float64], shape (n_boots, n_coef)
        One coefficient vector per draw, in draw order.

    See Also
    --------
    bootstrap_fits : Joint resampling that preserves pairing.
    """
    response = np.asarray(response).ravel()
    return np.vstack(
        [
            np.atleast_1d(fit_func(response[idx], covariates))
            for idx in bootstrap_rows(len(response), n_boots=n_boots, rng=rng)
        ]
    )
