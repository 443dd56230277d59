"""
Statistical methods.

Submodules
----------
circular : Circular mean and wrap-corrected percentile intervals
resampling : Bootstrap and scramble resampling of row-aligned data

Imports
-------
>>> from neurotuning.stats import circular_mean, circular_confidence_interval
>>> from neurotuning.stats import bootstrap_fits, scramble_fits
"""

from neurotuning.stats.circular import (
    circular_confidence_interval,
    circular_mean,
    linear_confidence_interval,
    mean_resultant_length,
    wrap_angle,
)
from neurotuning.stats.resampling import (
    bootstrap_fits,
    bootstrap_rows,
    scramble_fits,
)

__all__ = [  # noqa: RUF022
    # Circular statistics
    "circular_mean",
    "mean_resultant_length",
    "circular_confidence_interval",
    "linear_confidence_interval",
    "wrap_angle",
    # Resampling
    "bootstrap_rows",
    "bootstrap_fits",
    "scramble_fits",
]
