"""Input validation for preferred-direction estimation.

This module checks the configuration of a tuning run before any fitting
starts, so that malformed selectors or labels fail fast with an actionable
message instead of producing malformed result rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from neurotuning.signals import SignalSelector

logger = logging.getLogger("neurotuning.validation")


class ConfigurationError(ValueError):
    """Raised when a tuning run is configured inconsistently.

    Covers a missing output-signal selector, input signals that do not
    resolve to exactly two covariate columns, unknown signal names, and
    invalid option values. Always raised before any GLM is fit.

    See Also
    --------
    validate_in_signals : Two-column check for covariate selectors.
    """

    pass


def validate_out_signals(out_signals: Any) -> None:
    """Ensure an output signal was provided.

    Parameters
    ----------
    out_signals : Any
        Output-signal selector specification.

    Raises
    ------
    ConfigurationError
        If ``out_signals`` is None or empty.
    """
    if out_signals is None or (
        isinstance(out_signals, (str, Sequence)) and len(out_signals) == 0
    ):
        raise ConfigurationError(
            "Need to provide output signal.\n"
            "Fix: Pass out_signals, e.g. out_signals='S1_spikes'."
        )


def validate_in_signals(selectors: Sequence[SignalSelector]) -> None:
    """Ensure every input signal resolves to exactly two covariate columns.

    Parameters
    ----------
    selectors : sequence of SignalSelector
        Resolved input-signal selectors.

    Raises
    ------
    ConfigurationError
        If there are no input signals, or any selector does not have exactly
        two columns.

    Examples
    --------
    >>> from neurotuning.signals import SignalSelector
    >>> validate_in_signals([SignalSelector("vel", (0, 1))])
    >>> validate_in_signals([SignalSelector("vel", (0, 1, 2))])  # doctest: +SKIP
    Traceback (most recent call last):
        ...
    neurotuning.validation.ConfigurationError: Each input signal must ...
    """
    if len(selectors) == 0:
        raise ConfigurationError(
            "No input signals given.\n"
            "Fix: Pass in_signals, e.g. in_signals='vel' or ('vel', [0, 1])."
        )

    bad = [sel for sel in selectors if sel.n_columns != 2]
    if bad:
        details = ", ".join(f"{sel.name!r} ({sel.n_columns} columns)" for sel in bad)
        raise ConfigurationError(
            f"Each input signal must refer to exactly two covariate columns. "
            f"Got: {details}.\n"
            f"Fix: Select two columns explicitly, e.g. ('{bad[0].name}', [0, 1])."
        )


def validate_out_signal_names(
    out_signal_names: Sequence[Any] | None, n_units: int
) -> list[Any] | None:
    """Check that optional unit labels line up with the response columns."""
    if out_signal_names is None:
        return None
    names = list(out_signal_names)
    if len(names) != n_units:
        raise ConfigurationError(
            f"out_signal_names has {len(names)} entries but the output signal "
            f"has {n_units} columns.\n"
            f"Fix: Provide one name per unit or leave out_signal_names unset."
        )
    return names


def normalize_prefix(prefix: str | None) -> str:
    """Append the ``_`` separator to a non-empty column-name prefix.

    Examples
    --------
    >>> normalize_prefix("")
    ''
    >>> normalize_prefix("M1")
    'M1_'
    >>> normalize_prefix("M1_")
    'M1_'
    """
    if not prefix:
        return ""
    if not prefix.endswith("_"):
        return prefix + "_"
    return prefix


def use_bootstrap(boot_for_tuning: bool, num_boots: int) -> bool:
    """Decide whether a run is bootstrapped.

    Fewer than two bootstrap draws cannot support confidence intervals or a
    null distribution, so the run falls back to point estimates. This is a
    silent downgrade, not an error.

    Parameters
    ----------
    boot_for_tuning : bool
        Whether bootstrapping was requested.
    num_boots : int
        Configured number of bootstrap draws.

    Returns
    -------
    bool
        True if bootstrap and scramble ensembles should be computed.
    """
    if num_boots < 2:
        if boot_for_tuning:
            logger.debug(
                "num_boots=%d < 2; falling back to point estimates", num_boots
            )
        return False
    return bool(boot_for_tuning)
