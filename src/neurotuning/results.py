"""Assembly of the preferred-direction result table.

One table is built per input signal, with one row per unit, and the tables
are concatenated column-wise. Column names are
``{prefix}{signal}_{suffix}``. The set of suffixes depends on whether the run
was bootstrapped:

| Suffix | Kind | Bootstrapped | Point estimate |
|--------|------|--------------|----------------|
| PD | circular | yes | yes |
| PDCI | circular | yes | no |
| Moddepth | linear | yes | yes |
| ModdepthCI | linear | yes | no |
| Tuned | logical | yes | no |
| bootstraps | circular | yes | no |

Column kinds are stored in ``DataFrame.attrs["column_kinds"]``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
import pandas as pd

from neurotuning.direction import SignalTuning

__all__ = [
    "BOOTSTRAP_COLUMNS",
    "POINT_COLUMNS",
    "build_result_table",
    "column_name",
]

# (suffix, kind, SignalTuning attribute)
POINT_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("PD", "circular", "pd"),
    ("Moddepth", "linear", "moddepth"),
)
BOOTSTRAP_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("PD", "circular", "pd"),
    ("PDCI", "circular", "pd_ci"),
    ("Moddepth", "linear", "moddepth"),
    ("ModdepthCI", "linear", "moddepth_ci"),
    ("Tuned", "logical", "tuned"),
    ("bootstraps", "circular", "bootstraps"),
)


def column_name(prefix: str, signal_name: str, suffix: str) -> str:
    """Result column name, e.g. ``column_name("M1_", "vel", "PD") == "M1_vel_PD"``."""
    return f"{prefix}{signal_name}_{suffix}"


def _column_values(rows: Sequence[SignalTuning], attr: str, kind: str) -> Any:
    values = [getattr(row, attr) for row in rows]
    if kind == "logical":
        return np.array(values, dtype=bool)
    if values and isinstance(values[0], np.ndarray):
        column = np.empty(len(values), dtype=object)
        for i, value in enumerate(values):
            column[i] = value
        return column
    return np.array(values, dtype=np.float64)


def build_result_table(
    unit_rows: Sequence[Sequence[SignalTuning]],
    signal_names: Sequence[str],
    *,
    prefix: str = "",
    bootstrapped: bool = True,
    index: Sequence[Any] | None = None,
) -> pd.DataFrame:
    """Assemble per-unit results into the result table.

    Parameters
    ----------
    unit_rows : sequence of sequence of SignalTuning
        ``unit_rows[u][i]`` is the tuning of unit ``u`` to input signal ``i``.
    signal_names : sequence of str
        Input signal names, in the same order as the inner sequences.
    prefix : str, default=""
        Normalized column-name prefix (already ending in ``_`` if non-empty).
    bootstrapped : bool, default=True
        Whether interval, significance and bootstrap columns are included.
    index : sequence, optional
        Unit labels. Defaults to unit position.

    Returns
    -------
    pandas.DataFrame
        One row per unit. CI columns hold length-2 arrays and the
        ``bootstraps`` column holds the per-draw directions.
    """
    spec = BOOTSTRAP_COLUMNS if bootstrapped else POINT_COLUMNS
    if index is None:
        row_index = pd.RangeIndex(len(unit_rows), name="unit")
    else:
        row_index = pd.Index(list(index), name="signalID")

    tables = []
    column_kinds: dict[str, str] = {}
    for signal_idx, signal_name in enumerate(signal_names):
        rows = [unit[signal_idx] for unit in unit_rows]
        data = {}
        for suffix, kind, attr in spec:
            name = column_name(prefix, signal_name, suffix)
            data[name] = _column_values(rows, attr, kind)
            column_kinds[name] = kind
        tables.append(pd.DataFrame(data, index=row_index))

    table = pd.concat(tables, axis=1)
    table.attrs["column_kinds"] = column_kinds
    return table
