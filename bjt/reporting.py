"""Format and validate result tables for value ± uncertainty reporting.

This module is used after fitting to give every exported value the number of
decimals implied by its rounded uncertainty.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from .stats.uncertainty import round_uncertainty


def _round_uncertainty_sig(uncertainty: float) -> tuple[float, int]:
    """Round a positive uncertainty with :func:`round_uncertainty`.

    Args:
        uncertainty (float): Absolute uncertainty value.

    Returns:
        tuple[float, int]: Rounded uncertainty and decimal places used.

    Raises:
        ValueError: If uncertainty is non-finite or non-positive.
    """
    u = float(uncertainty)
    if not np.isfinite(u) or u <= 0:
        raise ValueError(f"Uncertainty must be finite and > 0, got {uncertainty!r}")

    rounded_u, ndigits = round_uncertainty(u)
    return float(rounded_u), int(max(0, ndigits))


def uncertainty_decimal_places(uncertainty: float) -> int:
    """Return decimal places implied by the rounded uncertainty.

    Args:
        uncertainty (float): Absolute uncertainty for a reported value.

    Returns:
        int: Number of decimal places that the paired value should use.
    """
    rounded_u, ndigits = _round_uncertainty_sig(uncertainty)
    if ndigits <= 0:
        return 0
    txt = f"{rounded_u:.12f}".rstrip("0")
    if "." not in txt:
        return 0
    return len(txt.split(".", 1)[1])


def format_value_to_uncertainty_decimals(value: float, uncertainty: float) -> str:
    """Format a value using decimal places implied by its uncertainty.

    A zero uncertainty (exact fit) falls back to six significant figures.
    """
    if float(uncertainty) == 0:
        return f"{float(value):.6g}"
    dp = uncertainty_decimal_places(uncertainty)
    return f"{float(value):.{dp}f}"


def uncertainty_forms(value: float, uncertainty: float) -> tuple[float, float]:
    """Return ``(fractional, percentage)`` uncertainty.

    Returns ``(nan, nan)`` when ``value`` is zero or either input is non-finite.
    """
    v = float(value)
    u = float(uncertainty)
    if not np.isfinite(v) or not np.isfinite(u) or v == 0:
        return np.nan, np.nan
    frac = abs(u / v)
    return float(frac), float(frac * 100.0)


def validate_uncertainty_columns(
    df: pd.DataFrame,
    value_uncertainty_pairs: Iterable[tuple[str, str]],
) -> None:
    """Check that every finite value has a finite, non-negative uncertainty.

    Raises:
        KeyError: If any value or uncertainty column is missing.
        ValueError: If a finite value is paired with a missing, non-finite or
            negative uncertainty.
    """
    for value_col, unc_col in value_uncertainty_pairs:
        if value_col not in df.columns:
            raise KeyError(f"Missing value column '{value_col}' for reporting format.")
        if unc_col not in df.columns:
            raise KeyError(
                f"Missing uncertainty column '{unc_col}' required for '{value_col}'."
            )

        values = pd.to_numeric(df[value_col], errors="coerce")
        uncs = pd.to_numeric(df[unc_col], errors="coerce")
        bad_mask = np.isfinite(values) & (~np.isfinite(uncs) | (uncs < 0))

        if bool(bad_mask.any()):
            bad_rows = list(df.index[bad_mask][:5])
            raise ValueError(
                "Uncertainty metadata missing/invalid for measured values in "
                f"'{value_col}' (uncertainty '{unc_col}'). "
                f"Example row indices: {bad_rows}."
            )


def add_formatted_reporting_columns(
    df: pd.DataFrame,
    value_uncertainty_pairs: Iterable[tuple[str, str]],
    suffix: str = " (reported)",
) -> pd.DataFrame:
    """Add string columns with values rounded to their uncertainties.

    Original numeric columns are kept; rows without a value get ``""``.
    """
    pairs = list(value_uncertainty_pairs)
    out = df.copy()
    validate_uncertainty_columns(out, pairs)

    for value_col, unc_col in pairs:
        values = pd.to_numeric(out[value_col], errors="coerce")
        uncs = pd.to_numeric(out[unc_col], errors="coerce")

        formatted_values = []
        formatted_uncs = []
        for v, u in zip(values, uncs):
            if not (np.isfinite(v) and np.isfinite(u)):
                formatted_values.append("")
                formatted_uncs.append("")
                continue
            formatted_values.append(format_value_to_uncertainty_decimals(v, u))
            if u > 0:
                formatted_uncs.append(
                    f"{_round_uncertainty_sig(u)[0]:.{uncertainty_decimal_places(u)}f}"
                )
            else:
                formatted_uncs.append("0")

        out[f"{value_col}{suffix}"] = formatted_values
        out[f"{unc_col}{suffix}"] = formatted_uncs

    return out


def add_uncertainty_form_columns(
    df: pd.DataFrame,
    value_uncertainty_pairs: Iterable[tuple[str, str]],
) -> pd.DataFrame:
    """Add fractional and percentage uncertainty columns for each pair."""
    pairs = list(value_uncertainty_pairs)
    out = df.copy()
    validate_uncertainty_columns(out, pairs)

    for value_col, unc_col in pairs:
        values = pd.to_numeric(out[value_col], errors="coerce")
        uncs = pd.to_numeric(out[unc_col], errors="coerce")
        forms = [uncertainty_forms(v, u) for v, u in zip(values, uncs)]
        out[f"{value_col} fractional uncertainty"] = [f for f, _ in forms]
        out[f"{value_col} percentage uncertainty (%)"] = [p for _, p in forms]

    return out
