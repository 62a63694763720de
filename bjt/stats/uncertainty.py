"""
First-order uncertainty propagation and reporting helpers for fitted quantities.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from ..errors import DivideByZeroError


@dataclass(frozen=True)
class DerivedQuantity:
    value: float
    uncertainty: float = math.nan
    unit: str = ""

    def __iter__(self):
        # Unpacks as ``value, error``.
        yield self.value
        yield self.uncertainty

    def __str__(self) -> str:
        return format_value_with_uncertainty(self.value, self.uncertainty, self.unit)


def relative_quadrature(*terms: Tuple[float, float]) -> float:
    """
    Combine relative uncertainties in quadrature.

    Each term is ``(value, uncertainty)``; the result is
    sqrt(sum((u/v)**2)).
    """
    total = 0.0
    for value, unc in terms:
        value = float(value)
        if value == 0:
            raise DivideByZeroError(
                f"Relative uncertainty undefined for zero value (u={unc})."
            )
        total += (float(unc) / value) ** 2
    return float(math.sqrt(total))


def ratio(
    numerator: float,
    numerator_unc: float,
    denominator: float,
    denominator_unc: float,
    unit: str = "",
) -> DerivedQuantity:
    """Quadrature propagation for ``numerator / denominator``."""
    if float(denominator) == 0:
        raise DivideByZeroError("Ratio denominator is zero.")
    value = float(numerator) / float(denominator)
    rel = relative_quadrature(
        (numerator, numerator_unc), (denominator, denominator_unc)
    )
    return DerivedQuantity(value=value, uncertainty=abs(value) * rel, unit=unit)


def inverse(
    value: float, uncertainty: float, scale: float = 1.0, unit: str = ""
) -> DerivedQuantity:
    """
    Propagate ``scale / value``.

    ``scale`` is treated as exact (a unit conversion), so the error is
    |scale| * u / value**2.
    """
    value = float(value)
    if value == 0:
        raise DivideByZeroError("Cannot invert a zero value.")
    out = float(scale) / value
    unc = abs(float(scale)) * abs(float(uncertainty)) / value**2
    return DerivedQuantity(value=out, uncertainty=float(unc), unit=unit)


def quadrature_sum(*uncertainties: float) -> float:
    return float(math.sqrt(sum(float(u) ** 2 for u in uncertainties)))


def round_uncertainty(u: float) -> Tuple[float, int]:
    """Round to 1 significant figure (2 if the leading digit is 1).

    Returns the rounded value and the ``round`` digits used; non-positive or
    non-finite input is returned unchanged with 0 digits.
    """
    if u <= 0 or not math.isfinite(u):
        return u, 0

    u = abs(float(u))
    exponent = math.floor(math.log10(u))
    leading = u / (10**exponent)

    sig_figs = 2 if 1.0 <= leading < 2.0 else 1
    ndigits = sig_figs - 1 - exponent

    ru = round(u, ndigits)

    if ru == 0:
        ndigits = sig_figs - exponent
        ru = round(u, ndigits)

    return float(ru), int(ndigits)


def round_value_to_uncertainty(value: float, uncertainty: float) -> Tuple[float, float]:
    """
    Round a value and uncertainty for reporting:
    - uncertainty to 1 s.f. (2 if leading digit is 1)
    - value rounded to the same decimal place
    """
    ru, ndigits = round_uncertainty(abs(float(uncertainty)))
    if not math.isfinite(ru) or ru == 0:
        return float(value), float(uncertainty)
    return float(round(float(value), ndigits)), float(ru)


def _format_number_with_rounding(x: float, ndigits: int) -> str:
    xr = round(float(x), ndigits)
    if ndigits > 0:
        return f"{xr:.{ndigits}f}"
    return f"{xr:.0f}"


def format_value_with_uncertainty(
    value: float, uncertainty: float, unit: str = ""
) -> str:
    ru, ndigits = round_uncertainty(abs(float(uncertainty)))
    if ru == 0 or not math.isfinite(ru):
        v = f"{value:.6g}"
        if not math.isfinite(float(uncertainty)):
            return f"{v} {unit}".strip()
        u = f"{uncertainty:.6g}"
        return f"{v} ± {u} {unit}".strip()

    v_str = _format_number_with_rounding(value, ndigits)
    u_str = _format_number_with_rounding(ru, ndigits)
    return f"{v_str} ± {u_str} {unit}".strip()
