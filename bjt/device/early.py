"""Extract the Early voltage and output conductance from active-region fits.

Experimental Context:
    In the active region the collector current of a BJT rises almost linearly
    with V_CE:

        I_C = a + b * V_CE

    Extrapolating that line back to I_C = 0 gives the Early voltage,
    V_A = -a / b. The slope b is the output conductance g_o = dI_C/dV_CE.

Axis-Swapped Fit:
    Fitting V_CE = a' + b' * I_C instead weights each point by the V_CE
    uncertainty. Then a' is the Early voltage read directly (V_CE at I_C = 0)
    and 1/b' is the output conductance.
"""

from __future__ import annotations

from typing import Callable

from ..data_processing import Dataset, filter_range
from ..stats.regression import FitResult, fit_linear
from ..stats.uncertainty import DerivedQuantity, inverse, ratio
from ..units import US_PER_MS


def derive_intercept_ratio(fit: FitResult, unit: str = "V") -> DerivedQuantity:
    """Return the x-intercept ``-a/b`` of a fitted line with its uncertainty.

    Args:
        fit (FitResult): Line ``y = a + b*x``.
        unit (str, optional): Unit attached to the result. Defaults to ``"V"``.

    Returns:
        DerivedQuantity: ``value = -a/b`` and
        ``uncertainty = |value| * sqrt((sa/a)**2 + (sb/b)**2)``.

    Raises:
        DivideByZeroError: If ``b`` is zero, or ``a`` is zero (relative
            uncertainty undefined).

    Note:
        The first-order formula ignores the a-b covariance; it is the
        propagation used for the reported V_A.
    """
    return ratio(-fit.a, fit.sigma_a, fit.b, fit.sigma_b, unit=unit)


def derive_inverse_slope(
    fit: FitResult, scale: float = 1.0, unit: str = ""
) -> DerivedQuantity:
    """Return ``scale / b`` with uncertainty ``|scale| * sb / b**2``.

    ``scale`` is an exact unit conversion and adds no uncertainty.

    Raises:
        DivideByZeroError: If ``b`` is zero.
    """
    return inverse(fit.b, fit.sigma_b, scale=scale, unit=unit)


def fit_swapped(
    dataset: Dataset,
    low_x: float,
    high_x: float,
    fit_func: Callable[..., FitResult] = fit_linear,
    **fit_kwargs,
) -> FitResult:
    """Fit ``x = a' + b'*y`` over the original-x domain ``[low_x, high_x]``.

    Args:
        dataset (Dataset): Output characteristic with V_CE as ``x``.
        low_x (float): Lower bound of the domain on the original x axis.
        high_x (float): Upper bound of the domain on the original x axis.
        fit_func (callable, optional): Fitting routine applied to the swapped
            dataset. Defaults to :func:`fit_linear`.
        **fit_kwargs: Passed through to ``fit_func``.

    Returns:
        FitResult: Parameters of the swapped line, weighted by ``1/ex**2``.
        Its ``domain`` is in swapped-axis units: the extent of the selected
        y values (I_C), not ``(low_x, high_x)``.

    Raises:
        InsufficientDataError: If fewer than two points remain in the domain.
    """
    selected = filter_range(dataset, low_x, high_x)
    return fit_func(selected.swapped(), **fit_kwargs)


def early_voltage_from_swapped(fit: FitResult, unit: str = "V") -> DerivedQuantity:
    """Early voltage from a swapped fit: the intercept ``a'`` (x at y = 0)."""
    return DerivedQuantity(value=fit.a, uncertainty=fit.sigma_a, unit=unit)


def output_conductance(
    fit: FitResult, scale: float = US_PER_MS, unit: str = "µS"
) -> DerivedQuantity:
    """Output conductance ``1/b'`` of a swapped fit.

    With V_CE in V and I_C in mA, ``1/b'`` is in mS; the default scale
    reports it in µS.
    """
    return derive_inverse_slope(fit, scale=scale, unit=unit)
