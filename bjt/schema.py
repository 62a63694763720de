"""Define standardized column names for result DataFrames."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ResultColumns:
    """Container for standardized column labels.

    These column names are used in the per-curve results table, the CSV
    export and the text report.

    Attributes:
        curve: Curve label, normally ``Ib=<value> µA``.
        base_current: Base current I_B in mA.
        a, sigma_a: Fitted intercept of I_C(V_CE) and its standard error (mA).
        b, sigma_b: Fitted slope and its standard error (mA/V), i.e. the
            output conductance from the direct fit.
        early_voltage, early_voltage_unc: x-intercept -a/b (V), propagated
            with first-order relative errors.
        early_voltage_swapped, early_voltage_swapped_unc: Intercept of the
            axis-swapped fit V_CE(I_C) (V).
        conductance, conductance_unc: Inverse slope of the swapped fit, in the
            configured conductance unit.
    """

    curve: str = "Curve"
    base_current: str = "Ib (mA)"
    n_points: str = "n (fit)"
    a: str = "a (mA)"
    sigma_a: str = "Uncertainty in a (mA)"
    b: str = "b (mA/V)"
    sigma_b: str = "Uncertainty in b (mA/V)"
    chi2: str = "chi2"
    ndf: str = "ndf"
    early_voltage: str = "Early Voltage (V)"
    early_voltage_unc: str = "Uncertainty in Early Voltage (V)"
    early_voltage_swapped: str = "Early Voltage, swapped fit (V)"
    early_voltage_swapped_unc: str = "Uncertainty in Early Voltage, swapped fit (V)"
    conductance: str = "Output Conductance"
    conductance_unc: str = "Uncertainty in Output Conductance"
    source_file: str = "Source File"
    errors: str = "Errors"


COLUMNS = ResultColumns()
