"""
BJT output-characteristic analysis.

This module analyzes I_C(V_CE) curves measured at fixed base currents to
estimate:
- The active-region line I_C = a + b * V_CE from a weighted least-squares fit
  (weights 1/sigma_I**2) restricted to [fit_min, fit_max].
- The Early voltage V_A = -a/b with first-order relative-error propagation.
- The axis-swapped fit V_CE = a' + b' * I_C, giving V_A directly (a') and the
  output conductance 1/b'.
- The current gain beta = |Delta I_C| / Delta I_B between consecutive curves,
  evaluated on the fitted lines at a common V_CE.

Every curve is processed independently: a load, fit or derivation failure is
logged and recorded on that curve's result, and the remaining curves carry on.
"""

from __future__ import annotations

import logging
import math
import os
import sys
from dataclasses import asdict
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

import numpy as np
import pandas as pd

from .config import AnalysisConfig, DatasetSpec
from .data_processing import Dataset, filter_range, load
from .device.early import (
    derive_intercept_ratio,
    early_voltage_from_swapped,
    fit_swapped,
    output_conductance,
)
from .device.gain import compute_gain_between_fits, gain_uncertainty
from .errors import DivideByZeroError, InsufficientDataError, MalformedRecordError
from .schema import COLUMNS
from .stats.regression import fit_linear
from .stats.uncertainty import format_value_with_uncertainty


def analyze_characteristic(
    dataset: Dataset,
    base_current_ma: float,
    config: Optional[AnalysisConfig] = None,
) -> Dict:
    """Fit one output curve and derive its figures of merit.

    Args:
        dataset (Dataset): Samples ``(V_CE, I_C, sigma_V, sigma_I)``.
        base_current_ma (float): Base current of the curve in mA.
        config (AnalysisConfig, optional): Fit domain and options.

    Returns:
        dict: Result payload with keys ``label``, ``base_current_ma``,
        ``data``, ``fit_data``, ``fit``, ``early_voltage``, ``swapped_fit``,
        ``early_voltage_swapped``, ``conductance`` and ``errors``. Quantities
        that could not be computed are ``None`` and the reason is stored in
        ``errors`` under the stage name.
    """
    config = config or AnalysisConfig()
    fit_min, fit_max = config.fit_range
    label = dataset.label

    result: Dict = {
        "label": label,
        "base_current_ma": float(base_current_ma),
        "data": dataset,
        "fit_data": filter_range(dataset, fit_min, fit_max),
        "fit": None,
        "early_voltage": None,
        "swapped_fit": None,
        "early_voltage_swapped": None,
        "conductance": None,
        "errors": {},
    }

    try:
        fit = fit_linear(
            result["fit_data"],
            absolute_sigma=config.absolute_sigma,
            domain=config.fit_range,
        )
        result["fit"] = fit
        logging.info(
            "%s: a = %.6g +/- %.3g, b = %.6g +/- %.3g (n=%d, chi2/ndf=%.3g)",
            label,
            fit.a,
            fit.sigma_a,
            fit.b,
            fit.sigma_b,
            fit.n,
            fit.reduced_chi2,
        )
    except InsufficientDataError as e:
        logging.warning("%s: fit skipped: %s", label, e)
        result["errors"]["fit"] = str(e)

    if result["fit"] is not None:
        try:
            result["early_voltage"] = derive_intercept_ratio(result["fit"])
        except DivideByZeroError as e:
            logging.warning("%s: Early voltage undefined: %s", label, e)
            result["errors"]["early_voltage"] = str(e)

    try:
        swapped = fit_swapped(
            dataset,
            fit_min,
            fit_max,
            fit_func=fit_linear,
            absolute_sigma=config.absolute_sigma,
        )
        result["swapped_fit"] = swapped
    except InsufficientDataError as e:
        logging.warning("%s: swapped fit skipped: %s", label, e)
        result["errors"]["swapped_fit"] = str(e)

    if result["swapped_fit"] is not None:
        result["early_voltage_swapped"] = early_voltage_from_swapped(
            result["swapped_fit"]
        )
        try:
            result["conductance"] = output_conductance(
                result["swapped_fit"],
                scale=config.conductance_scale,
                unit=config.conductance_unit,
            )
        except DivideByZeroError as e:
            logging.warning("%s: output conductance undefined: %s", label, e)
            result["errors"]["conductance"] = str(e)

    return result


def _failed_result(spec: DatasetSpec, stage: str, message: str) -> Dict:
    return {
        "label": spec.display_label,
        "base_current_ma": float(spec.base_current_ma),
        "data": None,
        "fit_data": None,
        "fit": None,
        "early_voltage": None,
        "swapped_fit": None,
        "early_voltage_swapped": None,
        "conductance": None,
        "errors": {stage: message},
        "source_file": os.path.basename(spec.path),
    }


def process_all_files(
    dataset_specs: Sequence[DatasetSpec], config: Optional[AnalysisConfig] = None
) -> List[Dict]:
    """Load and analyze every configured curve, isolating failures per curve."""
    config = config or AnalysisConfig()
    results = []

    for spec in dataset_specs:
        logging.info(
            "Processing %s (%s, Ib = %g mA)",
            spec.path,
            spec.display_label,
            spec.base_current_ma,
        )
        try:
            dataset = load(
                spec.path, on_malformed=config.on_malformed, label=spec.display_label
            )
        except (MalformedRecordError, OSError) as e:
            logging.error("Error loading %s: %s", spec.path, e)
            results.append(_failed_result(spec, "load", str(e)))
            continue

        if len(dataset) == 0:
            logging.warning("%s contains no valid samples", spec.path)

        analysis = analyze_characteristic(dataset, spec.base_current_ma, config)
        analysis["source_file"] = os.path.basename(spec.path)
        results.append(analysis)

    return results


def compute_gains(results: List[Dict], v_eval: float) -> List[Dict]:
    """Current gain between each consecutive pair of fitted curves.

    Curves are ordered by base current; curves without a fit are left out.
    """
    fitted = sorted(
        (r for r in results if r.get("fit") is not None),
        key=lambda r: r["base_current_ma"],
    )

    gains = []
    for low, high in zip(fitted[:-1], fitted[1:]):
        try:
            beta = compute_gain_between_fits(
                low["fit"],
                high["fit"],
                v_eval,
                low["base_current_ma"],
                high["base_current_ma"],
            )
            beta_unc = gain_uncertainty(
                low["fit"],
                high["fit"],
                v_eval,
                low["base_current_ma"],
                high["base_current_ma"],
            )
        except DivideByZeroError as e:
            logging.warning(
                "Gain between '%s' and '%s' skipped: %s", low["label"], high["label"], e
            )
            continue

        gains.append(
            {
                "low": low["label"],
                "high": high["label"],
                "v_eval": float(v_eval),
                "base_low_ma": low["base_current_ma"],
                "base_high_ma": high["base_current_ma"],
                "ic_low_ma": float(low["fit"].evaluate(v_eval)),
                "ic_high_ma": float(high["fit"].evaluate(v_eval)),
                "delta_ic_ma": float(
                    abs(high["fit"].evaluate(v_eval) - low["fit"].evaluate(v_eval))
                ),
                "delta_ib_ma": float(high["base_current_ma"] - low["base_current_ma"]),
                "beta": beta,
                "beta_uncertainty": beta_unc,
            }
        )
    return gains


def _value_unc(quantity) -> Tuple[float, float]:
    if quantity is None:
        return np.nan, np.nan
    return float(quantity.value), float(quantity.uncertainty)


def create_results_dataframe(results: List[Dict]) -> pd.DataFrame:
    rows = []
    for res in results:
        fit = res.get("fit")
        va, va_unc = _value_unc(res.get("early_voltage"))
        va_sw, va_sw_unc = _value_unc(res.get("early_voltage_swapped"))
        go, go_unc = _value_unc(res.get("conductance"))
        rows.append(
            {
                COLUMNS.curve: res.get("label"),
                COLUMNS.base_current: res.get("base_current_ma", np.nan),
                COLUMNS.n_points: fit.n if fit is not None else 0,
                COLUMNS.a: fit.a if fit is not None else np.nan,
                COLUMNS.sigma_a: fit.sigma_a if fit is not None else np.nan,
                COLUMNS.b: fit.b if fit is not None else np.nan,
                COLUMNS.sigma_b: fit.sigma_b if fit is not None else np.nan,
                COLUMNS.chi2: fit.chi2 if fit is not None else np.nan,
                COLUMNS.ndf: fit.ndf if fit is not None else np.nan,
                COLUMNS.early_voltage: va,
                COLUMNS.early_voltage_unc: va_unc,
                COLUMNS.early_voltage_swapped: va_sw,
                COLUMNS.early_voltage_swapped_unc: va_sw_unc,
                COLUMNS.conductance: go,
                COLUMNS.conductance_unc: go_unc,
                COLUMNS.source_file: res.get("source_file", ""),
                COLUMNS.errors: "; ".join(
                    f"{k}: {v}" for k, v in res.get("errors", {}).items()
                ),
            }
        )
    return pd.DataFrame(rows, columns=list(asdict(COLUMNS).values()))


def _fmt(quantity) -> str:
    if quantity is None:
        return "(not available)"
    return format_value_with_uncertainty(
        quantity.value, quantity.uncertainty, quantity.unit
    )


def print_report(
    results: List[Dict], gains: List[Dict], stream: Optional[TextIO] = None
) -> None:
    stream = stream or sys.stdout

    def emit(line: str = "") -> None:
        print(line, file=stream)

    for res in results:
        emit(f"\n--- Fit results {res['label']} ---")
        fit = res.get("fit")
        if fit is not None:
            emit(
                f"Fit parameters: a = {fit.a:.6g} +/- {fit.sigma_a:.3g}, "
                f"b = {fit.b:.6g} +/- {fit.sigma_b:.3g}"
            )
            emit(
                f"n = {fit.n}, chi2/ndf = {fit.chi2:.4g}/{fit.ndf}, "
                f"prob = {fit.probability:.3g}"
            )
        emit(f"V_A: {_fmt(res.get('early_voltage'))}")
        emit(f"V_A (swapped fit): {_fmt(res.get('early_voltage_swapped'))}")
        emit(f"Output conductance: {_fmt(res.get('conductance'))}")
        for stage, message in res.get("errors", {}).items():
            emit(f"  [{stage}] {message}")

    for g in gains:
        emit("\n=============================================")
        emit(f" Current gain (beta) at Vce = {g['v_eval']:g} V")
        emit("=============================================")
        emit(f"Ic (fit) @ {g['high']}: {g['ic_high_ma']:.6g} mA")
        emit(f"Ic (fit) @ {g['low']}: {g['ic_low_ma']:.6g} mA")
        emit(f"Delta Ic:         {g['delta_ic_ma']:.6g} mA")
        emit(f"Delta Ib:         {g['delta_ib_ma']:.6g} mA")
        emit("---------------------------------------------")
        emit(f"BETA = {g['beta']:.6g}")
        if math.isfinite(g["beta_uncertainty"]):
            emit(
                "BETA (propagated) = "
                + format_value_with_uncertainty(g["beta"], g["beta_uncertainty"])
            )
        emit("=============================================")
