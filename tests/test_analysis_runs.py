import io
import logging

import numpy as np
import pytest

from bjt.analysis import (
    analyze_characteristic,
    compute_gains,
    create_results_dataframe,
    print_report,
    process_all_files,
)
from bjt.config import AnalysisConfig, DatasetSpec
from bjt.data_processing import Dataset
from bjt.schema import COLUMNS

# Active-region lines I_C = a + b * V_CE (mA) with two saturation points below
# the fit domain.
ACTIVE_V = np.arange(1.0, 3.51, 0.25)
SATURATION = [(0.1, 0.5), (0.3, 2.0)]


def _write_curve(path, a, b):
    lines = ["# Vce(V) Ic(mA) sVce sIc"]
    for v, i in SATURATION:
        lines.append(f"{v} {i} 0.01 0.05")
    for v in ACTIVE_V:
        lines.append(f"{v:.2f} {a + b * v:.6f} 0.01 0.05")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def _specs(tmp_path):
    return [
        DatasetSpec(_write_curve(tmp_path / "100.txt", 10.0, 0.2), 0.1),
        DatasetSpec(_write_curve(tmp_path / "50.txt", 5.0, 0.1), 0.05),
    ]


def test_process_all_files_fits_each_curve(tmp_path):
    results = process_all_files(_specs(tmp_path), AnalysisConfig())

    assert [r["label"] for r in results] == ["Ib=100 µA", "Ib=50 µA"]
    for res, (a, b) in zip(results, [(10.0, 0.2), (5.0, 0.1)]):
        assert res["errors"] == {}
        assert res["fit"].a == pytest.approx(a, abs=1e-5)
        assert res["fit"].b == pytest.approx(b, abs=1e-5)
        assert res["fit"].n == len(ACTIVE_V)
        assert res["fit"].domain == (1.0, 3.5)
        assert len(res["fit_data"]) == len(ACTIVE_V)
        assert len(res["data"]) == len(ACTIVE_V) + len(SATURATION)
        assert res["early_voltage"].value == pytest.approx(-50.0, rel=1e-4)
        assert res["early_voltage_swapped"].value == pytest.approx(-50.0, rel=1e-4)
        assert res["conductance"].value == pytest.approx(1000.0 * b, rel=1e-4)
        assert res["conductance"].unit == "µS"


def test_compute_gains_orders_by_base_current(tmp_path):
    results = process_all_files(_specs(tmp_path), AnalysisConfig())
    gains = compute_gains(results, 3.0)

    assert len(gains) == 1
    gain = gains[0]
    assert (gain["low"], gain["high"]) == ("Ib=50 µA", "Ib=100 µA")
    assert gain["ic_low_ma"] == pytest.approx(5.3, abs=1e-5)
    assert gain["ic_high_ma"] == pytest.approx(10.6, abs=1e-5)
    assert gain["delta_ib_ma"] == pytest.approx(0.05)
    # (10.6 - 5.3) / 0.05
    assert gain["beta"] == pytest.approx(106.0, rel=1e-4)
    assert gain["beta_uncertainty"] >= 0.0


def test_missing_file_is_recorded_and_siblings_continue(tmp_path, caplog):
    caplog.set_level(logging.ERROR)
    specs = _specs(tmp_path) + [DatasetSpec(str(tmp_path / "missing.txt"), 0.2)]

    results = process_all_files(specs, AnalysisConfig())

    assert "load" in results[2]["errors"]
    assert results[2]["fit"] is None
    assert results[0]["fit"] is not None and results[1]["fit"] is not None
    assert any("Error loading" in rec.message for rec in caplog.records)
    assert len(compute_gains(results, 3.0)) == 1


def test_malformed_file_fails_only_that_curve(tmp_path):
    bad = tmp_path / "bad.txt"
    bad.write_text("1.0 5.1 0.01 0.05\n2.0 oops 0.01 0.05\n", encoding="utf-8")
    specs = _specs(tmp_path) + [DatasetSpec(str(bad), 0.2)]

    results = process_all_files(specs, AnalysisConfig())
    assert "Line 2" in results[2]["errors"]["load"]

    skipped = process_all_files(specs, AnalysisConfig(on_malformed="skip"))
    assert "load" not in skipped[2]["errors"]
    assert "fit" in skipped[2]["errors"]


def test_curve_without_active_points_records_fit_errors(caplog):
    caplog.set_level(logging.WARNING)
    ds = Dataset(
        x=[0.1, 0.3], y=[0.5, 2.0], ex=[0.01, 0.01], ey=[0.05, 0.05], label="sat"
    )

    res = analyze_characteristic(ds, 0.05, AnalysisConfig())

    assert res["fit"] is None and res["swapped_fit"] is None
    assert set(res["errors"]) == {"fit", "swapped_fit"}
    assert res["early_voltage"] is None and res["conductance"] is None
    assert any("fit skipped" in rec.message for rec in caplog.records)


def test_flat_curve_reports_undefined_early_voltage():
    v = np.array([1.0, 2.0, 3.0])
    ds = Dataset(
        x=v, y=[5.0] * 3, ex=[0.01] * 3, ey=[0.05] * 3, label="flat"
    )
    res = analyze_characteristic(ds, 0.05, AnalysisConfig(fit_min=1.0, fit_max=3.0))

    assert res["fit"].b == pytest.approx(0.0, abs=1e-12)
    assert "early_voltage" in res["errors"]


def test_results_dataframe_and_report(tmp_path):
    specs = _specs(tmp_path) + [DatasetSpec(str(tmp_path / "missing.txt"), 0.2)]
    results = process_all_files(specs, AnalysisConfig())
    gains = compute_gains(results, 3.0)

    df = create_results_dataframe(results)
    assert list(df.columns)[:3] == [COLUMNS.curve, COLUMNS.base_current, COLUMNS.n_points]
    assert df.loc[0, COLUMNS.source_file] == "100.txt"
    assert df.loc[1, COLUMNS.early_voltage] == pytest.approx(-50.0, rel=1e-4)
    assert np.isnan(df.loc[2, COLUMNS.early_voltage])
    assert df.loc[2, COLUMNS.errors].startswith("load:")

    buffer = io.StringIO()
    print_report(results, gains, stream=buffer)
    text = buffer.getvalue()
    assert "--- Fit results Ib=50 µA ---" in text
    assert "V_A:" in text
    assert "Output conductance:" in text
    assert "BETA =" in text
    assert "(not available)" in text
