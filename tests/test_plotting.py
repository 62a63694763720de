import os

import numpy as np

from bjt.analysis import analyze_characteristic
from bjt.config import AnalysisConfig
from bjt.data_processing import Dataset
from bjt.plotting import MatplotlibRenderer, plot_output_characteristics


def make_dummy_results():
    v = np.array([0.2, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5])
    results = []
    for base_ma, a, b in [(0.05, 5.0, 0.1), (0.1, 10.0, 0.2)]:
        ic = np.where(v < 1.0, 2.0 * v, a + b * v)
        ds = Dataset(
            x=v,
            y=ic,
            ex=np.full_like(v, 0.01),
            ey=np.full_like(v, 0.05),
            label=f"Ib={base_ma * 1000:g} µA",
        )
        results.append(analyze_characteristic(ds, base_ma, AnalysisConfig()))
    return results


class RecordingRenderer:
    def __init__(self):
        self.calls = []
        self.legend = []

    def draw_series(self, dataset, label, color, marker="o"):
        self.calls.append(("series", label, len(dataset)))
        return f"series:{label}"

    def draw_fit(self, fit, x_range, color):
        self.calls.append(("fit", tuple(x_range)))
        return "fit"

    def add_legend_entry(self, handle, label):
        self.legend.append(label)


def test_plot_output_characteristics(tmp_path):
    out = plot_output_characteristics(make_dummy_results(), output_dir=str(tmp_path))
    assert out.endswith("output_characteristics.png")
    assert os.path.exists(out)
    assert os.path.exists(os.path.join(str(tmp_path), "output_characteristics.pdf"))


def test_injected_renderer_receives_series_fits_and_legend():
    renderer = RecordingRenderer()
    out = plot_output_characteristics(make_dummy_results(), renderer=renderer)

    assert out is None
    assert renderer.legend == ["Ib=50 µA", "Fit Ib=50 µA", "Ib=100 µA", "Fit Ib=100 µA"]
    assert renderer.calls[0] == ("series", "Ib=50 µA", 8)
    assert renderer.calls[1] == ("fit", (1.0, 3.5))


def test_curves_without_fit_or_data_are_partially_drawn():
    results = make_dummy_results()
    results[0]["fit"] = None
    results[1]["data"] = None
    renderer = RecordingRenderer()

    plot_output_characteristics(results, renderer=renderer)

    assert renderer.legend == ["Ib=50 µA"]


def test_matplotlib_renderer_collects_legend_entries():
    renderer = MatplotlibRenderer()
    results = make_dummy_results()
    plot_output_characteristics(results, renderer=renderer)
    renderer.finalize(title="test")

    legend = renderer.ax.get_legend()
    assert [t.get_text() for t in legend.get_texts()] == renderer.labels
    assert len(renderer.labels) == 4
    renderer.close()


def test_axis_limits_are_forwarded_to_finalize(tmp_path, monkeypatch):
    seen = {}
    original = MatplotlibRenderer.finalize

    def _recording_finalize(self, **kwargs):
        seen.update(kwargs)
        original(self, **kwargs)
        seen["xlim_after"] = self.ax.get_xlim()
        seen["ylim_after"] = self.ax.get_ylim()

    monkeypatch.setattr(MatplotlibRenderer, "finalize", _recording_finalize)

    plot_output_characteristics(
        make_dummy_results(), output_dir=str(tmp_path), xlim=(0.0, 4.5), ylim=(0.0, 22.0)
    )
    assert seen["xlim"] == (0.0, 4.5)
    assert seen["xlim_after"] == (0.0, 4.5)
    assert seen["ylim_after"] == (0.0, 22.0)


def test_default_axes_start_at_zero(tmp_path, monkeypatch):
    seen = {}
    original = MatplotlibRenderer.finalize

    def _recording_finalize(self, **kwargs):
        original(self, **kwargs)
        seen["xlim"] = self.ax.get_xlim()
        seen["ylim"] = self.ax.get_ylim()

    monkeypatch.setattr(MatplotlibRenderer, "finalize", _recording_finalize)

    plot_output_characteristics(make_dummy_results(), output_dir=str(tmp_path))
    assert seen["xlim"][0] == 0.0
    assert seen["ylim"][0] == 0.0
    assert seen["xlim"][1] >= 3.5
