"""Render measured output characteristics with their active-region fits.

Drawing goes through a small renderer interface so the analysis never touches
shared matplotlib state directly; :class:`MatplotlibRenderer` is the default
implementation.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Protocol, Tuple

import matplotlib.pyplot as plt
import numpy as np

from ..data_processing import Dataset
from ..stats.regression import FitResult
from .style import (
    MATH_LABELS,
    STYLE,
    clean_axis,
    color_for_base_current,
    marker_for_curve,
    save_figure_bundle,
    set_global_style,
)


class Renderer(Protocol):
    def draw_series(
        self, dataset: Dataset, label: str, color: str, marker: str = "o"
    ) -> Any: ...

    def draw_fit(
        self, fit: FitResult, x_range: Tuple[float, float], color: str
    ) -> Any: ...

    def add_legend_entry(self, handle: Any, label: str) -> None: ...


class MatplotlibRenderer:
    """Draw on one matplotlib axes and collect legend entries explicitly."""

    def __init__(self, ax=None, figsize: Tuple[float, float] = STYLE.FIGSIZE_SINGLE):
        if ax is None:
            self.fig, self.ax = plt.subplots(figsize=figsize)
        else:
            self.fig, self.ax = ax.figure, ax
        self.handles: List[Any] = []
        self.labels: List[str] = []

    def draw_series(
        self, dataset: Dataset, label: str, color: str, marker: str = "o"
    ) -> Any:
        return self.ax.errorbar(
            dataset.x,
            dataset.y,
            xerr=dataset.ex,
            yerr=dataset.ey,
            fmt=marker,
            color=color,
            ecolor=color,
            markersize=STYLE.MARKERSIZE,
            elinewidth=0.9,
            label=label,
            zorder=3,
        )

    def draw_fit(
        self, fit: FitResult, x_range: Tuple[float, float], color: str
    ) -> Any:
        xs = np.linspace(float(x_range[0]), float(x_range[1]), 200)
        (line,) = self.ax.plot(
            xs, fit.evaluate(xs), color=color, linewidth=STYLE.LINEWIDTH, zorder=4
        )
        return line

    def add_legend_entry(self, handle: Any, label: str) -> None:
        self.handles.append(handle)
        self.labels.append(label)

    def finalize(
        self,
        title: Optional[str] = None,
        xlim: Optional[Tuple[Optional[float], Optional[float]]] = None,
        ylim: Optional[Tuple[Optional[float], Optional[float]]] = None,
    ) -> None:
        self.ax.set_xlabel(MATH_LABELS["vce"])
        self.ax.set_ylabel(MATH_LABELS["ic"])
        if title:
            self.ax.set_title(title)
        if xlim is not None:
            self.ax.set_xlim(*xlim)
        if ylim is not None:
            self.ax.set_ylim(*ylim)
        clean_axis(self.ax)
        if self.handles:
            self.ax.legend(self.handles, self.labels, loc="upper left")

    def save(self, png_path: str) -> str:
        return save_figure_bundle(self.fig, png_path)

    def close(self) -> None:
        plt.close(self.fig)


def plot_output_characteristics(
    results: List[Dict],
    output_dir: str = "output",
    renderer: Optional[Renderer] = None,
    title: str = "BJT output characteristics",
    filename: str = "output_characteristics.png",
    xlim: Optional[Tuple[Optional[float], Optional[float]]] = (0.0, None),
    ylim: Optional[Tuple[Optional[float], Optional[float]]] = (0.0, None),
) -> Optional[str]:
    """Draw every curve, its fit over the fit domain, and legend entries.

    Args:
        results (list[dict]): Payloads from ``bjt.analysis.process_all_files``.
        output_dir (str, optional): Directory for the figure bundle.
        renderer (Renderer, optional): Injected drawing collaborator. When
            omitted a :class:`MatplotlibRenderer` is created, saved and closed.
        title (str, optional): Axes title.
        filename (str, optional): PNG file name inside ``output_dir``.
        xlim, ylim (tuple, optional): Axis limits; ``None`` in either slot
            keeps the autoscaled bound. Both axes start at zero by default.
            ``None`` leaves the axis fully autoscaled.

    Returns:
        str | None: PNG path when this function owns the renderer, else
        ``None`` (the caller saves its own renderer).
    """
    owns_renderer = renderer is None
    if owns_renderer:
        set_global_style()
        renderer = MatplotlibRenderer()

    for index, res in enumerate(results):
        dataset = res.get("data")
        if dataset is None or len(dataset) == 0:
            continue
        label = res.get("label") or f"curve {index + 1}"
        color = color_for_base_current(res.get("base_current_ma", np.nan), index)

        handle = renderer.draw_series(
            dataset, label, color, marker=marker_for_curve(index)
        )
        renderer.add_legend_entry(handle, label)

        fit = res.get("fit")
        if fit is not None:
            x_range = fit.domain or (float(np.min(dataset.x)), float(np.max(dataset.x)))
            fit_handle = renderer.draw_fit(fit, x_range, color)
            renderer.add_legend_entry(fit_handle, f"Fit {label}")

    if not owns_renderer:
        return None

    renderer.finalize(title=title, xlim=xlim, ylim=ylim)
    os.makedirs(output_dir, exist_ok=True)
    path = renderer.save(os.path.join(output_dir, filename))
    renderer.close()
    return path
