"""Centralized plotting style, labels, colours and save helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

from ..units import ma_to_ua

OUTPUT_FORMATS: tuple[str, ...] = ("png", "pdf", "svg")
FIGURE_DPI = 300
_STYLE_STATE = {"initialized": False}


@dataclass(frozen=True)
class StyleConfig:
    BASE_FONTSIZE: float = 12.0
    TITLE_FONTSIZE: float = 14.0
    LABEL_FONTSIZE: float = 12.0
    TICK_FONTSIZE: float = 11.0
    LEGEND_FONTSIZE: float = 11.0
    LINEWIDTH: float = 2.0
    LINEWIDTH_THIN: float = 1.2
    MARKERSIZE: float = 5.0
    GRID_ALPHA: float = 0.20
    FIGSIZE_SINGLE: tuple[float, float] = (8.0, 6.0)


STYLE = StyleConfig()

# Keyed by base current in µA.
BASE_CURRENT_COLOR_MAP = {
    50: "#1f4e9c",
    100: "#c0392b",
    200: "#7b3294",
}
FALLBACK_COLORS = ("#1b9e77", "#d95f02", "#4A4A4A", "#e7298a")
CURVE_MARKERS = ("o", "s", "^", "D", "v")

MATH_LABELS = {
    "vce": r"$|V_{\mathrm{CE}}|\ /\ \mathrm{V}$",
    "ic": r"$|I_{\mathrm{C}}|\ /\ \mathrm{mA}$",
}


def apply_global_style(font_scale: float = 1.0) -> None:
    """Apply the serif publication style to matplotlib ``rcParams``."""
    scale = float(font_scale)
    plt.rcParams.update(
        {
            "font.family": "STIXGeneral",
            "font.size": STYLE.BASE_FONTSIZE * scale,
            "axes.titlesize": STYLE.TITLE_FONTSIZE * scale,
            "axes.labelsize": STYLE.LABEL_FONTSIZE * scale,
            "xtick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "ytick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "legend.fontsize": STYLE.LEGEND_FONTSIZE * scale,
            "mathtext.fontset": "stix",
            "mathtext.default": "regular",
            "axes.linewidth": STYLE.LINEWIDTH_THIN,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "grid.alpha": STYLE.GRID_ALPHA,
            "grid.linestyle": ":",
            "grid.linewidth": 0.7,
            "legend.frameon": False,
            "lines.linewidth": STYLE.LINEWIDTH,
            "lines.markersize": STYLE.MARKERSIZE,
            "errorbar.capsize": 2.5,
            "savefig.dpi": FIGURE_DPI,
        }
    )


def set_global_style() -> None:
    """Apply global plotting style once per process."""
    if not _STYLE_STATE["initialized"]:
        apply_global_style()
        _STYLE_STATE["initialized"] = True


def color_for_base_current(base_current_ma: float, index: int = 0) -> str:
    """Return a stable colour for one base-current level."""
    current_ua = ma_to_ua(base_current_ma)
    key = int(np.round(current_ua)) if np.isfinite(current_ua) else None
    if key in BASE_CURRENT_COLOR_MAP:
        return BASE_CURRENT_COLOR_MAP[key]
    return FALLBACK_COLORS[index % len(FALLBACK_COLORS)]


def marker_for_curve(index: int) -> str:
    return CURVE_MARKERS[index % len(CURVE_MARKERS)]


def clean_axis(ax: Axes, *, nbins: int = 6) -> None:
    """Apply consistent ticks, dotted grid and spines to one axis."""
    ax.tick_params(axis="both", which="major", labelsize=STYLE.TICK_FONTSIZE, width=1.0)
    ax.xaxis.set_major_locator(MaxNLocator(nbins=nbins, min_n_ticks=4))
    ax.yaxis.set_major_locator(MaxNLocator(nbins=nbins, min_n_ticks=4))
    for side in ("left", "bottom"):
        ax.spines[side].set_linewidth(STYLE.LINEWIDTH_THIN)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(True, axis="both", alpha=STYLE.GRID_ALPHA, linestyle=":", linewidth=0.7)


def save_figure(
    fig: Figure,
    savepath_base: str | Path,
    formats: Sequence[str] = OUTPUT_FORMATS,
    dpi: int = FIGURE_DPI,
    *,
    bbox_inches: str = "tight",
    pad_inches: float = 0.12,
) -> Path:
    """Save a figure to multiple formats using one extensionless base path."""
    base = Path(savepath_base)
    base.parent.mkdir(parents=True, exist_ok=True)
    for ext in formats:
        target = base.with_suffix(f".{ext}")
        fig.savefig(
            str(target),
            dpi=dpi if ext == "png" else None,
            bbox_inches=bbox_inches,
            pad_inches=pad_inches,
        )
    return base.with_suffix(".png")


def save_figure_bundle(fig: Figure, png_path: str) -> str:
    """Save synchronized PNG, PDF, and SVG files for a figure."""
    base = Path(png_path).with_suffix("")
    return str(save_figure(fig, base))
