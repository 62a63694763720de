"""
Plotting utilities for output-characteristic figures.

All plotting functions accept precomputed results and do not fit anything.

Modules:
    characteristic_plots:
        Renderer interface (draw_series, draw_fit, add_legend_entry), the
        matplotlib renderer, and the combined I_C(V_CE) figure with fitted
        lines over the fit domain.

    style:
        Serif publication style, per-base-current colours, and multi-format
        figure saving (PNG at 300 dpi, PDF, SVG).
"""

from .characteristic_plots import (
    MatplotlibRenderer,
    Renderer,
    plot_output_characteristics,
)
from .style import save_figure_bundle, set_global_style

__all__ = [
    "MatplotlibRenderer",
    "Renderer",
    "plot_output_characteristics",
    "save_figure_bundle",
    "set_global_style",
]
