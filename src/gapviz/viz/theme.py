"""
Themes: presets and their application as top-level Altair configuration.

Presets
- gray: gray panel background with white grid lines (the default).
- bw: white panel, gray grid, dark panel border.
- minimal: white panel, light grid, no border.
- classic: white panel, axis lines, no grid.

apply_theme() must be called on a top-level chart (single, layered, or faceted); it
configures axes, legend, title, and view in one place so every chart in the tour shares
a consistent look.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

import altair as alt

from gapviz.core.constants import DEFAULT_THEME

from .spec import Theme

__all__ = [
    "THEMES",
    "theme",
    "theme_gray",
    "theme_bw",
    "theme_minimal",
    "theme_classic",
    "get_theme",
    "effective_theme",
    "apply_theme",
]

THEMES: dict[str, Theme] = {
    "gray": Theme(name="gray", base_size=12, legend_position="right", grid=True),
    "bw": Theme(name="bw", base_size=12, legend_position="right", grid=True),
    "minimal": Theme(name="minimal", base_size=12, legend_position="right", grid=True),
    "classic": Theme(name="classic", base_size=12, legend_position="right", grid=False),
}

# Per-preset view and axis colours: (panel fill, panel stroke, grid colour, axis domain).
_PALETTE: dict[str, tuple[str, str | None, str, bool]] = {
    "gray": ("#EBEBEB", None, "#FFFFFF", False),
    "bw": ("#FFFFFF", "#333333", "#EBEBEB", False),
    "minimal": ("#FFFFFF", None, "#EBEBEB", False),
    "classic": ("#FFFFFF", None, "#EBEBEB", True),
}

_LEGEND_ORIENT = {"right", "left", "top", "bottom", "none"}


def get_theme(name: str) -> Theme:
    """Return the preset `name` (KeyError lists the known presets)."""
    try:
        return THEMES[name]
    except KeyError:
        raise KeyError(f"unknown theme {name!r} (known: {sorted(THEMES)})") from None


def theme_gray(base_size: int = 12) -> Theme:
    return replace(THEMES["gray"], base_size=base_size)


def theme_bw(base_size: int = 12) -> Theme:
    return replace(THEMES["bw"], base_size=base_size)


def theme_minimal(base_size: int = 12) -> Theme:
    return replace(THEMES["minimal"], base_size=base_size)


def theme_classic(base_size: int = 12) -> Theme:
    return replace(THEMES["classic"], base_size=base_size)


def theme(
    *,
    legend_position: str | None = None,
    x_text_angle: int | None = None,
    hide_x_text: bool | None = None,
    hide_x_ticks: bool | None = None,
    hide_x_title: bool | None = None,
    hide_y_title: bool | None = None,
    grid: bool | None = None,
    base_size: int | None = None,
) -> Theme:
    """
    Partial theme: override individual elements of the current theme.

    Examples:
        >>> theme(x_text_angle=45).name is None
        True
    """
    if legend_position is not None and legend_position not in _LEGEND_ORIENT:
        raise ValueError(f"legend_position must be one of {sorted(_LEGEND_ORIENT)}, got {legend_position!r}")
    return Theme(
        base_size=base_size,
        legend_position=legend_position,
        x_text_angle=x_text_angle,
        hide_x_text=hide_x_text,
        hide_x_ticks=hide_x_ticks,
        hide_x_title=hide_x_title,
        hide_y_title=hide_y_title,
        grid=grid,
    )


def effective_theme(spec_theme: Theme | None, default: str = DEFAULT_THEME) -> Theme:
    """Merge a chart's theme over its preset (or the default preset when it names none)."""
    if spec_theme is None:
        return get_theme(default)
    base = get_theme(spec_theme.name or default)
    return base.merge(spec_theme)


def apply_theme(chart: alt.TopLevelMixin, th: Theme) -> alt.TopLevelMixin:
    """Apply a resolved theme as top-level configuration.

    Args:
        chart (alt.TopLevelMixin): Top-level chart.
        th (Theme): Theme with a preset name (see effective_theme()).

    Returns:
        alt.TopLevelMixin: Configured chart.
    """
    fill, stroke, grid_color, domain = _PALETTE[th.name or DEFAULT_THEME]
    size = th.base_size or 12

    axis: dict[str, Any] = {
        "labelFontSize": size - 1,
        "titleFontSize": size,
        "grid": bool(th.grid),
        "gridColor": grid_color,
        "domain": domain,
        "tickColor": "#333333",
    }
    axis_x: dict[str, Any] = {}
    if th.x_text_angle:
        axis_x.update(labelAngle=-abs(th.x_text_angle), labelAlign="right")
    if th.hide_x_text:
        axis_x["labels"] = False
    if th.hide_x_ticks:
        axis_x["ticks"] = False

    legend: dict[str, Any] = {"labelFontSize": size - 1, "titleFontSize": size}
    if th.legend_position == "none":
        legend["disable"] = True
    elif th.legend_position:
        legend["orient"] = th.legend_position

    out = (
        chart.configure_axis(**axis)
        .configure_legend(**legend)
        .configure_title(fontSize=size + 2, anchor="start")
        .configure_header(labelFontSize=size - 1, titleFontSize=size)
        .configure_view(fill=fill, stroke=stroke)
    )
    if axis_x:
        out = out.configure_axisX(**axis_x)
    return out
