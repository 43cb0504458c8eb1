"""
Rendering: ChartSpec -> Altair chart.

Overview
- build_chart(): resolve a spec, render each layer, attach the shared data once at the
  top level, then apply facets, size, title, and theme.
- to_values(): rows of a Polars frame as JSON-ready dicts (inline data).

Notes
- Data is embedded inline (alt.Data(values=...)) and restricted to the columns the chart
  uses, so saved HTML/JSON files are self-contained and small.
- Sizes from RenderSettings describe the whole figure; a faceted figure divides them
  among its panels. ChartSpec.properties() sets the size of one panel directly.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import altair as alt
import polars as pl

from gapviz.core.grammar import FacetKind
from gapviz.io.config import RenderSettings

from .layers import build_layer
from .spec import ChartSpec, FieldRef, ResolvedSpec, resolve
from .theme import apply_theme, effective_theme

logger = logging.getLogger(__name__)

__all__ = ["build_chart", "to_values", "MIN_PANEL"]

MIN_PANEL = 80
_DEFAULT_WRAP_COLUMNS = 4


def to_values(df: pl.DataFrame) -> list[dict[str, Any]]:
    """Convert a Polars DataFrame to a list of row dicts for alt.Data(values=...)."""
    return df.to_dicts()


def _n_levels(resolved: ResolvedSpec, role: str) -> int:
    ref = resolved.facet_fields.get(role)
    if ref is None:
        return 1
    return max(1, resolved.data.get_column(ref.name).n_unique())


def _panel_size(spec: ChartSpec, resolved: ResolvedSpec, settings: RenderSettings) -> tuple[int, int, int | None]:
    """Return (panel width, panel height, wrap columns)."""
    facet = spec.facet
    if facet is None:
        return spec.width or settings.width, spec.height or settings.height, None
    if facet.kind is FacetKind.WRAP:
        n = _n_levels(resolved, "wrap")
        ncol = facet.ncol or min(n, _DEFAULT_WRAP_COLUMNS)
        nrow = math.ceil(n / ncol)
    else:
        ncol = _n_levels(resolved, "column")
        nrow = _n_levels(resolved, "row")
    width = spec.width or max(MIN_PANEL, settings.width // ncol)
    height = spec.height or max(MIN_PANEL, settings.height // max(1, nrow))
    return width, height, ncol if facet.kind is FacetKind.WRAP else None


def _header(ref: FieldRef, channel: type) -> Any:
    return channel(field=ref.name, type=ref.measure.value, title=ref.title)


def build_chart(
    spec: ChartSpec,
    settings: RenderSettings | None = None,
    *,
    interactive: bool = False,
) -> alt.TopLevelMixin:
    """Render a ChartSpec as a themed Altair chart.

    Args:
        spec (ChartSpec): Chart to render.
        settings (RenderSettings | None): Figure size and default theme; defaults to
            RenderSettings().
        interactive (bool): Enable pan/zoom (unfaceted charts) and point tooltips.

    Returns:
        alt.TopLevelMixin: LayerChart, or FacetChart when the spec has a facet.

    Raises:
        gapviz.core.errors.SpecError: If the spec fails validation (see resolve()).
    """
    settings = settings or RenderSettings()
    resolved = resolve(spec)
    th = effective_theme(spec.theme, settings.theme)

    charts = [
        build_layer(rl, spec, th, resolved.facet_fields, interactive=interactive)
        for rl in resolved.layers
    ]
    shared_cols = resolved.shared_columns()
    if shared_cols:
        data = alt.Data(values=to_values(resolved.data.select(shared_cols)))
        chart: alt.TopLevelMixin = alt.layer(*charts, data=data)
    else:
        chart = alt.layer(*charts)

    width, height, columns = _panel_size(spec, resolved, settings)
    chart = chart.properties(width=width, height=height)

    facet = spec.facet
    if facet is not None:
        ff = resolved.facet_fields
        if facet.kind is FacetKind.WRAP:
            chart = chart.facet(facet=_header(ff["wrap"], alt.Facet), columns=columns)
        else:
            kwargs: dict[str, Any] = {}
            if "row" in ff:
                kwargs["row"] = _header(ff["row"], alt.Row)
            if "column" in ff:
                kwargs["column"] = _header(ff["column"], alt.Column)
            chart = chart.facet(**kwargs)
        if facet.scales in ("free", "free_x"):
            chart = chart.resolve_scale(x="independent")
        if facet.scales in ("free", "free_y"):
            chart = chart.resolve_scale(y="independent")
    elif interactive:
        chart = chart.interactive()

    labels = spec.labels
    if labels.title or labels.subtitle:
        title = alt.TitleParams(text=labels.title or "", subtitle=labels.subtitle or alt.Undefined)
        chart = chart.properties(title=title)

    logger.debug(
        "built chart: %d layer(s), %d shared row(s), panel %dx%d, theme=%s",
        len(charts),
        resolved.data.height,
        width,
        height,
        th.name,
    )
    return apply_theme(chart, th)
