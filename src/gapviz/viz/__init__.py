"""
gapviz.viz - A layered grammar of graphics over Polars frames, rendered with Altair.

## Responsibilities
- Describe charts as immutable specs composed with `+` (data, mapping, layers, scales,
  facets, themes, labels).
- Validate specs against their data before drawing.
- Render specs to Altair charts with a shared look.

## Public API
- ggplot, aes, factor, derived - start a chart and map columns to aesthetics.
- geom_point, geom_line, geom_bar, geom_col, geom_boxplot, geom_histogram, geom_density,
  geom_smooth, geom_text - geometry layers.
- scale_*, lims, facet_wrap, facet_grid, labs, xlab, ylab, ggtitle - modifiers.
- theme, theme_gray, theme_bw, theme_minimal, theme_classic - themes.
- build_chart, validate_spec - render and validate.

## Import DAG discipline
- Depends on stdlib, polars, altair, gapviz.core.*, and gapviz.io.config.
- Must not import gapviz.tour or app.

Examples
--------
>>> import polars as pl
>>> from gapviz.viz import ggplot, aes, geom_point, scale_x_log10, build_chart
>>> df = pl.DataFrame({"gdp_percap": [779.4, 820.9], "life_exp": [28.8, 30.3]})
>>> chart = build_chart(ggplot(df, aes(x="gdp_percap", y="life_exp")) + geom_point() + scale_x_log10())
>>> chart.to_dict()["layer"][0]["mark"]["type"]
'point'
"""

from __future__ import annotations

from .layers import (
    geom_bar,
    geom_boxplot,
    geom_col,
    geom_density,
    geom_histogram,
    geom_line,
    geom_point,
    geom_smooth,
    geom_text,
)
from .render import build_chart, to_values
from .scales import (
    facet_grid,
    facet_wrap,
    ggtitle,
    labs,
    lims,
    scale_color_manual,
    scale_color_scheme,
    scale_fill_scheme,
    scale_size_area,
    scale_x_log10,
    scale_x_sqrt,
    scale_y_log10,
    scale_y_sqrt,
    xlab,
    ylab,
)
from .spec import ChartSpec, aes, derived, factor, ggplot, validate_spec
from .theme import theme, theme_bw, theme_classic, theme_gray, theme_minimal

__all__ = [
    "ChartSpec",
    "ggplot",
    "aes",
    "factor",
    "derived",
    "validate_spec",
    "geom_point",
    "geom_line",
    "geom_bar",
    "geom_col",
    "geom_boxplot",
    "geom_histogram",
    "geom_density",
    "geom_smooth",
    "geom_text",
    "scale_x_log10",
    "scale_y_log10",
    "scale_x_sqrt",
    "scale_y_sqrt",
    "scale_color_scheme",
    "scale_fill_scheme",
    "scale_color_manual",
    "scale_size_area",
    "lims",
    "facet_wrap",
    "facet_grid",
    "labs",
    "xlab",
    "ylab",
    "ggtitle",
    "theme",
    "theme_gray",
    "theme_bw",
    "theme_minimal",
    "theme_classic",
    "build_chart",
    "to_values",
]
