"""
gapviz.data - The bundled table and the reshaping steps applied to it.

## Responsibilities
- Load and validate the gapminder table once per process.
- Provide the filter / summarise / join / pivot steps the tour chains before charting.

## Public API
- load_gapminder, observations, filter_observations - dataset access.
- pivot_longer, pivot_wider - wide/long reshaping with a round-trip guarantee.
- summaries - grouped summaries (top-n, continent means, population table).

## Import DAG discipline
- Depends on stdlib, polars, plotly (package data only), and gapviz.core.*.
- Must not import gapviz.viz, gapviz.tour, or app.
"""

from __future__ import annotations

from .dataset import filter_observations, load_gapminder, observations
from .reshape import pivot_longer, pivot_wider

__all__ = [
    "load_gapminder",
    "observations",
    "filter_observations",
    "pivot_longer",
    "pivot_wider",
]
