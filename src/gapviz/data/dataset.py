"""
The bundled gapminder table.

Overview
- load_gapminder(): the full table (1704 rows: 142 countries x 12 years), validated,
  renamed to lower_snake, sorted by country then year, and cached for the process.
- observations(): the same rows as typed Observation records.
- filter_observations(): the filter step used throughout the tour.

Source
- The table ships inside the `plotly` distribution and is read through
  plotly.data.gapminder, so loading never touches the network.

Notes
- Polars frames are never modified in place, so the cached frame is handed out as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache

import polars as pl

from gapviz.core.constants import CONTINENT, COUNTRY, UPSTREAM_COLUMNS, YEAR
from gapviz.core.grammar import Continent, continent_from_value
from gapviz.core.schema import Observation

from .validate import validate_observations

logger = logging.getLogger(__name__)

__all__ = ["load_gapminder", "observations", "filter_observations"]


def _read_upstream() -> pl.DataFrame:
    from plotly import data as plotly_data

    return plotly_data.gapminder(return_type="polars")


@lru_cache(maxsize=1)
def load_gapminder() -> pl.DataFrame:
    """Return the gapminder table with canonical columns.

    Returns:
        pl.DataFrame: Columns country, continent, year, life_exp, pop, gdp_percap.

    Raises:
        gapviz.core.errors.SchemaError: If the packaged table fails validation.
    """
    raw = _read_upstream()
    df = raw.select([pl.col(src).alias(dst) for src, dst in UPSTREAM_COLUMNS.items()])
    df = validate_observations(df).sort([COUNTRY, YEAR])
    logger.debug(
        "loaded gapminder: %d rows, %d countries", df.height, df.get_column(COUNTRY).n_unique()
    )
    return df


def observations(df: pl.DataFrame | None = None) -> list[Observation]:
    """Materialize rows as Observation records (defaults to the full table)."""
    frame = load_gapminder() if df is None else df
    return [Observation(**row) for row in frame.iter_rows(named=True)]


def filter_observations(
    df: pl.DataFrame,
    *,
    continent: str | Continent | None = None,
    countries: Iterable[str] | None = None,
    year_min: int | None = None,
    year_max: int | None = None,
) -> pl.DataFrame:
    """Keep the rows matching every given predicate (bounds are inclusive).

    Args:
        df (pl.DataFrame): Observations frame.
        continent (str | Continent | None): Continent label, any letter case.
        countries (Iterable[str] | None): Country names to keep.
        year_min (int | None): Lowest year kept.
        year_max (int | None): Highest year kept.

    Returns:
        pl.DataFrame: Subset in the original row order.
    """
    predicates: list[pl.Expr] = []
    if continent is not None:
        if not isinstance(continent, Continent):
            continent = continent_from_value(continent)
        predicates.append(pl.col(CONTINENT) == continent.value)
    if countries is not None:
        predicates.append(pl.col(COUNTRY).is_in(list(countries)))
    if year_min is not None:
        predicates.append(pl.col(YEAR) >= year_min)
    if year_max is not None:
        predicates.append(pl.col(YEAR) <= year_max)
    if not predicates:
        return df
    return df.filter(*predicates)
