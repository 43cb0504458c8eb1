"""
Grouped summaries and joins used by the tour.

All helpers take and return Polars DataFrames and never modify their input.
"""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from gapviz.core.constants import CONTINENT, COUNTRY, GDP_PERCAP, LIFE_EXP, POP, YEAR
from gapviz.core.errors import ColumnNotFoundError

from .dataset import filter_observations
from .reshape import pivot_wider

__all__ = [
    "top_n",
    "life_exp_range",
    "largest_life_exp_gains",
    "population_millions_wide",
    "continent_means",
    "with_continent_means",
    "keep_countries",
]

LIFE_EXP_RANGE = "life_exp_range"
POP_MILLIONS = "pop_millions"


def top_n(df: pl.DataFrame, n: int, by: str) -> pl.DataFrame:
    """Return at most n rows with the largest `by`, sorted descending.

    Ties at the cut-off are broken by the input order; the result never exceeds n rows.
    """
    if by not in df.columns:
        raise ColumnNotFoundError(f"top_n: unknown column {by!r} (available: {df.columns!r})")
    if n <= 0:
        return df.clear()
    return df.sort(by, descending=True, maintain_order=True).head(n)


def life_exp_range(df: pl.DataFrame) -> pl.DataFrame:
    """Per-country max(life_exp) - min(life_exp), with the country's continent."""
    return df.group_by(COUNTRY, maintain_order=True).agg(
        pl.col(CONTINENT).first(),
        (pl.col(LIFE_EXP).max() - pl.col(LIFE_EXP).min()).alias(LIFE_EXP_RANGE),
    )


def largest_life_exp_gains(df: pl.DataFrame, n: int = 5) -> pl.DataFrame:
    """Countries whose life expectancy varied the most over the period (top n)."""
    return top_n(life_exp_range(df), n, LIFE_EXP_RANGE)


def population_millions_wide(
    df: pl.DataFrame,
    countries: Iterable[str] = ("Syria", "Rwanda", "Chile"),
    *,
    year_min: int = 1997,
) -> pl.DataFrame:
    """One row per country, one column per year >= year_min, population in millions."""
    long = (
        filter_observations(df, countries=countries, year_min=year_min)
        .select(COUNTRY, YEAR, (pl.col(POP) / 1_000_000).alias(POP_MILLIONS))
    )
    return pivot_wider(long, id_cols=COUNTRY, names_from=YEAR, values_from=POP_MILLIONS)


def continent_means(df: pl.DataFrame) -> pl.DataFrame:
    """Per continent and year: mean life expectancy, mean GDP per capita, total population."""
    return (
        df.group_by(CONTINENT, YEAR)
        .agg(
            pl.col(LIFE_EXP).mean().alias("continent_life_exp"),
            pl.col(GDP_PERCAP).mean().alias("continent_gdp_percap"),
            pl.col(POP).sum().alias("continent_pop"),
            pl.col(COUNTRY).n_unique().alias("n_countries"),
        )
        .sort(CONTINENT, YEAR)
    )


def with_continent_means(df: pl.DataFrame) -> pl.DataFrame:
    """Join continent means onto each row and add the row's gap to its continent mean."""
    return df.join(continent_means(df), on=[CONTINENT, YEAR], how="left").with_columns(
        (pl.col(LIFE_EXP) - pl.col("continent_life_exp")).alias("life_exp_vs_continent")
    )


def keep_countries(df: pl.DataFrame, keys: pl.DataFrame) -> pl.DataFrame:
    """Semi-join: rows of df whose country appears in keys."""
    if COUNTRY not in keys.columns:
        raise ColumnNotFoundError(f"keep_countries: keys frame has no {COUNTRY!r} column")
    return df.join(keys.select(COUNTRY), on=COUNTRY, how="semi")
