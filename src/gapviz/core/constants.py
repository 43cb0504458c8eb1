"""
gapviz core defaults.

Defines the canonical column names of the gapminder table and chart-level defaults
consumed by the viz and io layers. This module is zero-IO and uses only the Python
standard library.

Notes:
    - Column names are lower_snake; the upstream camelCase names are mapped in
      gapviz.data.dataset.
    - The dataset covers 142 countries sampled every five years from 1952 to 2007.
"""

from __future__ import annotations

__all__ = [
    "COUNTRY",
    "CONTINENT",
    "YEAR",
    "LIFE_EXP",
    "POP",
    "GDP_PERCAP",
    "OBSERVATION_COLUMNS",
    "UPSTREAM_COLUMNS",
    "FIRST_YEAR",
    "LAST_YEAR",
    "YEAR_STEP",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_THEME",
]

COUNTRY: str = "country"
CONTINENT: str = "continent"
YEAR: str = "year"
LIFE_EXP: str = "life_exp"
POP: str = "pop"
GDP_PERCAP: str = "gdp_percap"

# Column -> descriptor dtype ("i64", "f64", "str"), in canonical order.
OBSERVATION_COLUMNS: dict[str, str] = {
    COUNTRY: "str",
    CONTINENT: "str",
    YEAR: "i64",
    LIFE_EXP: "f64",
    POP: "i64",
    GDP_PERCAP: "f64",
}

# Upstream (plotly package data) name -> canonical name.
UPSTREAM_COLUMNS: dict[str, str] = {
    "country": COUNTRY,
    "continent": CONTINENT,
    "year": YEAR,
    "lifeExp": LIFE_EXP,
    "pop": POP,
    "gdpPercap": GDP_PERCAP,
}

FIRST_YEAR: int = 1952
LAST_YEAR: int = 2007
YEAR_STEP: int = 5

# Chart size in pixels for a single (unfaceted) view.
DEFAULT_WIDTH: int = 600
DEFAULT_HEIGHT: int = 400

DEFAULT_THEME: str = "gray"
