"""
Pydantic v2 row model for the gapminder table.

Responsibilities
- Define Observation, the typed view of one dataset row.
- Normalize the continent label to its canonical spelling.
- Enforce value ranges (non-negative life expectancy and GDP, positive population).

Style
- Zero-IO (stdlib + pydantic only).
- Frame-level validation (columns, dtypes, vectorized range checks) lives in
  gapviz.data.validate; this model is used for record-level access and tests.

References
- constants: src/gapviz/core/constants.py (column names)
- grammar: src/gapviz/core/grammar.py (Continent)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .grammar import continent_from_value

__all__ = ["Observation"]


class Observation(BaseModel):
    """
    One country's demographic metrics for one year.

    Attributes:
        country (str): Country name as spelled in the dataset.
        continent (str): One of Africa, Americas, Asia, Europe, Oceania.
        year (int): Calendar year of the observation.
        life_exp (float): Life expectancy at birth, in years (>= 0).
        pop (int): Population (> 0).
        gdp_percap (float): GDP per capita, inflation-adjusted US dollars (>= 0).

    Raises:
        pydantic.ValidationError: If a value is out of range or the continent is unknown.

    Examples:
        >>> from gapviz.core.schema import Observation
        >>> obs = Observation(country="Chile", continent="americas", year=2007,
        ...                   life_exp=78.553, pop=16284741, gdp_percap=13171.63885)
        >>> obs.continent
        'Americas'
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    country: str = Field(..., min_length=1)
    continent: str
    year: int
    life_exp: float = Field(..., ge=0.0)
    pop: int = Field(..., gt=0)
    gdp_percap: float = Field(..., ge=0.0)

    @field_validator("continent")
    @classmethod
    def _normalize_continent(cls, v: str) -> str:
        return continent_from_value(v).value
