"""
Canonical chart grammar and helpers.

Defines the vocabulary of the layered grammar of graphics used across gapviz:
aesthetics (visual channels), geometries, measurement types, scale types, and the
continents of the dataset. Includes zero-IO parsing helpers and the table of
per-geometry aesthetic requirements used by gapviz.viz.spec validation.

Responsibilities
- Define enums with lower_snake serialized values (Continent is the one exception:
  its values are the dataset's own labels).
- Normalize user-facing aliases ("colour", "alpha", "linetype") to canonical aesthetics.
- Centralize which aesthetics each geometry requires and which measurement types they accept.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE
   - Enum serialized values: lower_snake
2) Discrete vs. continuous follows the grammar-of-graphics convention:
   - continuous = quantitative | temporal
   - discrete   = nominal | ordinal

Grammar-to-Vega-Lite mapping
----------------------------
| Grammar term       | Vega-Lite term                    |
|--------------------|-----------------------------------|
| x, y               | x, y encodings                    |
| color, fill        | color encoding (+ mark fill)      |
| size               | size encoding                     |
| shape              | shape encoding                    |
| alpha              | opacity encoding                  |
| group              | detail encoding                   |
| label              | text encoding                     |
| continuous         | quantitative / temporal           |
| discrete           | nominal / ordinal                 |

Examples
--------
>>> from gapviz.core.grammar import aesthetic_from_value, Aesthetic
>>> aesthetic_from_value("colour") == Aesthetic.COLOR
True
"""

from __future__ import annotations

from enum import Enum
from typing import Final

__all__ = [
    "Aesthetic",
    "Geom",
    "MeasureType",
    "ScaleType",
    "FacetKind",
    "Continent",
    "GEOM_REQUIRED",
    "GEOM_ACCEPTS",
    "CHANNEL_ACCEPTS",
    "aesthetic_from_value",
    "continent_from_value",
    "is_continuous",
    "is_discrete",
]



class Aesthetic(Enum):
    """Visual channels a column can be mapped to."""

    X = "x"
    Y = "y"
    COLOR = "color"
    FILL = "fill"
    SIZE = "size"
    SHAPE = "shape"
    ALPHA = "alpha"
    GROUP = "group"
    LABEL = "label"


_AESTHETIC_ALIASES: Final[dict[str, str]] = {
    "colour": "color",
    "col": "color",
    "opacity": "alpha",
    "text": "label",
    "detail": "group",
}


class Geom(Enum):
    """
    Geometries (layer drawing rules).

    Notes:
      bar counts rows per x category; col draws a precomputed y per x.
    """

    POINT = "point"
    LINE = "line"
    BAR = "bar"
    COL = "col"
    BOXPLOT = "boxplot"
    HISTOGRAM = "histogram"
    DENSITY = "density"
    SMOOTH = "smooth"
    TEXT = "text"


class MeasureType(Enum):
    """Measurement type of a mapped column (Vega-Lite field type)."""

    QUANTITATIVE = "quantitative"
    TEMPORAL = "temporal"
    NOMINAL = "nominal"
    ORDINAL = "ordinal"


class ScaleType(Enum):
    LINEAR = "linear"
    LOG = "log"
    SQRT = "sqrt"


class FacetKind(Enum):
    WRAP = "wrap"
    GRID = "grid"


class Continent(Enum):
    """The five continents of the gapminder table (values are the dataset labels)."""

    AFRICA = "Africa"
    AMERICAS = "Americas"
    ASIA = "Asia"
    EUROPE = "Europe"
    OCEANIA = "Oceania"


_CONTINUOUS: Final = frozenset({MeasureType.QUANTITATIVE, MeasureType.TEMPORAL})
_DISCRETE: Final = frozenset({MeasureType.NOMINAL, MeasureType.ORDINAL})
_ANY: Final = _CONTINUOUS | _DISCRETE

# Aesthetics a layer must resolve (from the chart mapping or its own mapping).
GEOM_REQUIRED: Final[dict[Geom, frozenset[Aesthetic]]] = {
    Geom.POINT: frozenset({Aesthetic.X, Aesthetic.Y}),
    Geom.LINE: frozenset({Aesthetic.X, Aesthetic.Y}),
    Geom.BAR: frozenset({Aesthetic.X}),
    Geom.COL: frozenset({Aesthetic.X, Aesthetic.Y}),
    Geom.BOXPLOT: frozenset({Aesthetic.X, Aesthetic.Y}),
    Geom.HISTOGRAM: frozenset({Aesthetic.X}),
    Geom.DENSITY: frozenset({Aesthetic.X}),
    Geom.SMOOTH: frozenset({Aesthetic.X, Aesthetic.Y}),
    Geom.TEXT: frozenset({Aesthetic.X, Aesthetic.Y, Aesthetic.LABEL}),
}

# Position requirements that depend on the geometry.
GEOM_ACCEPTS: Final[dict[Geom, dict[Aesthetic, frozenset[MeasureType]]]] = {
    Geom.POINT: {Aesthetic.X: _ANY, Aesthetic.Y: _ANY},
    Geom.LINE: {Aesthetic.X: _ANY, Aesthetic.Y: _CONTINUOUS},
    Geom.BAR: {Aesthetic.X: _DISCRETE},
    Geom.COL: {Aesthetic.X: _DISCRETE, Aesthetic.Y: _CONTINUOUS},
    Geom.BOXPLOT: {Aesthetic.X: _DISCRETE, Aesthetic.Y: _CONTINUOUS},
    Geom.HISTOGRAM: {Aesthetic.X: _CONTINUOUS},
    Geom.DENSITY: {Aesthetic.X: _CONTINUOUS},
    Geom.SMOOTH: {Aesthetic.X: _CONTINUOUS, Aesthetic.Y: _CONTINUOUS},
    Geom.TEXT: {Aesthetic.X: _ANY, Aesthetic.Y: _ANY},
}

# Channel requirements that hold for every geometry.
CHANNEL_ACCEPTS: Final[dict[Aesthetic, frozenset[MeasureType]]] = {
    Aesthetic.SIZE: _CONTINUOUS,
    Aesthetic.ALPHA: _CONTINUOUS,
    Aesthetic.SHAPE: _DISCRETE,
    Aesthetic.GROUP: _DISCRETE,
}


def aesthetic_from_value(s: str | Aesthetic) -> Aesthetic:
    """
    Parse an aesthetic name (or alias) into an Aesthetic.

    Args:
      s (str | Aesthetic): Name such as "x", "color", "colour", "alpha".

    Returns:
      Aesthetic: Canonical aesthetic.

    Raises:
      ValueError: If s is not a known aesthetic or alias.
    """
    if isinstance(s, Aesthetic):
        return s
    key = str(s).strip().lower()
    key = _AESTHETIC_ALIASES.get(key, key)
    try:
        return Aesthetic(key)
    except ValueError:
        known = sorted(a.value for a in Aesthetic)
        raise ValueError(f"unknown aesthetic {s!r} (known: {known})") from None


def continent_from_value(s: str) -> Continent:
    """
    Parse a continent label, accepting any letter case ("americas" -> Continent.AMERICAS).

    Raises:
      ValueError: If s does not name one of the five continents.
    """
    for c in Continent:
        if c.value.lower() == str(s).strip().lower():
            return c
    raise ValueError(f"unknown continent {s!r} (known: {[c.value for c in Continent]})")


def is_continuous(measure: MeasureType) -> bool:
    return measure in _CONTINUOUS


def is_discrete(measure: MeasureType) -> bool:
    return measure in _DISCRETE
