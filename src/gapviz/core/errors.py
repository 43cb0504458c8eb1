"""
Core exception types raised by dataset validation, chart specification checks, and reshaping.

Provides typed exceptions for authoring-time failures:
- SchemaError for dataset rows that violate the Observation schema.
- SpecError (and subclasses) for chart specifications that cannot be rendered.
- ReshapeError (and subclasses) for wide/long conversions that would lose information.
- LessonNotFoundError for tour lookups by an unknown slug.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Every error except LessonNotFoundError (a KeyError) is a ValueError: the failure
      is always in what the author wrote, never in the environment.

Examples:
    Catch a missing column while building a chart.

    >>> from gapviz.core.errors import ColumnNotFoundError, SpecError
    >>> try:
    ...     raise ColumnNotFoundError("aesthetic 'x' references unknown column 'gdp'")
    ... except SpecError as e:
    ...     msg = str(e)
    >>> "gdp" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "SchemaError",
    "SpecError",
    "ColumnNotFoundError",
    "AestheticTypeError",
    "FacetError",
    "ReshapeError",
    "DuplicateKeyError",
    "ReshapeColumnError",
    "LessonNotFoundError",
]


class SchemaError(ValueError):
    """Dataset-level validation failure (missing columns, dtypes, value ranges)."""


class SpecError(ValueError):
    """A chart specification cannot be rendered as written."""


class ColumnNotFoundError(SpecError):
    """An aesthetic mapping, facet, or expression references a column that does not exist."""


class AestheticTypeError(SpecError):
    """A mapped column has the wrong measurement type for the geometry using it.

    Example: a continuous column on the x channel of a boxplot.
    """


class FacetError(SpecError):
    """A facet variable is not categorical, or the faceted chart mixes data sources."""


class ReshapeError(ValueError):
    """A wide/long conversion cannot be performed without losing or inventing values."""


class DuplicateKeyError(ReshapeError):
    """Identifier rows (wide) or identifier/dimension pairs (long) are not unique."""


class ReshapeColumnError(ColumnNotFoundError, ReshapeError):
    """A reshape names a column the frame does not have.

    Caught by both `except ColumnNotFoundError` and `except ReshapeError`.
    """


class LessonNotFoundError(KeyError):
    """No tour lesson has the requested slug."""
