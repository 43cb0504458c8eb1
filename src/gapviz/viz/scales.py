"""
Scale, facet, and label constructors.

Every function returns a value to add to a ChartSpec with `+`:

    ggplot(df, aes(x="gdp_percap", y="life_exp")) + geom_point() + scale_x_log10()
    ... + facet_wrap("continent", ncol=3) + labs(x="GDP per capita", title="...")
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from gapviz.core.errors import FacetError, SpecError
from gapviz.core.grammar import Aesthetic, FacetKind, ScaleType, aesthetic_from_value

from .spec import Facet, Labels, MappingValue, Scale

__all__ = [
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
]

_FACET_SCALES = frozenset({"fixed", "free", "free_x", "free_y"})


def scale_x_log10() -> Scale:
    """Log10 x axis; a straight geom_smooth(method="lm") is then fitted against log(x)."""
    return Scale(Aesthetic.X, type=ScaleType.LOG)


def scale_y_log10() -> Scale:
    return Scale(Aesthetic.Y, type=ScaleType.LOG)


def scale_x_sqrt() -> Scale:
    return Scale(Aesthetic.X, type=ScaleType.SQRT)


def scale_y_sqrt() -> Scale:
    return Scale(Aesthetic.Y, type=ScaleType.SQRT)


def scale_color_scheme(scheme: str) -> Scale:
    """Use a named Vega color scheme (e.g. "category10", "viridis") for the color channel."""
    return Scale(Aesthetic.COLOR, scheme=scheme)


def scale_fill_scheme(scheme: str) -> Scale:
    return Scale(Aesthetic.FILL, scheme=scheme)


def scale_color_manual(values: Sequence[str], *, breaks: Sequence[Any] | None = None) -> Scale:
    """Explicit colors, optionally pinned to explicit category values (breaks)."""
    if breaks is not None and len(breaks) != len(values):
        raise SpecError(
            f"scale_color_manual: {len(values)} values for {len(breaks)} breaks; lengths must match"
        )
    return Scale(
        Aesthetic.COLOR,
        range=tuple(values),
        domain=tuple(breaks) if breaks is not None else None,
    )


def scale_size_area(max_size: float = 1000.0) -> Scale:
    """Point area proportional to the value, zero mapping to zero area."""
    return Scale(Aesthetic.SIZE, range=(0.0, float(max_size)), zero=True)


def lims(**limits: tuple[Any, Any] | Sequence[Any]) -> list[Scale]:
    """
    Set explicit limits per aesthetic, e.g. lims(x=(1e3, 1e5), y=(20, 90)).

    Limits merge into an existing scale for the same aesthetic, keeping its type.
    """
    out: list[Scale] = []
    for key, domain in limits.items():
        values = tuple(domain)
        if len(values) < 2:
            raise SpecError(f"lims: {key!r} needs at least two values, got {values!r}")
        out.append(Scale(aesthetic_from_value(key), domain=values))
    return out


def _check_scales(scales: str) -> None:
    if scales not in _FACET_SCALES:
        raise FacetError(f"unknown facet scales {scales!r} (known: {sorted(_FACET_SCALES)})")


def facet_wrap(facets: MappingValue, *, ncol: int | None = None, scales: str = "fixed") -> Facet:
    """
    One panel per value of a categorical variable, wrapped into rows of `ncol` panels.

    Args:
        facets (str | Derived): Variable to split by; numeric columns need factor().
        ncol (int | None): Panels per row (default: all panels on one row up to 4).
        scales (str): "fixed" (shared axes), "free", "free_x", or "free_y".

    Raises:
        FacetError: If ncol is not positive or scales is unknown.
    """
    if ncol is not None and ncol < 1:
        raise FacetError(f"facet_wrap: ncol must be >= 1, got {ncol}")
    _check_scales(scales)
    return Facet(kind=FacetKind.WRAP, wrap=facets, ncol=ncol, scales=scales)  # type: ignore[arg-type]


def facet_grid(
    rows: MappingValue | None = None,
    cols: MappingValue | None = None,
    *,
    scales: str = "fixed",
) -> Facet:
    """Panels laid out by a row variable, a column variable, or both."""
    if rows is None and cols is None:
        raise FacetError("facet_grid needs a row variable, a column variable, or both")
    _check_scales(scales)
    return Facet(kind=FacetKind.GRID, row=rows, column=cols, scales=scales)  # type: ignore[arg-type]


def labs(*, title: str | None = None, subtitle: str | None = None, **aesthetics: str) -> Labels:
    """
    Chart title and subtitle plus axis/legend titles per aesthetic.

    Examples:
        >>> labs(x="GDP per capita", colour="Continent").aesthetics[Aesthetic.COLOR]
        'Continent'
    """
    return Labels(
        title=title,
        subtitle=subtitle,
        aesthetics={aesthetic_from_value(k): v for k, v in aesthetics.items()},
    )


def xlab(label: str) -> Labels:
    return Labels(aesthetics={Aesthetic.X: label})


def ylab(label: str) -> Labels:
    return Labels(aesthetics={Aesthetic.Y: label})


def ggtitle(title: str, subtitle: str | None = None) -> Labels:
    return Labels(title=title, subtitle=subtitle)
