"""
Chart specifications for the layered grammar of graphics.

A ChartSpec is a value object: data + aesthetic mapping + ordered geometry layers +
optional scale, facet, theme, and label overrides. It is composed with `+`, each
addition returning a new spec, and resolved against its data by `resolve()` before
rendering.

Responsibilities
- Define the spec value types (Derived, Layer, Scale, Facet, Theme, Labels, ChartSpec).
- Materialize derived expressions into the data each layer draws from.
- Validate that mapped columns exist, that measurement types suit each geometry, and
  that facet variables are categorical.

Notes
- Nothing here imports altair; gapviz.viz.render turns a ResolvedSpec into a chart.
- Validation errors are gapviz.core.errors.SpecError subclasses.

Examples
--------
>>> import polars as pl
>>> from gapviz.viz.spec import ggplot, aes
>>> from gapviz.viz.layers import geom_point
>>> df = pl.DataFrame({"gdp_percap": [779.4, 820.9], "life_exp": [28.8, 30.3]})
>>> spec = ggplot(df, aes(x="gdp_percap", y="life_exp")) + geom_point()
>>> len(spec.layers)
1
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal, Union

import polars as pl

from gapviz.core.errors import AestheticTypeError, ColumnNotFoundError, FacetError, SpecError
from gapviz.core.grammar import (
    CHANNEL_ACCEPTS,
    GEOM_ACCEPTS,
    GEOM_REQUIRED,
    Aesthetic,
    FacetKind,
    Geom,
    MeasureType,
    ScaleType,
    aesthetic_from_value,
    is_discrete,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Derived",
    "MappingValue",
    "Layer",
    "Scale",
    "Facet",
    "Theme",
    "Labels",
    "ChartSpec",
    "FieldRef",
    "ResolvedLayer",
    "ResolvedSpec",
    "aes",
    "derived",
    "factor",
    "ggplot",
    "measure_of",
    "resolve",
    "validate_spec",
]


@dataclass(frozen=True, eq=False)
class Derived:
    """
    A computed column, evaluated with Polars before drawing.

    Attributes:
        name (str): Column name the expression is materialized under.
        expr (pl.Expr): Expression over the layer's data.
        title (str | None): Axis/legend title; defaults to name.
        measure (MeasureType | None): Override for the inferred measurement type.
    """

    name: str
    expr: pl.Expr
    title: str | None = None
    measure: MeasureType | None = None


MappingValue = Union[str, Derived]


def aes(**mapping: MappingValue | None) -> dict[Aesthetic, MappingValue]:
    """
    Build an aesthetic mapping; keys accept aliases ("colour", "opacity").

    Examples:
        >>> aes(x="year", y="life_exp", colour="continent")[Aesthetic.COLOR]
        'continent'
    """
    out: dict[Aesthetic, MappingValue] = {}
    for key, value in mapping.items():
        if value is None:
            continue
        if not isinstance(value, (str, Derived)):
            raise TypeError(
                f"aesthetic {key!r} must map to a column name or Derived, got {type(value).__name__}"
            )
        out[aesthetic_from_value(key)] = value
    return out


def derived(
    name: str, expr: pl.Expr, *, title: str | None = None, measure: MeasureType | None = None
) -> Derived:
    """Map an aesthetic to a computed column (e.g. derived("pop_m", pl.col("pop") / 1e6))."""
    return Derived(name=name, expr=expr, title=title, measure=measure)


def factor(column: str) -> Derived:
    """Treat a column as discrete (ordered categories), like factor(year)."""
    return Derived(
        name=f"factor_{column}",
        expr=pl.col(column).cast(pl.String),
        title=f"factor({column})",
        measure=MeasureType.ORDINAL,
    )


@dataclass(frozen=True, eq=False)
class Layer:
    """
    One geometry layer.

    Attributes:
        geom (Geom): Drawing rule.
        mapping (dict[Aesthetic, MappingValue]): Layer-specific mapping, merged over the
            chart mapping when inherit_aes is True.
        params (dict[str, Any]): Fixed (unmapped) visual settings and stat options, e.g.
            {"color": "black"}, {"alpha": 0.5}, {"method": "lm"}, {"bins": 30}.
        data (pl.DataFrame | None): Layer-specific data; None draws the chart data.
        inherit_aes (bool): Whether the chart mapping applies to this layer.
    """

    geom: Geom
    mapping: dict[Aesthetic, MappingValue] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    data: pl.DataFrame | None = None
    inherit_aes: bool = True


@dataclass(frozen=True)
class Scale:
    """
    Scale override for one aesthetic.

    Attributes:
        aesthetic (Aesthetic): Channel the scale applies to.
        type (ScaleType): Transformation (linear, log10, sqrt).
        domain (tuple | None): Explicit limits.
        scheme (str | None): Vega color scheme name (color/fill only).
        range (tuple | None): Explicit output range (colors, sizes).
        zero (bool | None): Whether a quantitative scale must include zero.
    """

    aesthetic: Aesthetic
    type: ScaleType = ScaleType.LINEAR
    domain: tuple[Any, ...] | None = None
    scheme: str | None = None
    range: tuple[Any, ...] | None = None
    zero: bool | None = None

    def merge(self, other: Scale) -> Scale:
        """Fields set on other win; unset (None/linear) fields keep self's value."""
        return Scale(
            aesthetic=self.aesthetic,
            type=other.type if other.type is not ScaleType.LINEAR else self.type,
            domain=other.domain if other.domain is not None else self.domain,
            scheme=other.scheme if other.scheme is not None else self.scheme,
            range=other.range if other.range is not None else self.range,
            zero=other.zero if other.zero is not None else self.zero,
        )


@dataclass(frozen=True, eq=False)
class Facet:
    """
    Small-multiples partitioning.

    Attributes:
        kind (FacetKind): wrap (one variable, wrapped into columns) or grid (row x column).
        wrap (MappingValue | None): Variable for wrap facets.
        row (MappingValue | None): Row variable for grid facets.
        column (MappingValue | None): Column variable for grid facets.
        ncol (int | None): Panels per row for wrap facets.
        scales (str): "fixed", "free", "free_x", or "free_y".
    """

    kind: FacetKind
    wrap: MappingValue | None = None
    row: MappingValue | None = None
    column: MappingValue | None = None
    ncol: int | None = None
    scales: Literal["fixed", "free", "free_x", "free_y"] = "fixed"

    def variables(self) -> dict[str, MappingValue]:
        out: dict[str, MappingValue] = {}
        for role in ("wrap", "row", "column"):
            value = getattr(self, role)
            if value is not None:
                out[role] = value
        return out


@dataclass(frozen=True)
class Theme:
    """
    Theme settings. A theme with a `name` is complete and replaces the current theme;
    one without a name only overrides the elements it sets.

    Attributes:
        name (str | None): Base preset ("gray", "bw", "minimal", "classic").
        base_size (int | None): Base font size for labels and titles.
        legend_position (str | None): "right", "left", "top", "bottom", or "none".
        x_text_angle (int | None): Rotation of x tick labels, in degrees.
        hide_x_text (bool | None): Hide x tick labels.
        hide_x_ticks (bool | None): Hide x tick marks.
        hide_x_title (bool | None): Hide the x axis title.
        hide_y_title (bool | None): Hide the y axis title.
        grid (bool | None): Draw grid lines.
    """

    name: str | None = None
    base_size: int | None = None
    legend_position: str | None = None
    x_text_angle: int | None = None
    hide_x_text: bool | None = None
    hide_x_ticks: bool | None = None
    hide_x_title: bool | None = None
    hide_y_title: bool | None = None
    grid: bool | None = None

    def merge(self, other: Theme) -> Theme:
        """Return self with every element other sets."""
        updates = {f.name: getattr(other, f.name) for f in fields(other)}
        return replace(self, **{k: v for k, v in updates.items() if v is not None})


@dataclass(frozen=True)
class Labels:
    """Chart title/subtitle plus per-aesthetic axis and legend titles."""

    title: str | None = None
    subtitle: str | None = None
    aesthetics: Mapping[Aesthetic, str] = field(default_factory=dict)

    def merge(self, other: Labels) -> Labels:
        return Labels(
            title=other.title if other.title is not None else self.title,
            subtitle=other.subtitle if other.subtitle is not None else self.subtitle,
            aesthetics={**self.aesthetics, **other.aesthetics},
        )


@dataclass(frozen=True, eq=False)
class ChartSpec:
    """
    A complete, immutable chart description.

    Compose with `+`: layers append, scales replace per aesthetic, a facet replaces the
    facet, complete themes replace and partial themes merge, labels merge. A list or
    tuple adds each element in order.
    """

    data: pl.DataFrame
    mapping: dict[Aesthetic, MappingValue] = field(default_factory=dict)
    layers: tuple[Layer, ...] = ()
    scales: tuple[Scale, ...] = ()
    facet: Facet | None = None
    theme: Theme | None = None
    labels: Labels = field(default_factory=Labels)
    width: int | None = None
    height: int | None = None

    def __add__(self, other: object) -> ChartSpec:
        if isinstance(other, (list, tuple)):
            out = self
            for item in other:
                out = out + item
            return out
        if isinstance(other, Layer):
            return replace(self, layers=(*self.layers, other))
        if isinstance(other, Scale):
            kept = tuple(s for s in self.scales if s.aesthetic is not other.aesthetic)
            current = self.scale_for(other.aesthetic)
            merged = current.merge(other) if current is not None else other
            return replace(self, scales=(*kept, merged))
        if isinstance(other, Facet):
            return replace(self, facet=other)
        if isinstance(other, Theme):
            if other.name is not None or self.theme is None:
                return replace(self, theme=other)
            return replace(self, theme=self.theme.merge(other))
        if isinstance(other, Labels):
            return replace(self, labels=self.labels.merge(other))
        return NotImplemented

    def scale_for(self, aesthetic: Aesthetic) -> Scale | None:
        for s in self.scales:
            if s.aesthetic is aesthetic:
                return s
        return None

    def properties(self, *, width: int | None = None, height: int | None = None) -> ChartSpec:
        """Return a copy with an explicit size (pixels of one panel when faceted)."""
        return replace(
            self,
            width=width if width is not None else self.width,
            height=height if height is not None else self.height,
        )


def ggplot(data: pl.DataFrame, mapping: Mapping[Aesthetic, MappingValue] | None = None) -> ChartSpec:
    """Start a chart from a data frame and an optional global aesthetic mapping."""
    if not isinstance(data, pl.DataFrame):
        raise TypeError(f"ggplot data must be a polars DataFrame, got {type(data).__name__}")
    return ChartSpec(data=data, mapping=dict(mapping or {}))


# ----------------------------
# Resolution
# ----------------------------


@dataclass(frozen=True)
class FieldRef:
    """A mapped column after resolution: its name, measurement type, and title."""

    name: str
    measure: MeasureType
    title: str


@dataclass(frozen=True, eq=False)
class ResolvedLayer:
    layer: Layer
    fields: dict[Aesthetic, FieldRef]
    data: pl.DataFrame | None  # None: draws ResolvedSpec.data


@dataclass(frozen=True, eq=False)
class ResolvedSpec:
    spec: ChartSpec
    data: pl.DataFrame
    layers: tuple[ResolvedLayer, ...]
    facet_fields: dict[str, FieldRef]

    def shared_columns(self) -> list[str]:
        """Columns of the shared data that some shared layer or facet refers to."""
        used: list[str] = []
        refs = [f for rl in self.layers if rl.data is None for f in rl.fields.values()]
        refs += list(self.facet_fields.values())
        for ref in refs:
            if ref.name not in used:
                used.append(ref.name)
        return used


def measure_of(dtype: pl.DataType) -> MeasureType:
    """Infer the measurement type of a Polars dtype."""
    if dtype.is_numeric():
        return MeasureType.QUANTITATIVE
    if dtype.is_temporal():
        return MeasureType.TEMPORAL
    return MeasureType.NOMINAL


def _is_categorical_dtype(dtype: pl.DataType) -> bool:
    return dtype == pl.String or dtype == pl.Boolean or isinstance(dtype, (pl.Categorical, pl.Enum))


def _unique_derived(values: Iterable[MappingValue], where: str) -> list[Derived]:
    """Derived values by name, first occurrence kept; one name must mean one expression."""
    seen: dict[str, Derived] = {}
    for v in values:
        if not isinstance(v, Derived):
            continue
        first = seen.get(v.name)
        if first is None:
            seen[v.name] = v
        elif not first.expr.meta.eq(v.expr):
            raise SpecError(
                f"{where}: derived column {v.name!r} is defined by two different expressions"
            )
    return list(seen.values())


def _materialize(df: pl.DataFrame, values: Iterable[MappingValue], where: str) -> pl.DataFrame:
    exprs = _unique_derived(values, where)
    if not exprs:
        return df
    try:
        return df.with_columns([d.expr.alias(d.name) for d in exprs])
    except pl.exceptions.ColumnNotFoundError as exc:
        raise ColumnNotFoundError(
            f"{where}: derived expression references an unknown column "
            f"(available: {df.columns!r}): {exc}"
        ) from exc
    except pl.exceptions.PolarsError as exc:
        raise SpecError(f"{where}: derived expression could not be evaluated: {exc}") from exc


def _field(
    df: pl.DataFrame, value: MappingValue, title: str | None, where: str
) -> FieldRef:
    name = value.name if isinstance(value, Derived) else value
    if name not in df.columns:
        raise ColumnNotFoundError(f"{where} references unknown column {name!r} (available: {df.columns!r})")
    measure = measure_of(df.schema[name])
    default_title = name
    if isinstance(value, Derived):
        measure = value.measure or measure
        default_title = value.title or name
    return FieldRef(name=name, measure=measure, title=title or default_title)


def _check_types(geom: Geom, fields_: dict[Aesthetic, FieldRef], where: str) -> None:
    required = GEOM_REQUIRED[geom]
    missing = sorted(a.value for a in required if a not in fields_)
    if missing:
        raise SpecError(f"{where} requires aesthetics {sorted(a.value for a in required)}; missing {missing}")
    rules = {**CHANNEL_ACCEPTS, **GEOM_ACCEPTS[geom]}
    for aesthetic, ref in fields_.items():
        allowed = rules.get(aesthetic)
        if allowed is not None and ref.measure not in allowed:
            kind = "discrete" if all(is_discrete(m) for m in allowed) else "continuous"
            raise AestheticTypeError(
                f"{where}: aesthetic {aesthetic.value!r} needs a {kind} variable, but "
                f"{ref.name!r} is {ref.measure.value}"
            )


def resolve(spec: ChartSpec) -> ResolvedSpec:
    """
    Materialize derived columns and validate a spec against its data.

    Returns:
        ResolvedSpec: The shared data (with derived columns), and per-layer field references.

    Raises:
        ColumnNotFoundError: If a mapping or expression references an unknown column.
        AestheticTypeError: If a column's measurement type does not suit its geometry/channel.
        FacetError: If a facet variable is not categorical, or a faceted layer has its own data.
        SpecError: If the chart has no layers or a layer lacks a required aesthetic.
    """
    if not spec.layers:
        raise SpecError("chart has no layers; add a geometry such as geom_point()")

    facet_vars = spec.facet.variables() if spec.facet is not None else {}
    shared_values: list[MappingValue] = [*spec.mapping.values(), *facet_vars.values()]
    for layer in spec.layers:
        if layer.data is None:
            shared_values += list(layer.mapping.values())
    shared = _materialize(spec.data, shared_values, "chart data")

    facet_fields: dict[str, FieldRef] = {}
    for role, value in facet_vars.items():
        ref = _field(shared, value, None, f"facet {role}")
        categorical = isinstance(value, Derived) and value.measure is not None and is_discrete(value.measure)
        if not (categorical or _is_categorical_dtype(shared.schema[ref.name])):
            raise FacetError(
                f"facet variable {ref.name!r} has dtype {shared.schema[ref.name]}; facet "
                f"variables must be categorical (string, categorical, enum, boolean); "
                f"use factor({ref.name!r}) to facet by its values"
            )
        facet_fields[role] = ref

    resolved: list[ResolvedLayer] = []
    for idx, layer in enumerate(spec.layers, start=1):
        where = f"layer {idx} (geom_{layer.geom.value})"
        if layer.data is not None and spec.facet is not None:
            raise FacetError(f"{where} has its own data; faceted charts draw every layer from the chart data")
        mapping = {**spec.mapping, **layer.mapping} if layer.inherit_aes else dict(layer.mapping)
        data = shared
        if layer.data is not None:
            data = _materialize(layer.data, mapping.values(), where)
        fields_ = {
            a: _field(data, v, spec.labels.aesthetics.get(a), f"{where}: aesthetic {a.value!r}")
            for a, v in mapping.items()
        }
        _check_types(layer.geom, fields_, where)
        resolved.append(
            ResolvedLayer(layer=layer, fields=fields_, data=data if layer.data is not None else None)
        )

    logger.debug("resolved spec: %d layer(s), facet=%s", len(resolved), sorted(facet_fields))
    return ResolvedSpec(spec=spec, data=shared, layers=tuple(resolved), facet_fields=facet_fields)


def validate_spec(spec: ChartSpec) -> None:
    """Raise the first SpecError the spec would hit when rendered."""
    resolve(spec)
