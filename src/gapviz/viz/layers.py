"""
Geometry layers: constructors (geom_*) and their Altair renderings.

Each geom_* returns a Layer to add to a ChartSpec. build_layer() turns a resolved layer
into an Altair chart without data (the renderer attaches data at the top level) or with
the layer's own data.

Fixed parameters use the grammar's names and Vega-Lite units:
    color/fill (CSS color), alpha (0-1), size (point area px^2 or text font px),
    shape (Vega shape name), linewidth (px), width (box width px), bins / binwidth,
    method ("lm", "loess", "poly"), span (loess bandwidth), order (poly degree),
    bw (density bandwidth), dx/dy/angle (text offsets and rotation).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import altair as alt

from gapviz.core.errors import SpecError
from gapviz.core.grammar import Aesthetic, Geom, ScaleType, is_discrete

from .spec import ChartSpec, FieldRef, Layer, MappingValue, ResolvedLayer, Theme

__all__ = [
    "geom_point",
    "geom_line",
    "geom_bar",
    "geom_col",
    "geom_boxplot",
    "geom_histogram",
    "geom_density",
    "geom_smooth",
    "geom_text",
    "build_layer",
    "SMOOTH_COLOR",
]

SMOOTH_COLOR = "#3366FF"

_COMMON = frozenset({"color", "fill", "alpha"})
_ALLOWED_PARAMS: dict[Geom, frozenset[str]] = {
    Geom.POINT: _COMMON | {"size", "shape"},
    Geom.LINE: _COMMON | {"linewidth"},
    Geom.BAR: _COMMON,
    Geom.COL: _COMMON,
    Geom.BOXPLOT: _COMMON | {"width"},
    Geom.HISTOGRAM: _COMMON | {"bins", "binwidth"},
    Geom.DENSITY: _COMMON | {"bw"},
    Geom.SMOOTH: frozenset({"color", "alpha", "linewidth", "method", "span", "order"}),
    Geom.TEXT: frozenset({"color", "alpha", "size", "dx", "dy", "angle"}),
}
_SMOOTH_METHODS = frozenset({"lm", "loess", "poly"})

# Marks whose area is filled: the fill aesthetic drives the color channel.
_FILLED = frozenset({Geom.BAR, Geom.COL, Geom.BOXPLOT, Geom.HISTOGRAM, Geom.DENSITY})


def _make(
    geom: Geom,
    mapping: Mapping[Aesthetic, MappingValue] | None,
    data: Any,
    inherit_aes: bool,
    params: dict[str, Any],
) -> Layer:
    if "colour" in params:
        params["color"] = params.pop("colour")
    unknown = sorted(set(params) - _ALLOWED_PARAMS[geom])
    if unknown:
        raise SpecError(
            f"geom_{geom.value}: unknown parameter(s) {unknown} "
            f"(allowed: {sorted(_ALLOWED_PARAMS[geom])})"
        )
    return Layer(
        geom=geom,
        mapping=dict(mapping or {}),
        params=params,
        data=data,
        inherit_aes=inherit_aes,
    )


def geom_point(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """Scatter points."""
    return _make(Geom.POINT, mapping, data, inherit_aes, params)


def geom_line(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """Lines connecting observations in x order; map `group` to draw one line per group."""
    return _make(Geom.LINE, mapping, data, inherit_aes, params)


def geom_bar(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """Bars of row counts per discrete x."""
    return _make(Geom.BAR, mapping, data, inherit_aes, params)


def geom_col(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """Bars whose heights are the y values."""
    return _make(Geom.COL, mapping, data, inherit_aes, params)


def geom_boxplot(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """Box-and-whisker summary of continuous y per discrete x (whiskers at 1.5 IQR)."""
    return _make(Geom.BOXPLOT, mapping, data, inherit_aes, params)


def geom_histogram(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """Binned counts of continuous x (30 bins unless bins or binwidth is given)."""
    return _make(Geom.HISTOGRAM, mapping, data, inherit_aes, params)


def geom_density(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """
    Kernel density estimate of continuous x, one curve per discrete color/fill/group.

    Under scale_x_log10() the estimate is taken over log10(x) (non-positive x dropped),
    so `bw` is in log10 units.
    """
    return _make(Geom.DENSITY, mapping, data, inherit_aes, params)


def geom_smooth(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """
    Fitted trend line.

    method="lm" fits a straight line in the scales' transformed space (a log10 x scale
    fits y = a + b*log(x)); "loess" uses local regression with bandwidth `span`
    (default 0.75); "poly" fits a polynomial of degree `order` (default 2). No confidence
    band is drawn.
    """
    method = params.setdefault("method", "lm")
    if method not in _SMOOTH_METHODS:
        raise SpecError(f"geom_smooth: unknown method {method!r} (known: {sorted(_SMOOTH_METHODS)})")
    return _make(Geom.SMOOTH, mapping, data, inherit_aes, params)


def geom_text(mapping=None, *, data=None, inherit_aes: bool = True, **params: Any) -> Layer:
    """Text labels at (x, y); map `label` to the text column."""
    return _make(Geom.TEXT, mapping, data, inherit_aes, params)


# ----------------------------
# Altair rendering
# ----------------------------


def _alt_scale(spec: ChartSpec, aesthetic: Aesthetic) -> Any:
    s = spec.scale_for(aesthetic)
    if s is None:
        return alt.Undefined
    kwargs: dict[str, Any] = {}
    if s.type is ScaleType.LOG:
        kwargs.update(type="log", base=10)
    elif s.type is ScaleType.SQRT:
        kwargs["type"] = "sqrt"
    if s.domain is not None:
        kwargs["domain"] = list(s.domain)
    if s.scheme is not None:
        kwargs["scheme"] = s.scheme
    if s.range is not None:
        kwargs["range"] = list(s.range)
    if s.zero is not None:
        kwargs["zero"] = s.zero
    return alt.Scale(**kwargs)


def _is_log(spec: ChartSpec, aesthetic: Aesthetic) -> bool:
    s = spec.scale_for(aesthetic)
    return s is not None and s.type is ScaleType.LOG


def _title(ref: FieldRef, aesthetic: Aesthetic, theme: Theme) -> Any:
    if aesthetic is Aesthetic.X and theme.hide_x_title:
        return None
    if aesthetic is Aesthetic.Y and theme.hide_y_title:
        return None
    return ref.title


def _channel(
    aesthetic: Aesthetic,
    ref: FieldRef,
    spec: ChartSpec,
    theme: Theme,
    geom: Geom,
    **extra: Any,
) -> tuple[str, Any]:
    """Return (encoding keyword, channel object) for a mapped aesthetic."""
    common: dict[str, Any] = {"field": ref.name, "type": ref.measure.value}
    if aesthetic is Aesthetic.GROUP:
        return "detail", alt.Detail(**common)
    if aesthetic is Aesthetic.LABEL:
        return "text", alt.Text(**common, title=ref.title)
    kwargs = {**common, "title": _title(ref, aesthetic, theme), "scale": _alt_scale(spec, aesthetic)}
    kwargs.update(extra)
    if aesthetic is Aesthetic.X:
        return "x", alt.X(**kwargs)
    if aesthetic is Aesthetic.Y:
        return "y", alt.Y(**kwargs)
    if aesthetic is Aesthetic.SIZE:
        return "size", alt.Size(**kwargs)
    if aesthetic is Aesthetic.SHAPE:
        return "shape", alt.Shape(**kwargs)
    if aesthetic is Aesthetic.ALPHA:
        return "opacity", alt.Opacity(**kwargs)
    if geom in _FILLED:
        if aesthetic is Aesthetic.FILL:
            return "color", alt.Color(**kwargs)
        return "stroke", alt.Stroke(**kwargs)
    if aesthetic is Aesthetic.FILL:
        return "fill", alt.Fill(**kwargs)
    return "color", alt.Color(**kwargs)


def _encode(
    rl: ResolvedLayer,
    spec: ChartSpec,
    theme: Theme,
    *,
    skip: frozenset[Aesthetic] = frozenset(),
    overrides: Mapping[Aesthetic, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for aesthetic, ref in rl.fields.items():
        if aesthetic in skip:
            continue
        extra = (overrides or {}).get(aesthetic, {})
        key, channel = _channel(aesthetic, ref, spec, theme, rl.layer.geom, **extra)
        if key in out and key == "detail":
            continue
        out[key] = channel
    return out


def _mark_kwargs(params: Mapping[str, Any], *, size_key: str = "size") -> dict[str, Any]:
    kw: dict[str, Any] = {}
    if "color" in params:
        kw["color"] = params["color"]
    if "fill" in params:
        kw["fill"] = params["fill"]
    if "alpha" in params:
        kw["opacity"] = params["alpha"]
    if "size" in params:
        kw[size_key] = params["size"]
    if "shape" in params:
        kw["shape"] = params["shape"]
    if "linewidth" in params:
        kw["strokeWidth"] = params["linewidth"]
    return kw


def _group_fields(rl: ResolvedLayer, facet_fields: Mapping[str, FieldRef]) -> list[str]:
    names: list[str] = []
    for aesthetic in (Aesthetic.COLOR, Aesthetic.FILL, Aesthetic.GROUP):
        ref = rl.fields.get(aesthetic)
        if ref is not None and is_discrete(ref.measure) and ref.name not in names:
            names.append(ref.name)
    for ref in facet_fields.values():
        if ref.name not in names:
            names.append(ref.name)
    return names


def _count_y(theme: Theme) -> alt.Y:
    return alt.Y(aggregate="count", type="quantitative", title=None if theme.hide_y_title else "count")


def build_layer(
    rl: ResolvedLayer,
    spec: ChartSpec,
    theme: Theme,
    facet_fields: Mapping[str, FieldRef],
    *,
    interactive: bool = False,
) -> alt.Chart:
    """Render one resolved layer as an Altair chart.

    Args:
        rl (ResolvedLayer): Layer with resolved fields.
        spec (ChartSpec): Owning spec (scales are looked up here).
        theme (Theme): Effective theme (axis-title hiding applies per encoding).
        facet_fields (Mapping[str, FieldRef]): Facet variables, added to stat groupings.
        interactive (bool): Add tooltips to point layers.

    Returns:
        alt.Chart: Chart without data unless the layer carries its own.
    """
    geom = rl.layer.geom
    params = rl.layer.params
    base = alt.Chart(alt.Data(values=rl.data.to_dicts())) if rl.data is not None else alt.Chart()

    if geom is Geom.POINT:
        enc = _encode(rl, spec, theme, skip=frozenset({Aesthetic.LABEL}))
        if interactive:
            enc["tooltip"] = [alt.Tooltip(field=r.name, type=r.measure.value) for r in rl.fields.values()]
        return base.mark_point(filled=True, **_mark_kwargs(params)).encode(**enc)

    if geom is Geom.LINE:
        enc = _encode(rl, spec, theme, skip=frozenset({Aesthetic.LABEL, Aesthetic.SHAPE}))
        return base.mark_line(**_mark_kwargs(params)).encode(**enc)

    if geom is Geom.COL:
        enc = _encode(rl, spec, theme, skip=frozenset({Aesthetic.LABEL, Aesthetic.SHAPE}))
        return base.mark_bar(**_mark_kwargs(params)).encode(**enc)

    if geom is Geom.BAR:
        enc = _encode(rl, spec, theme, skip=frozenset({Aesthetic.LABEL, Aesthetic.SHAPE, Aesthetic.Y}))
        enc["y"] = _count_y(theme)
        return base.mark_bar(**_mark_kwargs(params)).encode(**enc)

    if geom is Geom.HISTOGRAM:
        if "binwidth" in params:
            binning = alt.Bin(step=params["binwidth"])
        else:
            binning = alt.Bin(maxbins=int(params.get("bins", 30)))
        enc = _encode(
            rl,
            spec,
            theme,
            skip=frozenset({Aesthetic.LABEL, Aesthetic.SHAPE, Aesthetic.Y}),
            overrides={Aesthetic.X: {"bin": binning}},
        )
        enc["y"] = _count_y(theme)
        return base.mark_bar(**_mark_kwargs(params)).encode(**enc)

    if geom is Geom.BOXPLOT:
        enc = _encode(rl, spec, theme, skip=frozenset({Aesthetic.LABEL, Aesthetic.SHAPE}))
        mark = _mark_kwargs(params)
        if "width" in params:
            mark["size"] = params["width"]
        return base.mark_boxplot(extent=1.5, **mark).encode(**enc)

    if geom is Geom.DENSITY:
        x = rl.fields[Aesthetic.X]
        groupby = _group_fields(rl, facet_fields)
        on = x.name
        if _is_log(spec, Aesthetic.X):
            # estimate on log10(x) so the curve is the density seen on the log axis
            on = f"log10_{x.name}"
            field = f"datum[{json.dumps(x.name)}]"
            base = base.transform_filter(f"{field} > 0").transform_calculate(
                **{on: f"log({field}) / LN10"}
            )
        dens_kwargs: dict[str, Any] = {"as_": [on, "density"]}
        if groupby:
            dens_kwargs["groupby"] = groupby
        if "bw" in params:
            dens_kwargs["bandwidth"] = params["bw"]
        enc = _encode(
            rl,
            spec,
            theme,
            skip=frozenset({Aesthetic.LABEL, Aesthetic.SHAPE, Aesthetic.Y, Aesthetic.SIZE, Aesthetic.ALPHA}),
        )
        enc["y"] = alt.Y(
            field="density", type="quantitative", stack=None, title=None if theme.hide_y_title else "density"
        )
        mark = {"opacity": 0.6, **_mark_kwargs(params)}
        chart = base.transform_density(on, **dens_kwargs)
        if on != x.name:
            chart = chart.transform_calculate(**{x.name: f"pow(10, datum[{json.dumps(on)}])"})
        return chart.mark_area(**mark).encode(**enc)

    if geom is Geom.SMOOTH:
        x = rl.fields[Aesthetic.X]
        y = rl.fields[Aesthetic.Y]
        groupby = _group_fields(rl, facet_fields)
        method = params.get("method", "lm")
        if method == "loess":
            chart = base.transform_loess(
                x.name, y.name, bandwidth=float(params.get("span", 0.75)), **({"groupby": groupby} if groupby else {})
            )
        else:
            reg_kwargs: dict[str, Any] = {}
            if groupby:
                reg_kwargs["groupby"] = groupby
            if method == "poly":
                reg_kwargs.update(method="poly", order=int(params.get("order", 2)))
            else:
                # Straight line in transformed space: log x -> "log", log y -> "exp", both -> "pow".
                log_x, log_y = _is_log(spec, Aesthetic.X), _is_log(spec, Aesthetic.Y)
                reg_kwargs["method"] = {
                    (False, False): "linear",
                    (True, False): "log",
                    (False, True): "exp",
                    (True, True): "pow",
                }[(log_x, log_y)]
            chart = base.transform_regression(x.name, y.name, **reg_kwargs)
        keep = {Aesthetic.X, Aesthetic.Y, Aesthetic.GROUP}
        color = rl.fields.get(Aesthetic.COLOR)
        if color is not None and is_discrete(color.measure):
            keep.add(Aesthetic.COLOR)
        enc = _encode(rl, spec, theme, skip=frozenset(set(Aesthetic) - keep))
        mark = {"strokeWidth": 2, **_mark_kwargs(params)}
        if Aesthetic.COLOR not in keep and "color" not in mark:
            mark["color"] = SMOOTH_COLOR
        return chart.mark_line(**mark).encode(**enc)

    if geom is Geom.TEXT:
        enc = _encode(rl, spec, theme, skip=frozenset({Aesthetic.SHAPE}))
        mark = _mark_kwargs(params, size_key="fontSize")
        for key in ("dx", "dy", "angle"):
            if key in params:
                mark[key] = params[key]
        return base.mark_text(**mark).encode(**enc)

    raise SpecError(f"no renderer for geom {geom.value!r}")  # pragma: no cover
