from __future__ import annotations

from typing import Any

import polars as pl
import pytest

from gapviz.core.errors import SpecError
from gapviz.io.config import RenderSettings
from gapviz.viz import (
    aes,
    build_chart,
    facet_grid,
    facet_wrap,
    factor,
    geom_bar,
    geom_boxplot,
    geom_col,
    geom_density,
    geom_histogram,
    geom_line,
    geom_point,
    geom_smooth,
    geom_text,
    ggplot,
    ggtitle,
    labs,
    scale_color_manual,
    scale_color_scheme,
    scale_fill_scheme,
    scale_size_area,
    scale_x_log10,
    scale_x_sqrt,
    scale_y_log10,
    scale_y_sqrt,
    theme,
    xlab,
    ylab,
)
from gapviz.viz.layers import SMOOTH_COLOR


def find_in_spec(obj: Any, predicate) -> bool:
    """Recursively scan a chart spec dict for a predicate match."""
    if isinstance(obj, dict):
        if predicate(obj):
            return True
        return any(find_in_spec(v, predicate) for v in obj.values())
    if isinstance(obj, list):
        return any(find_in_spec(v, predicate) for v in obj)
    return False


def collect(obj: Any, predicate) -> list[dict]:
    out: list[dict] = []
    if isinstance(obj, dict):
        if predicate(obj):
            out.append(obj)
        for v in obj.values():
            out += collect(v, predicate)
    elif isinstance(obj, list):
        for v in obj:
            out += collect(v, predicate)
    return out


def mark_type(d: dict) -> str | None:
    mark = d.get("mark")
    if isinstance(mark, dict):
        return mark.get("type")
    return mark


def layers(spec: dict) -> list[dict]:
    return collect(spec, lambda d: mark_type(d) is not None)


def inline_rows(spec: dict) -> list[dict]:
    data = spec["data"]
    if "values" in data:
        return data["values"]
    return spec["datasets"][data["name"]]


@pytest.fixture()
def scatter(small_frame: pl.DataFrame):
    return ggplot(small_frame, aes(x="gdp_percap", y="life_exp"))


def test_scatter_encodes_fields_and_inline_data(scatter) -> None:
    spec = build_chart(scatter + geom_point()).to_dict()
    (point,) = layers(spec)
    assert mark_type(point) == "point"
    assert point["encoding"]["x"]["field"] == "gdp_percap"
    assert point["encoding"]["x"]["type"] == "quantitative"
    assert point["encoding"]["y"]["field"] == "life_exp"
    rows = inline_rows(spec)
    assert len(rows) == 9
    # only the mapped columns are embedded
    assert set(rows[0]) == {"gdp_percap", "life_exp"}
    assert spec["width"] == 600 and spec["height"] == 400


def test_settings_and_properties_size(scatter) -> None:
    spec = build_chart(scatter + geom_point(), RenderSettings(width=800, height=500)).to_dict()
    assert (spec["width"], spec["height"]) == (800, 500)
    spec = build_chart((scatter + geom_point()).properties(width=300)).to_dict()
    assert (spec["width"], spec["height"]) == (300, 400)


def test_log_scale(scatter) -> None:
    spec = build_chart(scatter + geom_point(alpha=0.5) + scale_x_log10()).to_dict()
    (point,) = layers(spec)
    assert point["encoding"]["x"]["scale"] == {"type": "log", "base": 10}
    assert point["mark"]["opacity"] == 0.5


@pytest.mark.parametrize(
    "scales, method",
    [
        ([], "linear"),
        ([scale_x_log10()], "log"),
        ([scale_y_log10()], "exp"),
        ([scale_x_log10(), scale_y_log10()], "pow"),
    ],
)
def test_lm_smoothing_follows_log_scales(scatter, scales, method) -> None:
    spec = build_chart(scatter + geom_point() + geom_smooth(method="lm") + scales).to_dict()
    regressions = collect(spec, lambda d: "regression" in d)
    assert len(regressions) == 1
    assert regressions[0]["on"] == "gdp_percap"
    assert regressions[0]["regression"] == "life_exp"
    assert regressions[0]["method"] == method
    line = [lay for lay in layers(spec) if mark_type(lay) == "line"][0]
    assert line["mark"]["color"] == SMOOTH_COLOR


def test_smoothing_groups_by_discrete_colour(scatter) -> None:
    spec = build_chart(scatter + geom_smooth(aes(colour="continent"), method="loess", span=0.5)).to_dict()
    (loess,) = collect(spec, lambda d: "loess" in d)
    assert loess["bandwidth"] == 0.5
    assert loess["groupby"] == ["continent"]
    (line,) = layers(spec)
    assert line["encoding"]["color"]["field"] == "continent"
    assert "color" not in line["mark"]


def test_point_colour_does_not_split_single_trend(scatter) -> None:
    spec = build_chart(scatter + geom_point(aes(colour="continent")) + geom_smooth(linewidth=4)).to_dict()
    (reg,) = collect(spec, lambda d: "regression" in d)
    assert "groupby" not in reg
    line = [lay for lay in layers(spec) if mark_type(lay) == "line"][0]
    assert line["mark"]["strokeWidth"] == 4


def test_lines_grouped_by_country(small_frame: pl.DataFrame) -> None:
    spec = build_chart(
        ggplot(small_frame, aes(x="year", y="life_exp", group="country", colour="continent"))
        + geom_line()
    ).to_dict()
    (line,) = layers(spec)
    assert line["encoding"]["detail"]["field"] == "country"
    assert line["encoding"]["color"]["field"] == "continent"
    assert line["encoding"]["color"]["type"] == "nominal"


def test_facet_wrap_by_factor(small_frame: pl.DataFrame) -> None:
    spec = build_chart(
        ggplot(small_frame, aes(x="gdp_percap", fill="continent"))
        + geom_density(alpha=0.6)
        + facet_wrap(factor("year"), ncol=2)
        + scale_x_log10()
    ).to_dict()
    assert spec["facet"]["field"] == "factor_year"
    assert spec["facet"]["type"] == "ordinal"
    assert spec["facet"]["title"] == "factor(year)"
    assert spec["columns"] == 2
    assert spec["spec"]["width"] == 300
    (dens,) = collect(spec, lambda d: "density" in d and "as" in d)
    assert dens["density"] == "log10_gdp_percap"
    assert dens["as"] == ["log10_gdp_percap", "density"]
    assert dens["groupby"] == ["continent", "factor_year"]
    (area,) = layers(spec)
    assert mark_type(area) == "area"
    assert area["encoding"]["color"]["field"] == "continent"
    assert area["encoding"]["y"]["stack"] is None
    assert {r["factor_year"] for r in inline_rows(spec)} == {"1997", "2002", "2007"}


def test_facet_grid_and_free_scales(small_frame: pl.DataFrame) -> None:
    spec = build_chart(
        ggplot(small_frame, aes(x="year", y="life_exp"))
        + geom_line()
        + facet_grid(rows="continent", scales="free_y")
    ).to_dict()
    assert spec["facet"]["row"]["field"] == "continent"
    assert spec["resolve"]["scale"]["y"] == "independent"
    assert "x" not in spec["resolve"]["scale"]
    assert spec["spec"]["height"] == 400 // 3


def test_boxplot_with_hidden_x_axis(small_frame: pl.DataFrame) -> None:
    spec = build_chart(
        ggplot(small_frame, aes(x="continent", y="life_exp", fill="continent"))
        + geom_boxplot()
        + theme(hide_x_text=True, hide_x_ticks=True, hide_x_title=True)
    ).to_dict()
    (box,) = layers(spec)
    assert mark_type(box) == "boxplot"
    assert box["encoding"]["x"]["type"] == "nominal"
    assert box["encoding"]["x"]["title"] is None
    assert box["encoding"]["color"]["field"] == "continent"
    assert spec["config"]["axisX"]["labels"] is False
    assert spec["config"]["axisX"]["ticks"] is False


def test_bar_counts_rows(small_frame: pl.DataFrame) -> None:
    spec = build_chart(ggplot(small_frame, aes(x="continent")) + geom_bar()).to_dict()
    (bar,) = layers(spec)
    assert mark_type(bar) == "bar"
    assert bar["encoding"]["y"]["aggregate"] == "count"


def test_histogram_bins(small_frame: pl.DataFrame) -> None:
    spec = build_chart(ggplot(small_frame, aes(x="life_exp")) + geom_histogram(bins=10)).to_dict()
    (bar,) = layers(spec)
    assert bar["encoding"]["x"]["bin"] == {"maxbins": 10}
    spec = build_chart(ggplot(small_frame, aes(x="life_exp")) + geom_histogram(binwidth=5)).to_dict()
    assert layers(spec)[0]["encoding"]["x"]["bin"] == {"step": 5}


def test_text_labels(small_frame: pl.DataFrame) -> None:
    spec = build_chart(
        ggplot(small_frame, aes(x="gdp_percap", y="life_exp", label="country"))
        + geom_text(dy=-8, size=9)
    ).to_dict()
    (text,) = layers(spec)
    assert text["encoding"]["text"]["field"] == "country"
    assert text["mark"]["dy"] == -8
    assert text["mark"]["fontSize"] == 9


def test_titles_and_axis_labels(scatter) -> None:
    spec = build_chart(
        scatter + geom_point() + labs(x="GDP per capita", title="Figure 1", subtitle="1997-2007")
    ).to_dict()
    assert spec["title"]["text"] == "Figure 1"
    assert spec["title"]["subtitle"] == "1997-2007"
    assert layers(spec)[0]["encoding"]["x"]["title"] == "GDP per capita"


def test_rotated_labels_and_hidden_legend(scatter) -> None:
    spec = build_chart(scatter + geom_point() + theme(x_text_angle=45, legend_position="none")).to_dict()
    assert spec["config"]["axisX"]["labelAngle"] == -45
    assert spec["config"]["legend"]["disable"] is True


def test_layer_with_own_data(small_frame: pl.DataFrame, scatter) -> None:
    highlight = small_frame.filter(pl.col("country") == "Chile")
    spec = build_chart(scatter + geom_point() + geom_point(data=highlight, color="red")).to_dict()
    red = [lay for lay in layers(spec) if lay["mark"].get("color") == "red"]
    assert len(red) == 1
    assert len(inline_rows(spec)) == 9


def test_interactive_adds_tooltips(scatter) -> None:
    spec = build_chart(scatter + geom_point(), interactive=True).to_dict()
    (point,) = layers(spec)
    assert [t["field"] for t in point["encoding"]["tooltip"]] == ["gdp_percap", "life_exp"]
    assert find_in_spec(spec, lambda d: d.get("bind") == "scales")


def test_theme_presets_configure_view(scatter) -> None:
    gray = build_chart(scatter + geom_point()).to_dict()
    assert gray["config"]["view"]["fill"] == "#EBEBEB"
    bw = build_chart(scatter + geom_point(), RenderSettings(theme="bw")).to_dict()
    assert bw["config"]["view"]["fill"] == "#FFFFFF"


def test_density_on_log_axis_is_estimated_over_log10(small_frame: pl.DataFrame) -> None:
    base = ggplot(small_frame, aes(x="gdp_percap")) + geom_density(bw=0.2)
    spec = build_chart(base + scale_x_log10()).to_dict()
    (flt,) = collect(spec, lambda d: "filter" in d)
    assert flt["filter"] == 'datum["gdp_percap"] > 0'
    calcs = {d["as"]: d["calculate"] for d in collect(spec, lambda d: "calculate" in d)}
    assert calcs == {
        "log10_gdp_percap": 'log(datum["gdp_percap"]) / LN10',
        "gdp_percap": 'pow(10, datum["log10_gdp_percap"])',
    }
    (dens,) = collect(spec, lambda d: "density" in d and "as" in d)
    assert dens["density"] == "log10_gdp_percap"
    assert dens["bandwidth"] == 0.2
    (area,) = layers(spec)
    assert area["encoding"]["x"]["field"] == "gdp_percap"
    assert area["encoding"]["x"]["scale"] == {"type": "log", "base": 10}

    linear = build_chart(base).to_dict()
    (dens,) = collect(linear, lambda d: "density" in d and "as" in d)
    assert dens["density"] == "gdp_percap"
    assert not collect(linear, lambda d: "calculate" in d)


def test_manual_colours_pin_domain_and_range(scatter) -> None:
    spec = build_chart(
        scatter
        + geom_point(aes(colour="continent"))
        + scale_color_manual(["red", "blue", "green"], breaks=["Africa", "Americas", "Asia"])
    ).to_dict()
    (point,) = layers(spec)
    assert point["encoding"]["color"]["scale"] == {
        "domain": ["Africa", "Americas", "Asia"],
        "range": ["red", "blue", "green"],
    }


def test_manual_colours_need_one_value_per_break() -> None:
    with pytest.raises(SpecError, match="lengths must match"):
        scale_color_manual(["red", "blue"], breaks=["Africa", "Americas", "Asia"])


def test_size_area_starts_at_zero(scatter) -> None:
    spec = build_chart(scatter + geom_point(aes(size="pop")) + scale_size_area(max_size=500)).to_dict()
    (point,) = layers(spec)
    assert point["encoding"]["size"]["field"] == "pop"
    assert point["encoding"]["size"]["scale"] == {"range": [0.0, 500.0], "zero": True}


def test_sqrt_scales(scatter) -> None:
    spec = build_chart(scatter + geom_point() + scale_x_sqrt() + scale_y_sqrt()).to_dict()
    (point,) = layers(spec)
    assert point["encoding"]["x"]["scale"] == {"type": "sqrt"}
    assert point["encoding"]["y"]["scale"] == {"type": "sqrt"}


def test_colour_and_fill_schemes(scatter, small_frame: pl.DataFrame) -> None:
    spec = build_chart(
        scatter + geom_point(aes(colour="continent")) + scale_color_scheme("category10")
    ).to_dict()
    assert layers(spec)[0]["encoding"]["color"]["scale"] == {"scheme": "category10"}

    spec = build_chart(
        ggplot(small_frame, aes(x="continent", y="life_exp", fill="continent"))
        + geom_boxplot()
        + scale_fill_scheme("viridis")
    ).to_dict()
    (box,) = layers(spec)
    assert box["encoding"]["color"]["field"] == "continent"
    assert box["encoding"]["color"]["scale"] == {"scheme": "viridis"}


def test_xlab_ylab_and_ggtitle(scatter) -> None:
    spec = build_chart(
        scatter + geom_point() + xlab("GDP") + ylab("Years") + ggtitle("Figure 2", subtitle="Gapminder")
    ).to_dict()
    (point,) = layers(spec)
    assert point["encoding"]["x"]["title"] == "GDP"
    assert point["encoding"]["y"]["title"] == "Years"
    assert spec["title"]["text"] == "Figure 2"
    assert spec["title"]["subtitle"] == "Gapminder"


def test_col_bars_use_y_values(small_frame: pl.DataFrame) -> None:
    spec = build_chart(ggplot(small_frame, aes(x="country", y="life_exp")) + geom_col()).to_dict()
    (bar,) = layers(spec)
    assert mark_type(bar) == "bar"
    assert bar["encoding"]["y"]["field"] == "life_exp"
    assert bar["encoding"]["y"]["type"] == "quantitative"
    assert "aggregate" not in bar["encoding"]["y"]
