"""
The guided tour: an ordered sequence of small exercises over the gapminder table.

Each Lesson pairs a short markdown explanation with a `build(data)` function that returns
either a ChartSpec (drawn) or a Polars DataFrame (shown as a table). Lessons are
independent: each one starts again from the full table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Literal, Union

import polars as pl

from gapviz.core.constants import CONTINENT, COUNTRY, GDP_PERCAP, LAST_YEAR, LIFE_EXP, YEAR
from gapviz.core.errors import LessonNotFoundError
from gapviz.data.dataset import filter_observations, load_gapminder
from gapviz.data.reshape import pivot_longer
from gapviz.data.summaries import (
    POP_MILLIONS,
    keep_countries,
    largest_life_exp_gains,
    population_millions_wide,
    with_continent_means,
)
from gapviz.viz import (
    ChartSpec,
    aes,
    facet_wrap,
    factor,
    geom_bar,
    geom_boxplot,
    geom_density,
    geom_line,
    geom_point,
    geom_smooth,
    ggplot,
    labs,
    scale_x_log10,
    theme,
)

logger = logging.getLogger(__name__)

__all__ = ["Lesson", "LessonResult", "LESSONS", "get_lesson", "run_lesson", "run_tour"]

LessonOutput = Union[ChartSpec, pl.DataFrame]


@dataclass(frozen=True)
class Lesson:
    """
    One step of the tour.

    Attributes:
        slug (str): Stable identifier used by the CLI and viewer.
        section (str): Heading the lesson is grouped under.
        title (str): Short title.
        prose (str): Markdown explanation shown above the output.
        build (Callable[[pl.DataFrame], ChartSpec | pl.DataFrame]): Produces the output
            from the full table.
    """

    slug: str
    section: str
    title: str
    prose: str
    build: Callable[[pl.DataFrame], LessonOutput]


@dataclass(frozen=True, eq=False)
class LessonResult:
    lesson: Lesson
    output: LessonOutput

    @property
    def kind(self) -> Literal["chart", "table"]:
        return "table" if isinstance(self.output, pl.DataFrame) else "chart"


# ----------------------------
# Building a plot layer by layer
# ----------------------------


def _first_scatter(data: pl.DataFrame) -> ChartSpec:
    return ggplot(data, aes(x=GDP_PERCAP, y=LIFE_EXP)) + geom_point()


def _life_exp_over_time(data: pl.DataFrame) -> ChartSpec:
    return ggplot(data, aes(x=YEAR, y=LIFE_EXP)) + geom_point()


def _colour_by_continent(data: pl.DataFrame) -> ChartSpec:
    return ggplot(data, aes(x=YEAR, y=LIFE_EXP, colour=CONTINENT)) + geom_point()


def _lines_by_country(data: pl.DataFrame) -> ChartSpec:
    return ggplot(data, aes(x=YEAR, y=LIFE_EXP, group=COUNTRY, colour=CONTINENT)) + geom_line()


def _lines_and_points(data: pl.DataFrame) -> ChartSpec:
    return (
        ggplot(data, aes(x=YEAR, y=LIFE_EXP, group=COUNTRY))
        + geom_line(aes(colour=CONTINENT))
        + geom_point()
    )


# ----------------------------
# Transformations and statistics
# ----------------------------


def _log_scale(data: pl.DataFrame) -> ChartSpec:
    return ggplot(data, aes(x=GDP_PERCAP, y=LIFE_EXP)) + geom_point(alpha=0.5) + scale_x_log10()


def _smoothing(data: pl.DataFrame) -> ChartSpec:
    return (
        ggplot(data, aes(x=GDP_PERCAP, y=LIFE_EXP))
        + geom_point(alpha=0.5)
        + scale_x_log10()
        + geom_smooth(method="lm")
    )


def _smoothing_thickness(data: pl.DataFrame) -> ChartSpec:
    return (
        ggplot(data, aes(x=GDP_PERCAP, y=LIFE_EXP))
        + geom_point(aes(colour=CONTINENT), alpha=0.5)
        + scale_x_log10()
        + geom_smooth(method="lm", linewidth=4)
    )


def _colour_and_shape(data: pl.DataFrame) -> ChartSpec:
    return (
        ggplot(data, aes(x=GDP_PERCAP, y=LIFE_EXP))
        + geom_point(aes(colour=CONTINENT, shape=CONTINENT), size=60, alpha=0.5)
        + scale_x_log10()
        + geom_smooth(method="lm", linewidth=3)
    )


# ----------------------------
# Multi-panel figures and labels
# ----------------------------


def _americas_small_multiples(data: pl.DataFrame) -> ChartSpec:
    americas = filter_observations(data, continent="Americas")
    return (
        ggplot(americas, aes(x=YEAR, y=LIFE_EXP))
        + geom_line()
        + facet_wrap(COUNTRY, ncol=5)
        + theme(x_text_angle=45)
    )


def _labels_and_titles(data: pl.DataFrame) -> ChartSpec:
    americas = filter_observations(data, continent="Americas")
    return (
        ggplot(americas, aes(x=YEAR, y=LIFE_EXP, colour=COUNTRY))
        + geom_line()
        + facet_wrap(COUNTRY, ncol=5)
        + labs(x="Year", y="Life expectancy", title="Figure 1", colour="Country")
        + theme(x_text_angle=45, legend_position="none")
    )


def _gdp_density(data: pl.DataFrame) -> ChartSpec:
    return (
        ggplot(data, aes(x=GDP_PERCAP, fill=CONTINENT))
        + geom_density(alpha=0.6)
        + facet_wrap(factor(YEAR), ncol=4)
        + scale_x_log10()
        + labs(x="GDP per capita", fill="Continent")
    )


def _life_exp_boxplots(data: pl.DataFrame) -> ChartSpec:
    return (
        ggplot(data, aes(x=CONTINENT, y=LIFE_EXP, fill=CONTINENT))
        + geom_boxplot()
        + facet_wrap(factor(YEAR), ncol=4)
        + labs(y="Life expectancy", fill="Continent")
        + theme(hide_x_text=True, hide_x_ticks=True, hide_x_title=True)
    )


# ----------------------------
# Reshaping and summaries
# ----------------------------


def _population_wide(data: pl.DataFrame) -> pl.DataFrame:
    return population_millions_wide(data, ("Syria", "Rwanda", "Chile"), year_min=1997)


def _population_long(data: pl.DataFrame) -> pl.DataFrame:
    wide = population_millions_wide(data, ("Syria", "Rwanda", "Chile"), year_min=1997)
    return pivot_longer(
        wide, id_cols=COUNTRY, names_to=YEAR, values_to=POP_MILLIONS, names_dtype=pl.Int64
    ).sort(COUNTRY, YEAR)


def _largest_gains(data: pl.DataFrame) -> pl.DataFrame:
    return largest_life_exp_gains(data, n=5)


def _largest_gains_trajectories(data: pl.DataFrame) -> ChartSpec:
    top = largest_life_exp_gains(data, n=5)
    return (
        ggplot(keep_countries(data, top), aes(x=YEAR, y=LIFE_EXP, colour=COUNTRY))
        + geom_line()
        + geom_point()
        + labs(y="Life expectancy", title="Largest changes in life expectancy, 1952-2007")
    )


def _continent_gaps(data: pl.DataFrame) -> ChartSpec:
    joined = with_continent_means(data)
    return (
        ggplot(joined, aes(x=YEAR, y="life_exp_vs_continent", group=COUNTRY, colour=CONTINENT))
        + geom_line(alpha=0.4)
        + facet_wrap(CONTINENT, ncol=5)
        + labs(y="Life expectancy minus continent mean")
        + theme(legend_position="none", x_text_angle=45)
    )


def _countries_per_continent(data: pl.DataFrame) -> ChartSpec:
    latest = filter_observations(data, year_min=LAST_YEAR, year_max=LAST_YEAR)
    return (
        ggplot(latest, aes(x=CONTINENT, fill=CONTINENT))
        + geom_bar()
        + labs(y="Number of countries", title=f"Countries per continent, {LAST_YEAR}")
        + theme(legend_position="none")
    )


_BASICS = "Building a plot layer by layer"
_STATS = "Transformations and statistics"
_PANELS = "Multi-panel figures"
_RESHAPE = "Reshaping and summaries"

LESSONS: tuple[Lesson, ...] = (
    Lesson(
        "first-scatter",
        _BASICS,
        "A first scatter plot",
        "Every plot starts from **data** and an **aesthetic mapping**. Here GDP per capita goes "
        "on the x axis and life expectancy on the y axis; `geom_point()` draws one point per row.",
        _first_scatter,
    ),
    Lesson(
        "life-exp-over-time",
        _BASICS,
        "Life expectancy over time",
        "Swapping the x mapping to `year` shows how life expectancy changed. Each column of "
        "points is one survey year, sampled every five years from 1952 to 2007.",
        _life_exp_over_time,
    ),
    Lesson(
        "colour-by-continent",
        _BASICS,
        "Colour by continent",
        "Mapping `colour` to the continent adds a legend and a discrete palette. Aesthetics "
        "other than position are mapped the same way as x and y.",
        _colour_by_continent,
    ),
    Lesson(
        "lines-by-country",
        _BASICS,
        "Lines per country",
        "`geom_line()` connects observations in x order. Without a `group` mapping every "
        "point of a colour would be joined into one zig-zag line; grouping by country draws "
        "one line per country.",
        _lines_by_country,
    ),
    Lesson(
        "lines-and-points",
        _BASICS,
        "Layering lines and points",
        "Layers are drawn in the order they are added. The colour mapping sits on the line "
        "layer only, so the points stay black and are drawn on top of the lines.",
        _lines_and_points,
    ),
    Lesson(
        "log-scale",
        _STATS,
        "A log scale and transparency",
        "GDP per capita is heavily skewed. `scale_x_log10()` spreads the poorer countries out, "
        "and `alpha=0.5` makes overlapping points visible.",
        _log_scale,
    ),
    Lesson(
        "smoothing",
        _STATS,
        "Adding a trend",
        "`geom_smooth(method=\"lm\")` fits a straight line. With the log x scale the line is "
        "fitted against log(GDP per capita), so it stays straight on this axis.",
        _smoothing,
    ),
    Lesson(
        "smoothing-thickness",
        _STATS,
        "Styling the trend line",
        "Fixed settings such as `linewidth=4` are passed as arguments rather than mapped. "
        "The colour mapping on the point layer leaves the single trend line untouched.",
        _smoothing_thickness,
    ),
    Lesson(
        "colour-and-shape",
        _STATS,
        "Challenge: colour and shape",
        "Map both colour and shape to continent, and enlarge the points. Two channels carrying "
        "the same variable share a single legend.",
        _colour_and_shape,
    ),
    Lesson(
        "americas-small-multiples",
        _PANELS,
        "Small multiples",
        "`facet_wrap()` draws one panel per country of the Americas. Rotated x labels keep the "
        "years readable in narrow panels.",
        _americas_small_multiples,
    ),
    Lesson(
        "labels-and-titles",
        _PANELS,
        "Labels and titles",
        "`labs()` replaces the column names on axes and legends and adds a title. The legend "
        "is redundant with the panel headers, so the theme hides it.",
        _labels_and_titles,
    ),
    Lesson(
        "gdp-density",
        _PANELS,
        "Density of GDP per capita",
        "Facet variables must be categorical: `factor(year)` turns the numeric year into "
        "ordered categories, giving one panel per year with one density curve per continent.",
        _gdp_density,
    ),
    Lesson(
        "life-exp-boxplots",
        _PANELS,
        "Boxplots by continent",
        "Boxplots need a discrete x and a continuous y. The fill legend already names the "
        "continents, so the x labels, ticks, and title are hidden.",
        _life_exp_boxplots,
    ),
    Lesson(
        "population-wide",
        _RESHAPE,
        "From long to wide",
        "The table is *long*: one row per country and year. Spreading the years into columns "
        "gives a *wide* table of population in millions for Syria, Rwanda, and Chile since 1997.",
        _population_wide,
    ),
    Lesson(
        "population-long",
        _RESHAPE,
        "Back to long",
        "`pivot_longer()` stacks the year columns back into rows. Converting the headers back "
        "to integers recovers exactly the rows that were spread.",
        _population_long,
    ),
    Lesson(
        "largest-gains",
        _RESHAPE,
        "Largest changes in life expectancy",
        "Group by country, compute max minus min life expectancy, and keep the top five.",
        _largest_gains,
    ),
    Lesson(
        "largest-gains-trajectories",
        _RESHAPE,
        "Their trajectories",
        "A semi-join keeps the rows of the full table whose country is among the top five, "
        "ready to draw.",
        _largest_gains_trajectories,
    ),
    Lesson(
        "continent-gaps",
        _RESHAPE,
        "Joining continent means",
        "Continent means per year are joined back onto every row; each line shows how far a "
        "country sits above or below its continent.",
        _continent_gaps,
    ),
    Lesson(
        "countries-per-continent",
        _RESHAPE,
        "Counting countries",
        "`geom_bar()` counts rows. Restricted to a single year, that is the number of countries "
        "per continent.",
        _countries_per_continent,
    ),
)


def get_lesson(slug: str) -> Lesson:
    """Return the lesson with `slug`.

    Raises:
        LessonNotFoundError: If no lesson has that slug.
    """
    for lesson in LESSONS:
        if lesson.slug == slug:
            return lesson
    raise LessonNotFoundError(f"unknown lesson {slug!r} (known: {[ls.slug for ls in LESSONS]})")


def run_lesson(lesson: Lesson | str, data: pl.DataFrame | None = None) -> LessonResult:
    """Build one lesson's output from the full table (loaded when data is None)."""
    if isinstance(lesson, str):
        lesson = get_lesson(lesson)
    frame = load_gapminder() if data is None else data
    output = lesson.build(frame)
    logger.debug("ran lesson %s -> %s", lesson.slug, type(output).__name__)
    return LessonResult(lesson=lesson, output=output)


def run_tour(
    data: pl.DataFrame | None = None, lessons: Iterable[Lesson] = LESSONS
) -> list[LessonResult]:
    """Run lessons in order, each from the same full table."""
    frame = load_gapminder() if data is None else data
    return [run_lesson(lesson, frame) for lesson in lessons]
