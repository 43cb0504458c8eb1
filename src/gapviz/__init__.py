"""
gapviz - a guided tour of the layered grammar of graphics over the gapminder table.

## Packages
- gapviz.core - column names, grammar enums, the Observation model, and errors.
- gapviz.data - loading, validating, filtering, summarising, and reshaping the table.
- gapviz.viz - chart specs composed with `+`, validated and rendered with Altair.
- gapviz.io - render settings (env > TOML > defaults) and chart export.
- gapviz.tour - the ordered lessons and the HTML document built from them.
- gapviz.cli - the `gapviz` command.

## Import DAG discipline
core <- data <- viz <- tour <- cli; io.config and io.save sit beside data and are used by
viz, tour, and cli. The Streamlit viewer lives in the separate `app` package.
"""

__version__ = "0.1.0"
