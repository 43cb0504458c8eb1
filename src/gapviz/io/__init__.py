"""
gapviz.io - Settings and file output for charts and the tour document.

## Responsibilities
- Load render configuration with precedence environment > TOML > defaults.
- Export charts to HTML, PNG, SVG, or Vega-Lite JSON.

## Public API
- RenderSettings - chart size, theme, export format, document title, log level.
- save / save_chart - chart export helpers.

## Import DAG discipline
- Depends only on stdlib, altair, and gapviz.core.*.
- MUST NOT import gapviz.viz, gapviz.tour, or app.

## Examples
```python
from gapviz.io import RenderSettings, save_chart
settings = RenderSettings.load()  # gapviz.toml / pyproject.toml / GAPVIZ_* env
save_chart(chart, "out/figure1.html", settings=settings)  # doctest: +SKIP
```
"""

from __future__ import annotations

from .config import RenderSettings
from .save import save, save_chart

__all__ = [
    "RenderSettings",
    "save",
    "save_chart",
]
