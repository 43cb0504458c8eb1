"""
Configuration for chart rendering and document output.

Defines RenderSettings, a frozen dataclass carrying runtime configuration for how charts
are sized, themed, and written. Defaults are sourced from gapviz.core.constants (the
single source of truth).

Source of truth
- gapviz.core.constants.DEFAULT_WIDTH, DEFAULT_HEIGHT, DEFAULT_THEME
- THEME_NAMES lists the presets in gapviz.viz.theme.THEMES; this module stays free of
  altair imports, so the two are kept in step by a test.

Import DAG discipline
- Depends only on stdlib and gapviz.core.constants.
- Does not import higher layers (viz, tour, app).

Notes
- Precedence is environment > TOML > defaults.
- Unparseable values are ignored and the previous value is kept.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

try:  # Python 3.11+ stdlib TOML parser
    import tomllib  # type: ignore
except Exception:  # pragma: no cover - environments without tomllib
    tomllib = None  # type: ignore[assignment]

from gapviz.core.constants import DEFAULT_HEIGHT, DEFAULT_THEME, DEFAULT_WIDTH

from .errors import IoConfigError

ImageFormat = Literal["html", "png", "svg", "json"]

IMAGE_FORMATS: frozenset[str] = frozenset({"html", "png", "svg", "json"})
THEME_NAMES: frozenset[str] = frozenset({"gray", "bw", "minimal", "classic"})
LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class RenderSettings:
    """
    Runtime settings for rendering charts and the tour document.

    Attributes:
        out_dir (str): Directory under which charts and the document are written.
        width (int): Width in pixels of a single (unfaceted) view.
        height (int): Height in pixels of a single (unfaceted) view.
        theme (str): Base theme applied when a chart sets none ("gray", "bw", "minimal", "classic").
        image_format (Literal["html","png","svg","json"]): Default export format.
        scale_factor (float): Pixel density multiplier for PNG export.
        document_title (str): Title of the rendered tour document.
        log_level (str): Root logging level used by the CLI.

    Examples:
        >>> from gapviz.io import RenderSettings
        >>> RenderSettings(width=800, theme="bw")  # doctest: +ELLIPSIS
        RenderSettings(...)
    """

    out_dir: str = "out"
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    theme: str = DEFAULT_THEME
    image_format: ImageFormat = "html"
    scale_factor: float = 2.0
    document_title: str = "A layered grammar of graphics with gapminder"
    log_level: str = "INFO"

    def validate(self) -> RenderSettings:
        """
        Check ranges that cannot be repaired by ignoring a value.

        Returns:
            RenderSettings: self, for chaining.

        Raises:
            IoConfigError: If width, height, or scale_factor is not positive, or the
                theme/format is unknown.
        """
        if self.width <= 0 or self.height <= 0:
            raise IoConfigError(f"chart size must be positive (got {self.width}x{self.height})")
        if self.scale_factor <= 0:
            raise IoConfigError(f"scale_factor must be positive (got {self.scale_factor})")
        if self.theme not in THEME_NAMES:
            raise IoConfigError(f"unknown theme {self.theme!r} (known: {sorted(THEME_NAMES)})")
        if self.image_format not in IMAGE_FORMATS:
            raise IoConfigError(
                f"unknown image format {self.image_format!r} (known: {sorted(IMAGE_FORMATS)})"
            )
        return self

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: RenderSettings, cfg: dict[str, Any] | None) -> RenderSettings:
        """Apply a loose config mapping onto RenderSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "out_dir" in cfg and isinstance(cfg["out_dir"], str):
            s = replace(s, out_dir=cfg["out_dir"])

        for key in ("width", "height"):
            if key in cfg:
                try:
                    s = replace(s, **{key: int(cfg[key])})
                except (TypeError, ValueError):
                    pass

        if "scale_factor" in cfg:
            try:
                s = replace(s, scale_factor=float(cfg["scale_factor"]))
            except (TypeError, ValueError):
                pass

        if "theme" in cfg and isinstance(cfg["theme"], str):
            theme = cfg["theme"].strip().lower()
            if theme in THEME_NAMES:
                s = replace(s, theme=theme)

        if "image_format" in cfg and isinstance(cfg["image_format"], str):
            fmt = cfg["image_format"].strip().lower()
            if fmt in IMAGE_FORMATS:
                s = replace(s, image_format=fmt)  # type: ignore[arg-type]

        if "document_title" in cfg and isinstance(cfg["document_title"], str):
            s = replace(s, document_title=cfg["document_title"])

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            level = cfg["log_level"].strip().upper()
            if level in LOG_LEVELS:
                s = replace(s, log_level=level)

        return s

    @classmethod
    def from_env(
        cls, base: RenderSettings | None = None, prefix: str = "GAPVIZ_"
    ) -> RenderSettings:
        """
        Build RenderSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - GAPVIZ_OUT_DIR
            - GAPVIZ_WIDTH, GAPVIZ_HEIGHT
            - GAPVIZ_THEME ("gray" | "bw" | "minimal" | "classic")
            - GAPVIZ_IMAGE_FORMAT ("html" | "png" | "svg" | "json")
            - GAPVIZ_SCALE_FACTOR
            - GAPVIZ_DOCUMENT_TITLE
            - GAPVIZ_LOG_LEVEL
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for key in (
            "out_dir",
            "width",
            "height",
            "theme",
            "image_format",
            "scale_factor",
            "document_title",
            "log_level",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> RenderSettings:
        """
        Build RenderSettings from a TOML file.

        Search order when `path` is None:
            1) ./gapviz.toml (with either a [render] table or top-level keys)
            2) ./pyproject.toml under [tool.gapviz.render]

        Returns defaults if no file present or tomllib is unavailable.
        """
        s = cls()
        if tomllib is None:
            return s

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)  # type: ignore[arg-type]
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cfg: dict[str, Any] | None = None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "gapviz.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = (
                    tool.get("gapviz", {}).get("render", {})  # type: ignore[assignment]
                    if isinstance(tool, dict)
                    else None
                )
            else:
                if "render" in data and isinstance(data["render"], dict):
                    cfg = data["render"]
                else:
                    cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> RenderSettings:
        """
        Load RenderSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (gapviz.toml, pyproject.toml).

        Returns:
            RenderSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
