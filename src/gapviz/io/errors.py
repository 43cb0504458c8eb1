"""
Custom exceptions for the gapviz.io module.

Purpose
- Provide IO-layer specific error types for configuration and chart export.
- Keep gapviz.core as the source of truth for dataset/spec/reshape errors (see gapviz.core.errors).

Source of truth and boundaries
- gapviz.core.errors.SpecError and friends are raised while validating charts.
- gapviz.io raises Io* errors for settings and filesystem concerns:
  - IoConfigError: invalid or unsupported configuration.
  - IoSaveError: a chart or document could not be written.

Notes
- A missing image converter is reported as RuntimeError (Altair's own convention),
  not as an Io* error.
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations


class IoError(Exception):
    """
    Base class for IO-related errors in gapviz.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from gapviz.core errors.
    """


class IoConfigError(IoError):
    """
    Raised when render configuration is invalid or unsupported.

    Examples:
        - Non-positive chart width or height
        - Unknown output format passed explicitly
    """


class IoSaveError(IoError):
    """
    Raised when writing a chart or the tour document fails.

    Notes:
        Wraps the underlying OSError (or Altair save error) as __cause__.
    """
