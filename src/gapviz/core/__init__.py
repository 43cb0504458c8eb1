"""
Core package aggregator for gapviz contracts (grammar, schema, constants, errors).

## Contracts (single source of truth)
- Grammar - aesthetics, geometries, measurement/scale/facet kinds, continents, and the
  per-geometry aesthetic requirements.
- Schema - the Observation row model.
- Constants - canonical column names and chart defaults.
- Errors - the authoring-time exception tree.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Naming policy: enum `.value` and column names are lower_snake.

## Downstream usage
- gapviz.data - validates the loaded table against `constants.OBSERVATION_COLUMNS` and
  raises `errors.SchemaError` / `errors.ReshapeError`.
- gapviz.viz - resolves aesthetics and geometries through `grammar` and raises
  `errors.SpecError` subclasses.

## Examples
```python
from gapviz.core.grammar import aesthetic_from_value, Aesthetic
aesthetic_from_value("colour") == Aesthetic.COLOR  # True
```
"""
