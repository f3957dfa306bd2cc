"""
Pipeline Package for the Sticker Conformer.

- `sticker_pipeline` wires classification, staging and the two engines into a
  single conversion.
- `boundary` is the outermost layer: it admits requests per caller, runs them
  concurrently and turns failures into user-facing messages.
"""
