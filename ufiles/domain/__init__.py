"""Domain layer: value types, options, errors and the visitor port."""
