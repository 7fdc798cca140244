"""Domain layer: fixture models, errors and ports."""
