"""Domain layer: models, calculators and project-type scorers."""
