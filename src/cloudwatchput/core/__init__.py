"""Core domain: models, metric building and credential resolution."""
