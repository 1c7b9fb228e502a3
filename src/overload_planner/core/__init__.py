"""Recommendation engine: models, rules and pure computations."""
