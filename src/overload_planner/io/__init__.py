"""Training log storage and JSON serialization."""
