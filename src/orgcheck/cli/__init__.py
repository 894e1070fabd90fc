"""Command-line interface for orgcheck."""
