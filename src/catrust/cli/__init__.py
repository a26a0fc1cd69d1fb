"""Command-line interface for catrust."""
