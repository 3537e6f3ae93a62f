"""Command-line interface for extractflow."""
