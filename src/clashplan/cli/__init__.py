"""Command-line interface for clashplan."""
