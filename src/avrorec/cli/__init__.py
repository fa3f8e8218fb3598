"""Command-line interface for avrorec."""
