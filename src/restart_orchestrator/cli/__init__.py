"""Command line interface for restartctl."""
