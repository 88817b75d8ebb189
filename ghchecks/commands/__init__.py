"""Command handlers for the ghchecks CLI."""
