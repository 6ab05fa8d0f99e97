"""Shared helpers used across the definitions client and the CLI."""
