"""Shared helpers for CLI handlers."""
