"""Shared helpers: request context, logging setup, and small utilities."""
