"""Utilities: logging setup and path resolution."""
