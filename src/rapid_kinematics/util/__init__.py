"""Utilities: logging and file-system helpers."""
