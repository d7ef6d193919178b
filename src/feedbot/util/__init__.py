"""Logging and formatting helpers."""
