"""Validation helpers for scan output."""
