"""Permit workflow progression engine."""
