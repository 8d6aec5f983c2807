"""Shared handler utilities."""
