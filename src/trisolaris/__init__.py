"""Trisolaris – an interactive three-body simulator with a free-roaming camera."""

__version__ = "1.0.0"
