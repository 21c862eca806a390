"""Flat-rate income tax on foreign securities trading."""

__version__ = "0.1.0"
