"""Courtside: envelope normalisation and frame sampling for coaching video review."""

__version__ = "0.1.0"
