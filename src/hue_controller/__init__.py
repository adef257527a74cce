"""Hue group command translation with debounced alert restoration."""

__version__ = "0.3.0"
