"""Skin analysis report field extraction."""

__version__ = "0.1.0"
