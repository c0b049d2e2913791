"""Carrier Rates - normalized shipping rate quotes across carriers."""

__version__ = "0.1.0"
