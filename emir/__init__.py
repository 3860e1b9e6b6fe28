"""EMIR social media card compositor."""

__version__ = "1.0.0"
