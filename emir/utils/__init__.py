"""Utility modules for the EMIR card compositor."""

from .logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
