"""
Utilities module - small helpers shared by the rest of the package.
"""

from .logger import get_logger

__all__ = ["get_logger"]
