"""Utility functions for hwvault."""

from .imports import safe_import
from .logging_config import setup_logging

__all__ = ["safe_import", "setup_logging"]
