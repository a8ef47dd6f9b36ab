"""Utility helpers shared across the simevo codebase."""

from simevo.utils.logger_setup import setup_logger

__all__ = ["setup_logger"]
