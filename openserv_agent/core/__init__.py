"""
Core utilities for the OpenServ agent.

This package provides shared functionality such as logging configuration.
"""

from openserv_agent.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
