"""
Exception handlers for the agent server.

This package contains the application-wide exception handlers and a setup
function to register them with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
