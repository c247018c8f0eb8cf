"""
Routers package for FastAPI application.
"""

from . import sizing

__all__ = ["sizing"]
