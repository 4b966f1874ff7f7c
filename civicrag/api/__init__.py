"""
FastAPI Application Module

Provides the REST API for the civic assistant.
"""

from .main import app

__all__ = ["app"]
