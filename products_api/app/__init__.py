"""
Application package initializer.

This package contains the FastAPI application for the products
service and its submodules: ``core`` (configuration, logging, errors
and the document store), ``schemas``, ``services`` and ``api``.
"""

from .main import app, create_app  # noqa: F401
