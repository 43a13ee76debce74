"""recnorm API package.

This module provides an optional FastAPI service layer that normalizes
request bodies against registered record types.
"""

from .server import create_app  # noqa: F401
