"""
Middleware package for the static file server.
"""

from .headers import DevHeadersMiddleware

__all__ = ["DevHeadersMiddleware"]
