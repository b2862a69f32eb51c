"""
Local package for the PictoCalc launcher.

This package provides launcher-level configuration through the app_globals
singleton, the server supervisor and the console commands.
"""

from .global_config import app_globals

__all__ = ["app_globals"]
