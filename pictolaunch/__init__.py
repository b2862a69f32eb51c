"""
PictoCalc launcher.

Starts, health-checks and stops the local static file server used to preview
the PictoCalc menu app, and opens a browser against it.
"""

__version__ = "1.0.0"
