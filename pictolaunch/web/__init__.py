"""
Web application package for the PictoCalc launcher.

This package contains the static file server application run by the spawned
server process, and its middleware.
"""
