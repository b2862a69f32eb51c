"""
The Supervisor package.
Manages the lifecycle of the local static file server.

This package contains the central DevServerSupervisor class and its helper
modules, which together handle starting, probing, stopping and discovering
the server process, and opening the browser.
"""
from .supervisor import DevServerSupervisor
from .exceptions import ServerStartError, PortInUseError, ServerExitedError, ReadinessTimeoutError

__all__ = [
    'DevServerSupervisor',
    'ServerStartError', 'PortInUseError', 'ServerExitedError', 'ReadinessTimeoutError',
]
