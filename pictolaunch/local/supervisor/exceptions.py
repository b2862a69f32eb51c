from typing import List, Optional

import psutil


class ServerStartError(RuntimeError):
    """Base class for every condition that keeps the server from coming up."""


class PortInUseError(ServerStartError):
    """The port is still bound after the release wait."""

    def __init__(self, port: int, holders: List[psutil.Process], foreign: bool = False):
        self.port = port
        self.holders = holders
        self.foreign = foreign
        owner = "an unrelated process" if foreign else "a previous server"
        super().__init__(f"Port {port} is still held by {owner}: {describe_processes(holders)}")


class ServerExitedError(ServerStartError):
    """The spawned server terminated before it became ready, usually a bind failure."""

    def __init__(self, pid: int, exit_code: Optional[int]):
        self.pid = pid
        self.exit_code = exit_code
        super().__init__(f"Server process (PID {pid}) exited with code {exit_code} before becoming ready")


class ReadinessTimeoutError(ServerStartError):
    """The server is alive but never answered the readiness probe."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Server failed to become ready at {url} within {timeout} seconds")


def describe_processes(procs: List[psutil.Process]) -> str:
    parts = []
    for proc in procs:
        try:
            parts.append(f"{proc.name()} (PID {proc.pid})")
        except psutil.Error:
            parts.append(f"PID {proc.pid}")
    return ", ".join(parts) or "unknown"
