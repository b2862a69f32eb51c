import os
import sys
import socket
import tempfile
import contextlib
import subprocess
from pathlib import Path

# Keep the real ~/.pictolaunch out of the test run; must happen before import.
os.environ["PICTOLAUNCH_HOME"] = tempfile.mkdtemp(prefix="pictolaunch-tests-")

import psutil
import pytest

from pictolaunch.local.supervisor import DevServerSupervisor


class FakeProc:
    """Stand-in for psutil.Process with a fixed command line."""

    def __init__(self, pid, cmdline, parent=None, name="python"):
        self.pid = pid
        self._cmdline = cmdline
        self._parent = parent
        self._name = name

    def cmdline(self):
        return self._cmdline

    def name(self):
        return self._name

    def parent(self):
        return self._parent

    def children(self, recursive=False):
        return []


@pytest.fixture
def serve_dir(tmp_path: Path) -> Path:
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text("<html><body><h1>PictoCalc</h1></body></html>")
    (site / "menu-config.json").write_text('{"items": [{"name": "Latte", "price": 3.5}]}')
    return site


@pytest.fixture
def make_supervisor(tmp_path: Path, serve_dir: Path):
    """Builds supervisors with an isolated runtime directory and short timeouts."""
    def _make(**overrides) -> DevServerSupervisor:
        runtime = tmp_path / "runtime"
        config = {
            "RUNTIME_DIR": runtime,
            "LOGS_DIR": runtime / "logs",
            "SERVE_DIR": serve_dir,
            "OPEN_BROWSER": False,
            "PORT_RELEASE_TIMEOUT": 0.5,
            "PORT_RELEASE_POLL_INTERVAL": 0.05,
            "READINESS_TIMEOUT": 0.5,
            "READINESS_POLL_INTERVAL": 0.05,
            "GRACEFUL_SHUTDOWN_TIMEOUT": 3.0,
        }
        config.update(overrides)
        return DevServerSupervisor(config)
    return _make


@pytest.fixture
def spawn_sleeper():
    """Spawns real idle processes whose command line carries the given marker."""
    procs = []

    def _spawn(marker: str = "pictolaunch.web.setup:app") -> subprocess.Popen:
        p = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)", marker])
        procs.append(p)
        return p

    yield _spawn
    for p in procs:
        if p.poll() is None:
            p.kill()
        p.wait(timeout=5)


@pytest.fixture
def free_port() -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def is_alive(pid: int) -> bool:
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False
