import os
import sys
import psutil
import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Tuple

if TYPE_CHECKING:
    from .supervisor import DevServerSupervisor

log = logging.getLogger(__name__)


#* --- Process Status & Discovery ---
def pid_exists(pid: int) -> bool:
    """A wrapper for psutil.pid_exists for easy testing/mocking if needed."""
    return psutil.pid_exists(pid)

def get_process_from_pid(pid: int) -> psutil.Process:
    """A wrapper for psutil.Process for easy testing/mocking if needed."""
    return psutil.Process(pid)

def _process_identity(proc: psutil.Process) -> str:
    """Returns the command line (or name) of a process as a single string."""
    try:
        cmdline = proc.cmdline()
        return " ".join(cmdline) if cmdline else proc.name()
    except psutil.Error:
        return ""

def matches_server_signature(proc: psutil.Process, signatures: Iterable[str]) -> bool:
    """
    Checks whether a process is one of our servers.

    A process matches when its own command line, or its parent's, contains one
    of the signatures. Hypercorn workers are spawned children whose command line
    does not name the app, so the parent is checked too.
    """
    candidates = [proc]
    try:
        parent = proc.parent()
        if parent is not None:
            candidates.append(parent)
    except psutil.Error:
        pass

    for candidate in candidates:
        identity = _process_identity(candidate)
        if identity and any(sig in identity for sig in signatures):
            return True
    return False

def _listening_pids_global(port: int) -> List[int]:
    """Collects PIDs listening on `port` using the system-wide connection table."""
    return [
        conn.pid for conn in psutil.net_connections(kind="inet")
        if conn.status == psutil.CONN_LISTEN and conn.laddr and conn.laddr.port == port and conn.pid
    ]

def _listening_pids_per_process(port: int) -> List[int]:
    """Slower fallback for platforms where the global table needs privileges (macOS)."""
    pids = []
    for proc in psutil.process_iter():
        try:
            for conn in proc.net_connections(kind="inet"):
                if conn.status == psutil.CONN_LISTEN and conn.laddr and conn.laddr.port == port:
                    pids.append(proc.pid)
                    break
        except psutil.Error:
            continue
    return pids

def find_listening_processes(port: int) -> List[psutil.Process]:
    """
    Returns every process with a listening socket on the given port.

    :param port: The TCP port to inspect.
    :return: A list of psutil.Process objects, without duplicates.
    """
    try:
        pids = _listening_pids_global(port)
    except psutil.AccessDenied:
        log.debug("Global connection table not accessible; scanning processes individually.")
        pids = _listening_pids_per_process(port)

    procs = []
    for pid in sorted(set(pids)):
        try:
            procs.append(get_process_from_pid(pid))
        except psutil.NoSuchProcess:
            continue
    return procs

def split_by_signature(procs: List[psutil.Process], signatures: Iterable[str]) -> Tuple[List[psutil.Process], List[psutil.Process]]:
    """Splits processes into (ours, foreign) by server signature."""
    signatures = tuple(signatures)
    ours, foreign = [], []
    for proc in procs:
        (ours if matches_server_signature(proc, signatures) else foreign).append(proc)
    return ours, foreign

#* --- Process Creation ---
def _get_popen_creation_flags() -> Dict[str, Any]:
    """Returns platform-specific flags that detach the server from the launcher."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.DETACHED_PROCESS | subprocess.CREATE_NO_WINDOW}
    return {"start_new_session": True}

def get_server_args(manager: "DevServerSupervisor") -> Tuple[List[str], Path]:
    """Returns the command-line arguments and CWD for the static server."""
    args = [
        manager.config["PYTHON_EXECUTABLE"], "-m", "hypercorn",
        "-c", str(manager.hypercorn_config_path.resolve()),
        manager.config["SERVER_APP_SPEC"],
    ]
    return args, Path(manager.config["SERVE_DIR"])

def get_server_env(manager: "DevServerSupervisor") -> Dict[str, str]:
    """Builds the environment for the server process."""
    env = os.environ.copy()
    env["PICTOLAUNCH_SERVE_DIR"] = str(manager.config["SERVE_DIR"])
    # The server must read the same overrides.json as the launcher.
    env["PICTOLAUNCH_HOME"] = str(manager.config["RUNTIME_DIR"])
    env["PICTOLAUNCH_DISABLE_CACHE"] = "1" if manager.config["DISABLE_CACHE"] else "0"
    # Make the package importable even when it is run from a source checkout.
    package_root = str(manager.config["BASE_DIR"])
    existing = env.get("PYTHONPATH")
    env["PYTHONPATH"] = package_root + (os.pathsep + existing if existing else "")
    return env

def launch_server(manager: "DevServerSupervisor") -> subprocess.Popen:
    """
    Launches the static server as a detached process.
    Its output replaces the previous contents of the server log file.

    :param manager: The DevServerSupervisor instance.
    :return: The Popen handle of the new process.
    """
    log.info(f"Starting static server on port {manager.port}...")
    args, cwd = get_server_args(manager)
    manager.server_log_path.parent.mkdir(parents=True, exist_ok=True)

    with manager.server_log_path.open("wb") as server_log:
        p = subprocess.Popen(
            args,
            stdout=server_log,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            cwd=str(cwd),
            env=get_server_env(manager),
            **_get_popen_creation_flags(),
        )

    log.info(f"Static server started with PID: {p.pid}")
    return p

#* --- Server Output ---
def read_log_tail(log_path: Path, lines: int) -> List[str]:
    """Returns the last `lines` non-empty lines of a log file."""
    if not log_path.exists():
        return []
    try:
        content = log_path.read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        log.debug(f"Could not read server log '{log_path}': {e}")
        return []
    return [line for line in content.splitlines() if line.strip()][-lines:]

def relay_server_output(manager: "DevServerSupervisor", level: int = logging.ERROR) -> None:
    """Copies the tail of the server log into the launcher's log."""
    proc_logger = logging.getLogger("proc.static_server")
    for line in read_log_tail(manager.server_log_path, manager.config["SERVER_LOG_TAIL_LINES"]):
        proc_logger.log(level, line)
