import json
import time
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .supervisor import DevServerSupervisor

log = logging.getLogger(__name__)

SERVER_KEY = "static_server"


def get_pid_info(manager: "DevServerSupervisor") -> Optional[Dict[str, Any]]:
    """
    Reads the PID file from disk and returns its contents.
    A malformed file is removed so the next start begins clean.

    :param manager: The DevServerSupervisor instance.
    :return: The PID record if the file exists and is valid, else None.
    """
    pid_path = manager.pid_file_path
    if not pid_path.exists():
        return None
    try:
        with pid_path.open("r") as f:
            info = json.load(f)
        if not isinstance(info, dict) or not isinstance(info.get(SERVER_KEY), int):
            log.warning(f"Removing invalid PID file '{pid_path}'.")
            pid_path.unlink(missing_ok=True)
            return None
        manager.pids_on_disk = info
        return info
    except (json.JSONDecodeError, IOError):
        log.warning(f"Removing unreadable PID file '{pid_path}'.")
        pid_path.unlink(missing_ok=True)
        return None


def get_server_pid(manager: "DevServerSupervisor") -> Optional[int]:
    """Returns the tracked server PID, or None when nothing is recorded."""
    info = get_pid_info(manager)
    return info[SERVER_KEY] if info else None


def write_pid_file(manager: "DevServerSupervisor", pid: int) -> None:
    """
    Atomically writes the server PID record to the PID file.

    :param manager: The DevServerSupervisor instance.
    :param pid: The PID of the spawned server process.
    """
    record = {
        SERVER_KEY: pid,
        "port": manager.port,
        "serve_dir": str(manager.config["SERVE_DIR"]),
        "started_at": time.time(),
    }
    pid_path = manager.pid_file_path
    temp_pid_path = pid_path.with_suffix(".tmp")
    try:
        pid_path.parent.mkdir(parents=True, exist_ok=True)
        with temp_pid_path.open("w") as f:
            json.dump(record, f, indent=4)
        temp_pid_path.replace(pid_path)
        manager.pids_on_disk = record
    except (IOError, OSError) as e:
        log.error(f"Failed to write PID file: {e}", exc_info=True)
    finally:
        temp_pid_path.unlink(missing_ok=True)


def clear_pid_file(manager: "DevServerSupervisor") -> None:
    """Removes the PID file."""
    manager.pid_file_path.unlink(missing_ok=True)
    manager.pids_on_disk = {}
    log.debug("Cleaned up PID file.")
