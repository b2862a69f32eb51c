import psutil
import logging
from typing import TYPE_CHECKING, List, Set
from pictolaunch.local.supervisor import persistence, process_utils

if TYPE_CHECKING:
    from .supervisor import DevServerSupervisor

log = logging.getLogger(__name__)


def _tracked_process(manager: "DevServerSupervisor") -> List[psutil.Process]:
    """Returns the process recorded in the PID file if it is still our server."""
    pid = persistence.get_server_pid(manager)
    if pid is None or not process_utils.pid_exists(pid):
        return []
    try:
        proc = process_utils.get_process_from_pid(pid)
    except psutil.NoSuchProcess:
        return []
    if not process_utils.matches_server_signature(proc, manager.config["SERVER_SIGNATURES"]):
        log.warning(f"PID {pid} from the PID file now belongs to an unrelated process. Leaving it alone.")
        return []
    return [proc]


def identify_processes_to_stop(manager: "DevServerSupervisor") -> Set[psutil.Process]:
    """
    Identifies the server processes and their children that need to be stopped.

    Candidates are the tracked PID plus any process listening on the port
    whose command line matches a server signature. Unrelated listeners are
    reported but never included.

    :param manager: The DevServerSupervisor instance.
    :return: A set of psutil.Process objects to be stopped.
    """
    parent_procs: Set[psutil.Process] = set(_tracked_process(manager))

    listeners = process_utils.find_listening_processes(manager.port)
    ours, foreign = process_utils.split_by_signature(listeners, manager.config["SERVER_SIGNATURES"])
    parent_procs.update(ours)
    for proc in foreign:
        log.warning(f"Port {manager.port} is also held by an unrelated process (PID {proc.pid}). It will not be stopped.")

    all_procs_to_stop: Set[psutil.Process] = set(parent_procs)
    for proc in parent_procs:
        try:
            all_procs_to_stop.update(proc.children(recursive=True))
        except psutil.NoSuchProcess:
            log.debug(f"Process {proc.pid} no longer exists, skipping children retrieval.")
        except psutil.Error as e:
            log.warning(f"Cannot list the children of PID {proc.pid}: {e}")

    return all_procs_to_stop


def _terminate_processes(processes: Set[psutil.Process]) -> None:
    """Sends SIGTERM to all given processes."""
    for proc in processes:
        try:
            log.debug(f"Sending SIGTERM to {proc.name()} (PID {proc.pid})")
            proc.terminate()
        except psutil.NoSuchProcess:
            log.debug(f"Process {proc.pid} no longer exists, skipping termination.")
            continue
        except psutil.AccessDenied:
            log.warning(f"Not allowed to terminate PID {proc.pid}.")


def _forceful_kill(processes: list) -> None:
    """Forcefully kills processes that didn't terminate gracefully."""
    if not processes:
        return

    log.warning(f"{len(processes)} processes did not terminate gracefully. Forcing shutdown...")
    for proc in processes:
        try:
            log.warning(f"Killing stubborn process {proc.name()} (PID {proc.pid}).")
            proc.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            log.error(f"Not allowed to kill PID {proc.pid}. It may still hold the port.")


def graceful_shutdown_sequence(processes: Set[psutil.Process], timeout: float) -> None:
    """
    Runs the full graceful shutdown sequence for the given processes.

    :param processes: A set of psutil.Process objects to shut down.
    :param timeout: Seconds to wait after SIGTERM before killing.
    """
    _terminate_processes(processes)

    procs_list = list(processes)
    _, alive = psutil.wait_procs(procs_list, timeout=timeout)

    _forceful_kill(alive)
    if alive:
        psutil.wait_procs(alive, timeout=timeout)
