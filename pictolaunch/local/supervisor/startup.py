import time
import logging
import subprocess
import requests
from typing import TYPE_CHECKING, List, Optional
from pictolaunch.local.supervisor import process_utils
from pictolaunch.local.supervisor.exceptions import PortInUseError, ReadinessTimeoutError, ServerExitedError

if TYPE_CHECKING:
    import psutil
    from .supervisor import DevServerSupervisor

log = logging.getLogger(__name__)


def wait_for_port_release(manager: "DevServerSupervisor") -> None:
    """
    Polls the port until no process listens on it.

    :param manager: The DevServerSupervisor instance.
    :raises PortInUseError: If the port is held by an unrelated process, or
        still held by one of our servers after PORT_RELEASE_TIMEOUT.
    """
    port = manager.port
    timeout = manager.config["PORT_RELEASE_TIMEOUT"]
    interval = manager.config["PORT_RELEASE_POLL_INTERVAL"]

    signatures = manager.config["SERVER_SIGNATURES"]
    start_time = time.monotonic()
    holders: List["psutil.Process"] = process_utils.find_listening_processes(port)
    while holders:
        ours, foreign = process_utils.split_by_signature(holders, signatures)
        # An unrelated process will not release the port because we stopped ours.
        if not ours or time.monotonic() - start_time >= timeout:
            raise PortInUseError(port, holders, foreign=bool(foreign))
        log.debug(f"Port {port} still bound, waiting for release...")
        time.sleep(interval)
        holders = process_utils.find_listening_processes(port)
    log.debug(f"Port {port} is free.")


def probe(url: str, timeout: float) -> Optional[int]:
    """
    Issues a single readiness request.

    :param url: The URL to request.
    :param timeout: Per-request timeout in seconds.
    :return: The HTTP status code, or None if no response was received.
    """
    try:
        with requests.Session() as session:
            # Proxy settings from the environment must not apply to a local server.
            session.trust_env = False
            response = session.get(url, timeout=timeout)
        return response.status_code
    except requests.exceptions.RequestException as e:
        log.debug(f"Readiness probe against '{url}' failed: {e}")
        return None


def wait_for_server_ready(manager: "DevServerSupervisor", process: subprocess.Popen) -> int:
    """
    Waits for the server to answer HTTP requests on its root URL.

    Any response counts as ready; a server that answers with an error status
    is up but is logged as a warning.

    :param manager: The DevServerSupervisor instance.
    :param process: The Popen handle of the spawned server.
    :return: The HTTP status code of the first response.
    :raises ServerExitedError: If the process terminates before answering.
    :raises ReadinessTimeoutError: If no response arrives within READINESS_TIMEOUT.
    """
    url = manager.probe_url
    timeout = manager.config["READINESS_TIMEOUT"]
    interval = manager.config["READINESS_POLL_INTERVAL"]
    request_timeout = manager.config["PROBE_REQUEST_TIMEOUT"]

    log.info(f"Waiting for static server at {url}...")
    start_time = time.monotonic()
    while time.monotonic() - start_time < timeout:
        exit_code = process.poll()
        if exit_code is not None:
            raise ServerExitedError(process.pid, exit_code)

        status = probe(url, request_timeout)
        if status is not None:
            if status >= 400:
                log.warning(f"Server is up but '{url}' answered with HTTP {status}. Is there an index.html in the served directory?")
            else:
                log.info(f"Static server is up and answering (HTTP {status}).")
            return status
        time.sleep(interval)

    # The server may have died during the last interval.
    exit_code = process.poll()
    if exit_code is not None:
        raise ServerExitedError(process.pid, exit_code)
    raise ReadinessTimeoutError(url, timeout)
