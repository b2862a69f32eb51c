import time
import psutil
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional
from pictolaunch.local import app_globals
from pictolaunch.local.supervisor import browser, config_utils, persistence, process_utils, shutdown, startup
from pictolaunch.local.supervisor.exceptions import PortInUseError, ServerExitedError, ServerStartError

log = logging.getLogger(__name__)


class DevServerSupervisor:
    """
    Manages the lifecycle of the local static file server.

    Start is idempotent: it stops whatever instance of our server holds the
    port, waits for the port to be released, launches a fresh detached server,
    waits for it to answer and opens the browser. Every step is best-effort;
    failures are logged and the sequence always reaches the browser step.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initializes the supervisor state.

        :param config: Optional settings overriding the effective configuration.
        """
        self.config: Dict[str, Any] = dict(app_globals.get_all_settings())
        if config:
            self.config.update(config)

        runtime_dir = Path(self.config["RUNTIME_DIR"])
        logs_dir = Path(self.config["LOGS_DIR"])
        self.pid_file_path = runtime_dir / self.config["PID_FILE_TEMPLATE"].format(port=self.port)
        self.hypercorn_config_path = runtime_dir / self.config["HYPERCORN_CONFIG_TEMPLATE_NAME"].format(port=self.port)
        self.server_log_path = logs_dir / self.config["SERVER_LOG_TEMPLATE"].format(port=self.port)

        self.pids_on_disk: Dict[str, Any] = {}
        self.server_process: Optional[subprocess.Popen] = None
        self.ready = False
        self.browser_opened = False

    @property
    def port(self) -> int:
        return int(self.config["WEB_SERVER_PORT"])

    @property
    def url(self) -> str:
        """The address shown to the user and opened in the browser."""
        return f"http://{self.config['PUBLIC_HOSTNAME']}:{self.port}/"

    @property
    def probe_url(self) -> str:
        """The address used for readiness probes, which skips name resolution."""
        host = self.config["WEB_SERVER_HOST"]
        if host in ("0.0.0.0", "::", ""):
            host = "127.0.0.1"
        return f"http://{host}:{self.port}/"

    @property
    def server_pid(self) -> Optional[int]:
        return self.server_process.pid if self.server_process else None

    def start(self) -> bool:
        """
        Runs the full start sequence.

        :return: True if the server answered the readiness probe, False otherwise.
        """
        log.info("=" * 20 + f" {self.config['APP_NAME']} Starting " + "=" * 20)
        start_time = time.time()
        self.ready = False
        self.browser_opened = False
        self.server_process = None

        log.info("Stopping existing servers...")
        self.stop()

        try:
            startup.wait_for_port_release(self)
            if config_utils.check_configuration(self):
                self._launch_and_wait()
            else:
                log.error("Server not started because of the configuration errors above.")
        except PortInUseError as e:
            if e.foreign:
                log.error(f"{e}. Not starting a new server; free the port and try again.")
            else:
                log.error(f"{e}. The previous server did not release the port in time.")
        except ServerStartError as e:
            log.error(f"Server failed to start: {e}")

        if self.config["OPEN_BROWSER"]:
            self.browser_opened = browser.open_browser(
                self.url, self.config["BROWSER"], self.config["BROWSER_NEW_WINDOW"]
            )
        else:
            log.info("Browser launch disabled by configuration.")

        log.info(f"Start sequence finished in {time.time() - start_time:.2f} seconds.")
        return self.ready

    def _launch_and_wait(self) -> None:
        """Launches the server process and waits for it to become ready."""
        try:
            config_utils.write_config_files(self)
            self.server_process = process_utils.launch_server(self)
        except OSError as e:
            log.critical(f"Failed to launch the static server: {e}", exc_info=True)
            return
        persistence.write_pid_file(self, self.server_process.pid)

        try:
            startup.wait_for_server_ready(self, self.server_process)
            self.ready = True
        except ServerExitedError as e:
            log.error(f"{e}. The port may still be bound or the serve directory is invalid. Server output:")
            process_utils.relay_server_output(self)
            persistence.clear_pid_file(self)
            self.server_process = None
        except ServerStartError as e:
            log.warning(f"{e}. Continuing anyway; the browser may show a connection error.")
            process_utils.relay_server_output(self, logging.WARNING)

    def stop(self) -> None:
        """
        Stops our server on the configured port, if any.
        Absence of a running server is not an error.
        """
        all_procs_to_stop = shutdown.identify_processes_to_stop(self)

        if not all_procs_to_stop:
            log.info(f"No running server found on port {self.port}.")
            persistence.clear_pid_file(self)
            return

        log.info(f"Stopping {len(all_procs_to_stop)} server processes on port {self.port}...")
        shutdown.graceful_shutdown_sequence(all_procs_to_stop, self.config["GRACEFUL_SHUTDOWN_TIMEOUT"])
        persistence.clear_pid_file(self)
        log.info("Server stopped.")

    def restart(self) -> bool:
        """Start already replaces a running server."""
        return self.start()

    def get_pid_info(self) -> Optional[Dict[str, Any]]:
        """
        Retrieves the tracked server record from the PID file.

        :return: The PID record, or None if no valid file exists.
        """
        return persistence.get_pid_info(self)

    def get_status(self) -> Dict[str, Any]:
        """
        Collects the current state of the server for display.

        :return: A dictionary with the tracked PID, liveness, resource usage,
            port listeners and the probe result. A recorded PID that now
            belongs to an unrelated process is flagged as `pid_reused`.
        """
        status: Dict[str, Any] = {
            "url": self.url,
            "port": self.port,
            "pid": None,
            "running": False,
            "pid_reused": False,
            "cpu_percent": None,
            "memory_mb": None,
            "uptime_seconds": None,
            "listeners": [],
            "http_status": None,
        }
        info = self.get_pid_info()
        if info:
            pid = info[persistence.SERVER_KEY]
            status["pid"] = pid
            try:
                proc = process_utils.get_process_from_pid(pid)
                if not process_utils.matches_server_signature(proc, self.config["SERVER_SIGNATURES"]):
                    status["pid_reused"] = True
                elif proc.status() != psutil.STATUS_ZOMBIE:
                    status["running"] = True
                    status["cpu_percent"] = proc.cpu_percent(interval=0.1)
                    status["memory_mb"] = proc.memory_info().rss / 1024 / 1024
                    started_at = info.get("started_at")
                    if started_at:
                        status["uptime_seconds"] = time.time() - started_at
            except psutil.NoSuchProcess:
                pass
            except psutil.AccessDenied:
                status["running"] = True

        for proc in process_utils.find_listening_processes(self.port):
            ours = process_utils.matches_server_signature(proc, self.config["SERVER_SIGNATURES"])
            status["listeners"].append((proc.pid, ours))

        if status["listeners"]:
            status["http_status"] = startup.probe(self.probe_url, self.config["PROBE_REQUEST_TIMEOUT"])
        return status
