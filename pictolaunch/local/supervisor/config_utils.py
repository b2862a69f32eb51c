import shutil
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .supervisor import DevServerSupervisor

log = logging.getLogger(__name__)


def check_configuration(manager: "DevServerSupervisor") -> bool:
    """
    Validates the served directory and the Python executable used for the server.
    Problems are logged; the caller decides whether to continue.

    :return: True if everything required to launch was found, otherwise False.
    """
    all_ok = True
    serve_dir = Path(manager.config["SERVE_DIR"])
    if not serve_dir.is_dir():
        log.error(f"CONFIG CHECK FAILED: serve directory '{serve_dir}' does not exist.")
        all_ok = False
    elif not (serve_dir / "index.html").is_file():
        log.warning(f"No index.html in '{serve_dir}'. The root URL will answer with 404.")
    else:
        log.debug(f"Config Check OK: serving '{serve_dir}'")

    python_exe = manager.config["PYTHON_EXECUTABLE"]
    if not (Path(python_exe).is_file() or shutil.which(python_exe)):
        log.error(f"CONFIG CHECK FAILED: Python executable '{python_exe}' not found.")
        all_ok = False
    return all_ok


def write_config_files(manager: "DevServerSupervisor") -> None:
    """
    Generates and writes the Hypercorn configuration for the server process.
    """
    try:
        hypercorn_conf = manager.config["HYPERCORN_CONFIG_TEMPLATE"].format(
            bind_host=manager.config["WEB_SERVER_HOST"],
            bind_port=manager.port,
            workers=1,
            loglevel=manager.config["SERVER_LOG_LEVEL"],
        )
        manager.hypercorn_config_path.parent.mkdir(parents=True, exist_ok=True)
        manager.hypercorn_config_path.write_text(hypercorn_conf)
        log.debug(f"Hypercorn config written to '{manager.hypercorn_config_path}'.")
    except Exception as e:
        log.critical(f"Failed to write the Hypercorn configuration file: {e}", exc_info=True)
        raise
