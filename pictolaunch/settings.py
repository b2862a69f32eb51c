"""
This module contains the configuration settings for the PictoCalc launcher.
It defines paths, server settings, timing for the supervisor and the templates
written at startup. Every module reads these through `app_globals`.
"""

import os
import sys
import pathlib
from dotenv import load_dotenv, find_dotenv

# Load environment variables from a .env file in the working directory
load_dotenv(find_dotenv(usecwd=True))

#* --- Core Paths ---
PACKAGE_DIR = pathlib.Path(__file__).resolve().parent
BASE_DIR = PACKAGE_DIR.parent
RUNTIME_DIR = pathlib.Path(os.getenv("PICTOLAUNCH_HOME", pathlib.Path.home() / ".pictolaunch")).expanduser()
LOGS_DIR = RUNTIME_DIR / "logs"

#* --- Served Application ---
APP_NAME = "PictoCalc"
# The directory served verbatim. The menu config JSON lives in here.
SERVE_DIR = pathlib.Path(os.getenv("PICTOLAUNCH_SERVE_DIR", os.getcwd())).resolve()

#* --- Runtime File Names ---
PID_FILE_TEMPLATE = "server-{port}.pid"
HYPERCORN_CONFIG_TEMPLATE_NAME = "hypercorn-{port}.toml"
SERVER_LOG_TEMPLATE = "server-{port}.log"
LAUNCHER_LOG_PATH = LOGS_DIR / "launcher.log"
OVERRIDES_JSON_PATH = RUNTIME_DIR / "overrides.json"

#* --- Python Executable Configuration ---
PYTHON_EXECUTABLE = os.getenv("PYTHON_EXECUTABLE", sys.executable)

#* --- Web Server Settings ---
WEB_SERVER_HOST = os.getenv("PICTOLAUNCH_HOST", "127.0.0.1")
WEB_SERVER_PORT = int(os.getenv("PICTOLAUNCH_PORT", "8000"))
PUBLIC_HOSTNAME = "localhost"
SERVER_APP_SPEC = "pictolaunch.web.setup:app"
SERVER_PROCESS_TITLE = "PictoCalc - Static Server"
SERVER_LOG_LEVEL = "info"
DISABLE_CACHE = os.getenv("PICTOLAUNCH_DISABLE_CACHE", "True").lower() in ("true", "1", "t")

# Command-line fragments identifying a server we are allowed to terminate.
# 'http.server' covers instances left behind by the old launch.sh script.
SERVER_SIGNATURES = (SERVER_APP_SPEC, SERVER_PROCESS_TITLE, "http.server")

#* --- Supervisor Timing ---
PORT_RELEASE_TIMEOUT = 10.0       # seconds
PORT_RELEASE_POLL_INTERVAL = 0.25 # seconds
READINESS_TIMEOUT = 15.0          # seconds
READINESS_POLL_INTERVAL = 0.5     # seconds
PROBE_REQUEST_TIMEOUT = 2         # seconds, per request
GRACEFUL_SHUTDOWN_TIMEOUT = 5.0   # seconds before force-killing
SERVER_LOG_TAIL_LINES = 20

#* --- Browser ---
# Empty means the system default. Otherwise a name known to the `webbrowser`
# module ("firefox", "safari", "google-chrome") or a command containing %s.
BROWSER = os.getenv("PICTOLAUNCH_BROWSER", "")
BROWSER_NEW_WINDOW = True
OPEN_BROWSER = True

DEVTOOLS_SHORTCUTS = {
    "darwin": [
        ("Chrome/Edge", "Cmd + Option + I"),
        ("Safari", "Cmd + Option + C (enable the Developer menu first)"),
        ("Firefox", "Cmd + Option + I"),
    ],
    "default": [
        ("Chrome/Edge", "Ctrl + Shift + I"),
        ("Firefox", "Ctrl + Shift + I"),
    ],
}

#* --- MODIFIABLE SETTINGS (Changeable via the 'config set' command) ---
MODIFIABLE_SETTINGS = {
    "BROWSER", "BROWSER_NEW_WINDOW", "OPEN_BROWSER",
    "PORT_RELEASE_TIMEOUT", "READINESS_TIMEOUT", "GRACEFUL_SHUTDOWN_TIMEOUT",
    "DISABLE_CACHE",
}

#* --- Configuration Templates ---
HYPERCORN_CONFIG_TEMPLATE = """
# This file is auto-generated by the launcher. Do not edit directly.

bind = "{bind_host}:{bind_port}"
workers = {workers}

# -- Logging --
# Both logs go to stdout, which the launcher redirects to the server log file.
accesslog = "-"
errorlog = "-"
loglevel = "{loglevel}"
"""

#* --- Application variables ---
VERBOSE_LOGGING = False
