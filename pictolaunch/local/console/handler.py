import sys
import time
import logging
from typing import List
from pictolaunch.local import app_globals
from pictolaunch.local.supervisor import DevServerSupervisor

log = logging.getLogger(__name__)


def _devtools_shortcuts() -> list:
    shortcuts = app_globals.DEVTOOLS_SHORTCUTS
    return shortcuts.get(sys.platform, shortcuts["default"])


def print_launch_summary(supervisor: DevServerSupervisor) -> None:
    """Prints the URL, server PID and how to stop the server after a start."""
    name = app_globals.APP_NAME
    print()
    if supervisor.ready:
        print(f"{name} is running!")
    elif supervisor.server_pid:
        print(f"{name} was started but did not answer yet. Check the server log:")
        print(f"  {supervisor.server_log_path}")
    else:
        print(f"{name} could not be started. See the messages above.")

    print(f"  URL:        {supervisor.url}")
    print(f"  Server PID: {supervisor.server_pid if supervisor.server_pid else 'n/a'}")
    print("  To stop:    pictolaunch stop")
    if not supervisor.browser_opened and supervisor.config["OPEN_BROWSER"]:
        print(f"  Open {supervisor.url} in your browser manually.")

    print("\nBrowser console shortcuts:")
    for browser_name, keys in _devtools_shortcuts():
        print(f"  {browser_name + ':':<13} {keys}")
    print("\nTo change the browser: pictolaunch config set BROWSER <name or command with %s>\n")


def display_status(supervisor: DevServerSupervisor) -> None:
    """Checks and displays the current status of the server, including resource usage."""
    status = supervisor.get_status()

    print(f"\n--- {app_globals.APP_NAME} Server Status (port {status['port']}) ---")
    if status["pid"] is None:
        print("  No PID file found.")
    elif status["running"]:
        line = f"  Server PID {status['pid']:<8} | Status: RUNNING"
        if status["cpu_percent"] is not None:
            line += f" | CPU: {status['cpu_percent']:.1f}% | MEM: {status['memory_mb']:.1f} MB"
        print(line)
        if status["uptime_seconds"] is not None:
            print(f"  Runtime: {time.strftime('%H:%M:%S', time.gmtime(status['uptime_seconds']))}")
    elif status["pid_reused"]:
        print(f"  Server PID {status['pid']:<8} | Status: STOPPED (PID now belongs to an unrelated process)")
        print("  Run 'pictolaunch stop' to clean up the PID file.")
    else:
        print(f"  Server PID {status['pid']:<8} | Status: STOPPED (Stale PID file)")
        print("  Run 'pictolaunch stop' to clean it up.")

    if not status["listeners"]:
        print(f"  Nothing is listening on port {status['port']}.")
    for pid, ours in status["listeners"]:
        owner = "this launcher" if ours else "an unrelated process"
        print(f"  Listening: PID {pid:<8} ({owner})")

    if status["http_status"] is not None:
        print(f"  Probe:     {status['url']} answered HTTP {status['http_status']}")
    elif status["listeners"]:
        print(f"  Probe:     {status['url']} did not answer")
    print("-" * 40 + "\n")


def _config_show(supervisor: DevServerSupervisor) -> None:
    """Displays the modifiable settings and the fixed server address."""
    print("\n--- Current Launcher Configuration ---")
    for key in sorted(app_globals.MODIFIABLE_SETTINGS):
        value = supervisor.config.get(key, 'N/A')
        print(f"  {key} = {value!r}")
    print(f"  (serving '{supervisor.config['SERVE_DIR']}' at {supervisor.url})")
    print("---")
    print("Use 'config set <KEY> <VALUE>' to change a setting.")
    print(f"Overrides are stored in '{app_globals.OVERRIDES_JSON_PATH}'.\n")


def _config_set(args: List[str]) -> None:
    """Changes a modifiable setting and persists it."""
    if len(args) < 1:
        print("Usage: config set <SETTING_NAME> <VALUE>")
        return

    key, value_str = args[0].upper(), " ".join(args[1:])
    success, message = app_globals.update_setting(key, value_str)
    if not success:
        print(f"Error: {message}")


def _config_help() -> None:
    """Displays help for the config command."""
    print("\nConfig Command Help:")
    print("  config show                - Display all modifiable settings.")
    print("  config set KEY VALUE       - Change a setting. Applies on the next start.")
    print("  config help                - Show this help message.")
    print("Example: config set BROWSER firefox")


def handle_config_command(args: List[str], supervisor: DevServerSupervisor) -> None:
    """
    Handles all sub-commands for the 'config' command-line interface.

    :param args: A list of string arguments following the 'config' command.
    :param supervisor: The supervisor whose effective settings are shown.
    """
    sub_command = args[0].lower() if args else "show"

    if sub_command == "show":
        _config_show(supervisor)
    elif sub_command == "set":
        _config_set(args[1:])
    elif sub_command == "help":
        _config_help()
    else:
        print(f"Unknown config sub-command: '{sub_command}'. Type 'config help' for available commands.")


def toggle_verbose_logging() -> None:
    """Toggles verbose (DEBUG level) logging for the console handler."""
    app_globals.VERBOSE_LOGGING = not app_globals.VERBOSE_LOGGING
    new_level = logging.DEBUG if app_globals.VERBOSE_LOGGING else logging.INFO

    # Reconfigure the console handler's level directly
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if type(handler) is logging.StreamHandler:
            handler.setLevel(new_level)
            break
    log.debug("Verbose console logging enabled.")


def print_help() -> None:
    """Prints the main help text."""
    print("\nUsage: pictolaunch [command] [--verbose]")
    print("\nAvailable commands:")
    print("  start                  - Stop any running server, start a fresh one and open the browser (default).")
    print("  stop                   - Stop the server.")
    print("  restart                - Same as start.")
    print("  status                 - Show whether the server is running and answering.")
    print("  config <cmd>           - Manage configuration. Use 'config help' for more details.")
    print("  help                   - Show this message.")
    print()
