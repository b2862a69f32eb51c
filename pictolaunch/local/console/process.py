import logging
from typing import List, Optional
from pictolaunch.local.supervisor import DevServerSupervisor
from pictolaunch.local.console.handler import (
    display_status, handle_config_command, print_help, print_launch_summary,
)

log = logging.getLogger(__name__)


def _start(supervisor: DevServerSupervisor) -> None:
    supervisor.start()
    print_launch_summary(supervisor)


def execute_command(command: str, args: List[str], supervisor: Optional[DevServerSupervisor] = None) -> bool:
    """
    Executes a single command from the user.

    :param command: The main command string (e.g., 'start', 'config').
    :param args: A list of arguments for the command.
    :param supervisor: The supervisor to act on. A default one is created if omitted.
    :return bool: True if the command was recognised, False otherwise.
    """
    log.debug(f"Executing command: {command}, args: {args}")
    supervisor = supervisor or DevServerSupervisor()
    command_map = {
        "start": lambda: _start(supervisor),
        "restart": lambda: _start(supervisor),
        "stop": supervisor.stop,
        "status": lambda: display_status(supervisor),
        "config": lambda: handle_config_command(args, supervisor),
        "help": print_help,
    }

    if command not in command_map:
        print(f"Unknown command: '{command}'.")
        print_help()
        return False

    command_map[command]()
    return True
