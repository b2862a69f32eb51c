import sys
import logging
from typing import List, Optional

from pictolaunch.local import app_globals
from pictolaunch.log.setup import setup_logging
import pictolaunch.local.console as console

log = logging.getLogger("console")


def main(argv: Optional[List[str]] = None) -> None:
    """
    The entry point of the launcher.

    With no arguments it runs the start sequence. Commands such as 'stop'
    and 'status' can be given instead. Unknown commands exit with status 2.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    # Logging must be ready before the supervisor reports anything.
    setup_logging(logging.INFO, app_globals.LAUNCHER_LOG_PATH)

    if "--verbose" in args:
        console.toggle_verbose_logging()
        args.remove("--verbose")

    command = args[0].lower() if args else "start"
    try:
        recognised = console.execute_command(command, args[1:])
    except KeyboardInterrupt:
        log.warning("Interrupted by user.")
        return

    if not recognised:
        sys.exit(2)


if __name__ == "__main__":
    main()
