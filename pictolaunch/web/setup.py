import setproctitle
from pictolaunch.local import app_globals
setproctitle.setproctitle(app_globals.SERVER_PROCESS_TITLE)

import logging
from pictolaunch.log import setup_logging
from pictolaunch.web.server import create_app

log = logging.getLogger("static_server")
setup_logging(console_level=logging.INFO)

# The main application object to be loaded by Hypercorn
app = create_app(app_globals.SERVE_DIR)

log.info(f"Static server configured to serve '{app_globals.SERVE_DIR}'.")
