from pathlib import Path
from starlette.routing import Mount
from starlette.middleware import Middleware
from starlette.applications import Starlette
from starlette.staticfiles import StaticFiles
from pictolaunch.web.middleware import DevHeadersMiddleware


def create_app(serve_dir: Path) -> Starlette:
    """
    Builds the static file application.

    Files under `serve_dir` are served verbatim; directories resolve to their
    index.html. There are no other routes.

    :param serve_dir: The directory to serve.
    :raises RuntimeError: If the directory does not exist.
    """
    routes = [
        Mount("/", app=StaticFiles(directory=str(serve_dir), html=True), name="static"),
    ]
    middleware = [
        Middleware(DevHeadersMiddleware),
    ]
    return Starlette(debug=False, routes=routes, middleware=middleware)
