from __future__ import annotations

import logging
import socket

from flask import Flask, Response, jsonify, request

from sc_serve.core.exceptions import RouteNotFoundError
from sc_serve.core.json_policy import dumps
from sc_serve.core.paths import canonical_path
from sc_serve.core.session import ServingSession

logger = logging.getLogger(__name__)

JSON_MIMETYPE = "application/json"


def find_free_port(start_port: int) -> int:
    """Finds an available port starting from start_port."""
    port = start_port
    while port < start_port + 100:  # Try up to 100 ports
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            if s.connect_ex(("localhost", port)) != 0:
                return port
        port += 1
    return start_port


def _request_path() -> str:
    # request.path drops repeated leading slashes, PATH_INFO still has them
    raw = request.environ.get("PATH_INFO", "")
    n_leading = len(raw) - len(raw.lstrip("/"))
    return "/" * n_leading + request.path.lstrip("/")


def create_server(session: ServingSession) -> Flask:
    """
    Build the Flask app serving a set-up session.

    - GET /manifest.json    -> dataset manifest (all file definitions)
    - GET /<dataset>/<i>/<suffix> -> payload bound in the route table
    Unknown paths answer with a JSON 404, never an exception.
    """
    if not session.is_set_up:
        raise RuntimeError("ServingSession.setup(port) must be called before create_server()")

    app = Flask(__name__)
    # "/a%2F/0/cells" decodes to "/a//0/cells"; the double slash is part of the id
    app.url_map.merge_slashes = False

    @app.after_request
    def _allow_cross_origin(response: Response) -> Response:
        # The visualization client is served from a different origin
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @app.get("/manifest.json")
    def manifest() -> Response:
        return Response(dumps(session.manifest()), mimetype=JSON_MIMETYPE)

    @app.get("/<path:subpath>")
    def dispatch(subpath: str) -> Response:
        path = canonical_path(_request_path())
        payload = session.dispatch(path)
        return Response(dumps(payload), mimetype=JSON_MIMETYPE)

    @app.errorhandler(RouteNotFoundError)
    def _not_found(e: RouteNotFoundError):
        logger.info("Route not found", extra={"error": str(e)})
        return jsonify({"error": str(e)}), 404

    return app


def serve(session: ServingSession, host: str = "localhost", debug: bool = False) -> None:
    """Run the development server on the port the session was set up with."""
    app = create_server(session)
    logger.info("Starting server", extra={"host": host, "port": session.port})
    app.run(host=host, port=session.port, debug=debug, use_reloader=False)
