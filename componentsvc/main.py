"""Command that runs the component service as a WSGI server."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterable
from http import HTTPStatus
from typing import Any
from wsgiref.simple_server import make_server

from componentsvc.api import ComponentsAPI, Response, StartResponse
from componentsvc.cache import init_global_cache
from componentsvc.db import DatabaseError, close_db, init_db
from componentsvc.store import ComponentStore

logger = logging.getLogger(__name__)

_DEFAULT_PORT = "8080"
_PREFIX = "/components/"


def create_app(api: ComponentsAPI | None = None):
    """Return the WSGI application serving the components API and a root page."""
    components = api if api is not None else ComponentsAPI()

    def app(environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        path = environ.get("PATH_INFO", "") or "/"
        if path.startswith(_PREFIX):
            return components(environ, start_response)
        if path == _PREFIX.rstrip("/"):
            location = _PREFIX
            query = environ.get("QUERY_STRING")
            if query:
                location = f"{location}?{query}"
            response = Response.text(HTTPStatus.MOVED_PERMANENTLY, "")
            response = Response(
                response.status,
                response.body,
                response.content_type,
                (("Location", location),),
            )
            return response.send(start_response)
        if path != "/":
            return Response.text(HTTPStatus.NOT_FOUND, "404 page not found\n").send(start_response)
        return Response.text(HTTPStatus.OK, "Component service is running.").send(start_response)

    return app


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="componentsvc", description="Run the component service.")
    parser.add_argument("--db", default=None, help="database file (default: $DB_PATH)")
    parser.add_argument("--port", default=None, help="port to listen on (default: $PORT or 8080)")
    return parser.parse_args(argv)


def _resolve_port(value: str | None) -> int | None:
    text = value if value is not None else (os.environ.get("PORT") or _DEFAULT_PORT)
    try:
        port = int(text)
    except ValueError:
        return None
    return port if 0 <= port <= 65535 else None


def main(argv: list[str] | None = None) -> int:
    """Start the service; return a non-zero status when it cannot start."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    args = _parse_args(argv)

    try:
        init_db(args.db)
    except DatabaseError as exc:
        logger.error("Failed to initialize database: %s", exc)
        return 1
    logger.info("Database initialized.")

    try:
        store = ComponentStore()
        try:
            init_global_cache(store)
        except RuntimeError as exc:
            logger.error("Failed to initialize component cache: %s", exc)
            return 1
        logger.info("Component cache initialized.")

        port = _resolve_port(args.port)
        if port is None:
            logger.error("Failed to start server: invalid port")
            return 1

        app = create_app(ComponentsAPI(store))
        logger.info("Server starting on port %d", port)
        try:
            with make_server("", port, app) as server:
                server.serve_forever()
        except OSError as exc:
            logger.error("Failed to start server: %s", exc)
            return 1
        except KeyboardInterrupt:
            return 0
        return 0
    finally:
        close_db()


if __name__ == "__main__":
    sys.exit(main())