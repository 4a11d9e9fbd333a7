"""HTTP handlers for the /components resource."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from componentsvc.db import DatabaseError
from componentsvc.models import Component
from componentsvc.store import ComponentNotFoundError, ComponentStore, StoreError

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

StartResponse = Callable[[str, list[tuple[str, str]]], Any]


@dataclass(frozen=True)
class Response:
    """A finished HTTP response."""

    status: int
    body: bytes = b""
    content_type: str = "application/json"
    extra_headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_json(cls, status: int, payload: Any) -> Response:
        """Encode ``payload`` as compact JSON."""
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return cls(status, body)

    @classmethod
    def error(cls, status: int, message: str) -> Response:
        """A JSON error body of the form {"error": message}."""
        return cls.from_json(status, {"error": message})

    @classmethod
    def text(cls, status: int, text: str) -> Response:
        """A plain-text response."""
        return cls(status, text.encode("utf-8"), "text/plain; charset=utf-8")

    @property
    def status_line(self) -> str:
        """The WSGI status string, such as ``"200 OK"``."""
        try:
            phrase = HTTPStatus(self.status).phrase
        except ValueError:
            phrase = ""
        return f"{self.status} {phrase}".rstrip()

    @property
    def headers(self) -> list[tuple[str, str]]:
        """All response headers."""
        return [
            ("Content-Type", self.content_type),
            ("Content-Length", str(len(self.body))),
            *self.extra_headers,
        ]

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body)

    def send(self, start_response: StartResponse) -> Iterable[bytes]:
        """Hand the response to a WSGI server."""
        start_response(self.status_line, self.headers)
        return [self.body]


class _HTTPError(Exception):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def _parse_id(text: str) -> int | None:
    if not _ID_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def _decode_component(body: bytes | str) -> Component:
    try:
        text = body.decode("utf-8") if isinstance(body, bytes) else body
        text = text.lstrip()
        if not text:
            raise ValueError("EOF")
        value, _ = json.JSONDecoder().raw_decode(text)
        return Component() if value is None else Component.from_dict(value)
    except ValueError as exc:
        raise _HTTPError(HTTPStatus.BAD_REQUEST, f"Invalid request payload: {exc}") from exc


def _lookup_failure(exc: Exception, prefix: str) -> _HTTPError:
    if isinstance(exc, ComponentNotFoundError):
        return _HTTPError(HTTPStatus.NOT_FOUND, str(exc))
    return _HTTPError(HTTPStatus.INTERNAL_SERVER_ERROR, f"{prefix}{exc}")


class ComponentsAPI:
    """Routes /components, /components/{id} and /components/{id}/children."""

    def __init__(self, store: ComponentStore | None = None) -> None:
        self.store = store if store is not None else ComponentStore()

    def handle(self, method: str, path: str, body: bytes | str = b"") -> Response:
        """Serve one request and return its response."""
        try:
            return self._route(method.upper(), path, body)
        except _HTTPError as exc:
            return Response.error(exc.status, exc.message)

    def __call__(self, environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET")
        path = environ.get("PATH_INFO", "")
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        body = stream.read(length) if stream is not None and length > 0 else b""
        return self.handle(method, path, body).send(start_response)

    def _route(self, method: str, path: str, body: bytes | str) -> Response:
        parts = path.strip("/").split("/")
        not_allowed = _HTTPError(HTTPStatus.METHOD_NOT_ALLOWED, "Method not allowed")

        if parts == ["components"]:
            if method == "GET":
                return self._list()
            if method == "POST":
                return self._create(body)
            raise not_allowed

        if len(parts) == 2 and parts[0] == "components":
            component_id = _parse_id(parts[1])
            if component_id is None:
                raise _HTTPError(HTTPStatus.BAD_REQUEST, "Invalid component ID in path")
            if method == "GET":
                return self._get(component_id)
            if method == "PUT":
                return self._update(component_id, body)
            if method == "DELETE":
                return self._delete(component_id)
            raise not_allowed

        if len(parts) == 3 and parts[0] == "components" and parts[2] == "children":
            parent_id = _parse_id(parts[1])
            if parent_id is None:
                raise _HTTPError(HTTPStatus.BAD_REQUEST, "Invalid parent component ID in path")
            if method == "GET":
                return self._list_children(parent_id)
            raise _HTTPError(
                HTTPStatus.METHOD_NOT_ALLOWED,
                "Method not allowed for child components endpoint",
            )

        raise _HTTPError(HTTPStatus.NOT_FOUND, "Not found")

    def _create(self, body: bytes | str) -> Response:
        component = _decode_component(body)
        if not component.name:
            raise _HTTPError(HTTPStatus.BAD_REQUEST, "Component name is required")
        try:
            component.id = self.store.create_component(component)
        except (StoreError, DatabaseError) as exc:
            raise _HTTPError(
                HTTPStatus.INTERNAL_SERVER_ERROR, f"Error creating component: {exc}"
            ) from exc
        component.created_at = ""
        component.updated_at = ""
        return Response.from_json(HTTPStatus.CREATED, component.to_dict())

    def _get(self, component_id: int) -> Response:
        try:
            component = self.store.get_component_by_id(component_id)
        except (StoreError, DatabaseError) as exc:
            raise _lookup_failure(exc, "Error getting component: ") from exc
        return Response.from_json(HTTPStatus.OK, component.to_dict())

    def _update(self, component_id: int, body: bytes | str) -> Response:
        component = _decode_component(body)
        if not component.name:
            raise _HTTPError(HTTPStatus.BAD_REQUEST, "Component name is required for update")
        try:
            self.store.update_component(component_id, component)
        except (StoreError, DatabaseError) as exc:
            raise _lookup_failure(exc, "Error updating component: ") from exc
        try:
            updated = self.store.get_component_by_id(component_id)
        except (StoreError, DatabaseError) as exc:
            raise _HTTPError(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                f"Error fetching updated component: {exc}",
            ) from exc
        return Response.from_json(HTTPStatus.OK, updated.to_dict())

    def _delete(self, component_id: int) -> Response:
        try:
            self.store.delete_component(component_id)
        except (StoreError, DatabaseError) as exc:
            raise _lookup_failure(exc, "Error deleting component: ") from exc
        return Response.from_json(HTTPStatus.OK, {"message": "Component deleted successfully"})

    def _list(self) -> Response:
        try:
            components = self.store.list_components()
        except (StoreError, DatabaseError) as exc:
            raise _HTTPError(
                HTTPStatus.INTERNAL_SERVER_ERROR, f"Error listing components: {exc}"
            ) from exc
        return Response.from_json(HTTPStatus.OK, [c.to_dict() for c in components])

    def _list_children(self, parent_id: int) -> Response:
        try:
            self.store.get_component_by_id(parent_id)
        except ComponentNotFoundError as exc:
            raise _HTTPError(
                HTTPStatus.NOT_FOUND, f"Parent component with ID {parent_id} not found"
            ) from exc
        except (StoreError, DatabaseError) as exc:
            raise _HTTPError(
                HTTPStatus.INTERNAL_SERVER_ERROR, f"Error checking parent component: {exc}"
            ) from exc
        try:
            children = self.store.list_child_components(parent_id)
        except (StoreError, DatabaseError) as exc:
            raise _HTTPError(
                HTTPStatus.INTERNAL_SERVER_ERROR, f"Error listing child components: {exc}"
            ) from exc
        return Response.from_json(HTTPStatus.OK, [c.to_dict() for c in children])