"""Component persistence on top of the database and the global cache."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta, timezone

from componentsvc.cache import get_global_cache
from componentsvc.db import get_db
from componentsvc.models import Component

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, description, parent_id, created_at, updated_at"


class StoreError(Exception):
    """A component could not be read from or written to the database."""


class ComponentNotFoundError(StoreError, LookupError):
    """The requested component does not exist."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _rfc3339(value: str) -> str:
    stamp = datetime.fromisoformat(value)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    if stamp.utcoffset() == timedelta(0):
        return stamp.strftime("%Y-%m-%dT%H:%M:%SZ")
    return stamp.isoformat(timespec="seconds")


def _from_row(row: sqlite3.Row) -> Component:
    return Component(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        parent_id=row["parent_id"],
        created_at=_rfc3339(row["created_at"]),
        updated_at=_rfc3339(row["updated_at"]),
    )


def _stored_parent(component: Component) -> int | None:
    """A parent id of 0 means the component has no parent."""
    return component.parent_id if component.parent_id else None


def _fetch(conn: sqlite3.Connection, component_id: int) -> Component | None:
    row = conn.execute(
        f"SELECT {_COLUMNS} FROM components WHERE id = ?", (component_id,)
    ).fetchone()
    return None if row is None else _from_row(row)


class ComponentStore:
    """Database operations on components, served from the cache when it exists."""

    def _refresh_cache(
        self, conn: sqlite3.Connection, component_id: int, action: str
    ) -> None:
        cache = get_global_cache()
        if cache is None:
            return
        try:
            fetched = _fetch(conn, component_id)
        except (sqlite3.Error, ValueError) as exc:
            logger.warning(
                "Error fetching component %d for cache update after %s: %s",
                component_id,
                action,
                exc,
            )
            return
        if fetched is None:
            logger.warning(
                "Error fetching component %d for cache update after %s: no row",
                component_id,
                action,
            )
            return
        cache.set(fetched)

    def create_component(self, component: Component) -> int:
        """Insert a new component and return its id."""
        conn = get_db()
        now = _now()
        try:
            cursor = conn.execute(
                "INSERT INTO components (name, description, parent_id, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (component.name, component.description, _stored_parent(component), now, now),
            )
        except sqlite3.Error as exc:
            raise StoreError(f"error creating component: {exc}") from exc
        new_id = cursor.lastrowid
        self._refresh_cache(conn, new_id, "create")
        return new_id

    def get_component_by_id(self, component_id: int) -> Component:
        """Return the component, raising ComponentNotFoundError if absent."""
        cache = get_global_cache()
        if cache is not None:
            cached = cache.get_by_id(component_id)
            if cached is None:
                raise ComponentNotFoundError(f"component with ID {component_id} not found")
            return cached

        conn = get_db()
        try:
            component = _fetch(conn, component_id)
        except (sqlite3.Error, ValueError) as exc:
            raise StoreError(
                f"error getting component by ID {component_id}: {exc}"
            ) from exc
        if component is None:
            raise ComponentNotFoundError(f"component with ID {component_id} not found")
        return component

    def update_component(self, component_id: int, component: Component) -> None:
        """Overwrite name, description and parent of an existing component."""
        conn = get_db()
        try:
            cursor = conn.execute(
                "UPDATE components SET name = ?, description = ?, parent_id = ?, updated_at = ? "
                "WHERE id = ?",
                (
                    component.name,
                    component.description,
                    _stored_parent(component),
                    _now(),
                    component_id,
                ),
            )
        except sqlite3.Error as exc:
            raise StoreError(
                f"error updating component with ID {component_id}: {exc}"
            ) from exc
        if cursor.rowcount == 0:
            raise ComponentNotFoundError(
                f"component with ID {component_id} not found for update"
            )
        self._refresh_cache(conn, component_id, "update")

    def delete_component(self, component_id: int) -> None:
        """Delete a component; its children lose their parent in the database."""
        conn = get_db()
        try:
            cursor = conn.execute("DELETE FROM components WHERE id = ?", (component_id,))
        except sqlite3.Error as exc:
            raise StoreError(
                f"error deleting component with ID {component_id}: {exc}"
            ) from exc
        if cursor.rowcount == 0:
            raise ComponentNotFoundError(
                f"component with ID {component_id} not found for deletion"
            )
        cache = get_global_cache()
        if cache is not None:
            cache.delete(component_id)

    def list_components(self) -> list[Component]:
        """Return every component, newest first when read from the database."""
        cache = get_global_cache()
        if cache is not None:
            return cache.get_all()

        conn = get_db()
        try:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM components ORDER BY created_at DESC"
            ).fetchall()
            return [_from_row(row) for row in rows]
        except (sqlite3.Error, ValueError) as exc:
            raise StoreError(f"error listing components: {exc}") from exc

    def list_child_components(self, parent_id: int) -> list[Component]:
        """Return the direct children of ``parent_id``, oldest first."""
        cache = get_global_cache()
        if cache is not None:
            return cache.get_children(parent_id)

        conn = get_db()
        try:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM components WHERE parent_id = ? "
                "ORDER BY created_at ASC",
                (parent_id,),
            ).fetchall()
            return [_from_row(row) for row in rows]
        except (sqlite3.Error, ValueError) as exc:
            raise StoreError(
                f"error listing child components for parent ID {parent_id}: {exc}"
            ) from exc