"""In-memory cache of components indexed by id and by parent."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol

from componentsvc.models import Component

ROOT_PARENT_KEY = 0
"""Key under which components without a parent are grouped."""


class ComponentSource(Protocol):
    """Anything that can list every component, used to fill the cache."""

    def list_components(self) -> list[Component]:
        """Return all components."""


def _parent_key(parent_id: int | None) -> int:
    return ROOT_PARENT_KEY if parent_id is None else parent_id


class ComponentCache:
    """Thread-safe store of component copies; readers always get copies."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[int, Component] = {}
        self._children: dict[int, list[Component]] = {}
        self._all: list[Component] = []

    def _load(self, components: list[Component]) -> None:
        by_id: dict[int, Component] = {}
        children: dict[int, list[Component]] = {}
        everything: list[Component] = []
        for component in components:
            stored = replace(component)
            by_id[stored.id] = stored
            everything.append(stored)
            children.setdefault(_parent_key(stored.parent_id), []).append(stored)
        with self._lock:
            self._by_id = by_id
            self._children = children
            self._all = everything

    def set(self, component: Component | None) -> None:
        """Add or replace a component, moving it between parents as needed."""
        if component is None:
            return
        with self._lock:
            old = self._by_id.get(component.id)
            if old is not None and old.parent_id != component.parent_id:
                self._remove_child(old.id, _parent_key(old.parent_id))

            stored = replace(component)
            self._by_id[stored.id] = stored

            for index, existing in enumerate(self._all):
                if existing.id == stored.id:
                    self._all[index] = stored
                    break
            else:
                self._all.append(stored)

            key = _parent_key(stored.parent_id)
            self._remove_child(stored.id, key)
            self._children.setdefault(key, []).append(stored)

    def delete(self, component_id: int) -> None:
        """Remove a component; its children keep their parent_id."""
        with self._lock:
            component = self._by_id.pop(component_id, None)
            if component is None:
                return
            self._all = [c for c in self._all if c.id != component_id]
            self._remove_child(component_id, _parent_key(component.parent_id))

    def _remove_child(self, child_id: int, parent_key: int) -> None:
        children = self._children.get(parent_key)
        if children is None:
            return
        remaining = [c for c in children if c.id != child_id]
        if not remaining:
            del self._children[parent_key]
        elif len(remaining) < len(children):
            self._children[parent_key] = remaining

    def get_by_id(self, component_id: int) -> Component | None:
        """Return a copy of the component, or None if it is not cached."""
        with self._lock:
            component = self._by_id.get(component_id)
            return None if component is None else replace(component)

    def get_all(self) -> list[Component]:
        """Return copies of every cached component in insertion order."""
        with self._lock:
            return [replace(c) for c in self._all]

    def get_children(self, parent_id: int) -> list[Component]:
        """Return copies of the direct children under ``parent_id``.

        Use ROOT_PARENT_KEY to get the root components.
        """
        with self._lock:
            return [replace(c) for c in self._children.get(parent_id, ())]


_global_lock = threading.Lock()
_global_cache: ComponentCache | None = None


def init_global_cache(source: ComponentSource) -> ComponentCache:
    """Create the global cache and fill it from ``source``.

    On failure the global cache is left empty and RuntimeError is raised.
    """
    global _global_cache
    cache = ComponentCache()
    with _global_lock:
        _global_cache = cache
    try:
        components = source.list_components()
    except Exception as exc:
        raise RuntimeError(
            f"failed to list components for cache initialization: {exc}"
        ) from exc
    cache._load(list(components))
    return cache


def get_global_cache() -> ComponentCache | None:
    """Return the global cache, or None if it has not been initialised."""
    with _global_lock:
        return _global_cache


def reset_global_cache() -> None:
    """Drop the global cache."""
    global _global_cache
    with _global_lock:
        _global_cache = None