# componentsvc

`componentsvc` is a small HTTP service that stores **components** arranged in a
tree. Every component has a name, a description and an optional parent, so the
service can list either every component or only the direct children of a given
one.

Components are kept in an SQLite database file. When the service starts it loads
every component into an in-memory cache; reads are then answered from the cache,
which is updated as components are created, changed and deleted.

It is a plain WSGI application built on the standard library and has no runtime
dependencies.

## Installing

```
pip install .
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install ".[test]"
pytest
```

## Running the service

```
componentsvc --db components.db
```

Options:

- `--db PATH` — the SQLite database file. When it is left out, the `DB_PATH`
  environment variable is used; if neither is given the command exits with
  status 1. The file is created if needed, and the `components` table is
  created if it does not exist yet.
- `--port PORT` — the port to listen on. When it is left out, the `PORT`
  environment variable is used, and `8080` when that is not set either. A port
  that is not a number from 0 to 65535 makes the command exit with status 1.

The server is the standard library's `wsgiref` server, listening on all
interfaces. Stop it with Ctrl-C.

A request for `/` answers `200` with the plain text
`Component service is running.`, which is useful as a health check. A request
for `/components` is redirected (`301`) to `/components/`. Any other path outside
`/components/` answers a plain-text `404`.

## The HTTP interface

Request and response bodies under `/components/` are JSON. Errors come back as
an object with a single `error` key, for example
`{"error": "Component name is required"}`.

| Method   | Path                         | What it does                                      |
|----------|------------------------------|---------------------------------------------------|
| `GET`    | `/components/`               | List every component                              |
| `POST`   | `/components/`               | Create a component (`201 Created`)                |
| `GET`    | `/components/{id}`           | Fetch one component                               |
| `PUT`    | `/components/{id}`           | Replace a component's name, description, parent   |
| `DELETE` | `/components/{id}`           | Delete a component                                |
| `GET`    | `/components/{id}/children`  | List the direct children of a component           |

A component looks like this:

```json
{
  "id": 2,
  "name": "Wheel",
  "description": "Front left wheel",
  "parent_id": 1,
  "created_at": "2024-05-01T12:00:00Z",
  "updated_at": "2024-05-01T12:00:00Z"
}
```

`parent_id` is `null` for a component with no parent. Timestamps are RFC 3339
strings to the second, in UTC.

Notes on the behaviour:

- `name` is required when creating or updating; a missing or empty name gives
  `400 Bad Request`. A body that is not valid JSON, or a field of the wrong
  type, also gives `400`. Unknown fields are ignored.
- Leave out `parent_id`, or send `null` or `0`, for a component with no parent.
- The `201` answer to a create holds the new `id` and the fields that were sent,
  without timestamps; fetch the component to see them.
- `PUT` answers with the component as stored after the update.
- A path id that is not a whole number gives `400 Bad Request`; an unknown id
  gives `404 Not Found`, and so does asking for the children of a component that
  does not exist.
- A method a path does not support gives `405 Method Not Allowed`.
- Deleting a component answers `{"message": "Component deleted successfully"}`.
  In the database its children lose their parent (`parent_id` becomes `null`);
  the cache leaves their `parent_id` as it was until the service is restarted.
- Lists are always JSON arrays, empty when there is nothing to show. With the
  cache in use, the full list comes back in the order components were loaded
  or added.

## Using it from Python

The pieces are importable on their own:

- `componentsvc.models.Component` — the component record (a dataclass), with
  `to_dict()` and `Component.from_dict(data)` for its JSON form.
  `from_dict` raises `ValueError` for a value of the wrong type.
- `componentsvc.db` — `init_db(path)` opens the SQLite file (or `$DB_PATH`) and
  prepares the schema, `get_db()` returns the open connection and `close_db()`
  closes it; failures raise `DatabaseError`.
- `componentsvc.cache` — `ComponentCache` with `set`, `delete`, `get_by_id`,
  `get_all` and `get_children` (use `ROOT_PARENT_KEY` for the root components).
  Every read returns copies. The process-wide cache is managed by
  `init_global_cache(source)`, `get_global_cache()` and `reset_global_cache()`;
  any object with a `list_components()` method can act as a `ComponentSource`.
- `componentsvc.store.ComponentStore` — `create_component`,
  `get_component_by_id`, `update_component`, `delete_component`,
  `list_components` and `list_child_components`. Reads go to the global cache
  when it exists and to the database otherwise. Unknown ids raise
  `ComponentNotFoundError`, a `StoreError`.
- `componentsvc.api.ComponentsAPI` — the request handler for `/components/`.
  `handle(method, path, body)` returns a `Response` (with `status`, `body`,
  `headers` and `json()`), and an instance is itself a WSGI application.
- `componentsvc.main.create_app(api)` — wraps the handler into the full WSGI
  application, including the `/` health check, ready for any WSGI server.
  `main(argv)` is the command described above.

```python
from componentsvc.api import ComponentsAPI
from componentsvc.db import init_db

init_db("components.db")
api = ComponentsAPI()

response = api.handle("POST", "/components/", b'{"name": "Car"}')
print(response.status)   # 201
print(response.json())   # {'id': 1, 'name': 'Car', 'description': '', 'parent_id': None}
```

## What it does not do

- It stores data only in a local SQLite file; there is no support for a
  separate database server.
- There is no authentication, pagination or filtering.
- The bundled command runs the single-threaded `wsgiref` server; for anything
  beyond light use, hand `create_app()` to another WSGI server.