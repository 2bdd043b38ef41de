"""SQLite project file store."""

import random
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog

from reqgraph.errors import StoreError
from reqgraph.gateway import PARENT_ATTRIBUTE, PersistenceGateway
from reqgraph.models import REQUIREMENT_ATTRIBUTES, SOLUTION_ATTRIBUTES, Identity, ItemKind
from reqgraph.stores.memory import COMPOSITE_ATTRIBUTES

logger = structlog.get_logger()

PROJECT_SUFFIX = ".orq"

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS info (
    id      INTEGER PRIMARY KEY,
    version INTEGER DEFAULT 1,
    name    TEXT,
    created TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS requirements (
    id            INTEGER PRIMARY KEY,
    uid           INTEGER,
    version       INTEGER NOT NULL DEFAULT 1,
    shown         INTEGER NOT NULL DEFAULT 1,
    parent        INTEGER,
    parent_type   INTEGER,
    description   TEXT NOT NULL DEFAULT '',
    x             INTEGER NOT NULL DEFAULT 0,
    y             INTEGER NOT NULL DEFAULT 0,
    width         INTEGER NOT NULL DEFAULT 128,
    height        INTEGER NOT NULL DEFAULT 64,
    rationale     TEXT NOT NULL DEFAULT '',
    fit_criterion TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS solutions (
    id          INTEGER PRIMARY KEY,
    uid         INTEGER,
    version     INTEGER NOT NULL DEFAULT 1,
    shown       INTEGER NOT NULL DEFAULT 1,
    parent      INTEGER,
    parent_type INTEGER,
    description TEXT NOT NULL DEFAULT '',
    x           INTEGER NOT NULL DEFAULT 0,
    y           INTEGER NOT NULL DEFAULT 0,
    width       INTEGER NOT NULL DEFAULT 128,
    height      INTEGER NOT NULL DEFAULT 64
);

CREATE TABLE IF NOT EXISTS solution_children (
    solution   INTEGER NOT NULL,
    child      INTEGER NOT NULL,
    child_type INTEGER NOT NULL,
    PRIMARY KEY (solution, child, child_type)
);
"""

TABLES = {ItemKind.REQUIREMENT: "requirements", ItemKind.SOLUTION: "solutions"}
COLUMNS = {ItemKind.REQUIREMENT: REQUIREMENT_ATTRIBUTES, ItemKind.SOLUTION: SOLUTION_ATTRIBUTES}


def project_path(path: str | Path) -> Path:
    """Return the project file path, adding the project suffix when missing."""
    path = Path(path)
    if path.suffix != PROJECT_SUFFIX:
        path = path.with_name(path.name + PROJECT_SUFFIX)
    return path


class SQLiteStore(PersistenceGateway):
    """Project store backed by a single SQLite file.

    Requirements and solutions live in separate tables with independent id
    sequences, so the same numeric id can name one item of each kind.
    """

    def __init__(self, path: str | Path) -> None:
        """Open or create a project file.

        Args:
            path: Project file; the ``.orq`` suffix is appended when missing
        """
        self.path = project_path(path)
        self._lock = threading.Lock()
        is_new = not self.path.exists()

        logger.debug("Opening project file", path=str(self.path), is_new=is_new)
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA_SQL)
            if is_new:
                self._conn.execute("INSERT INTO info (name) VALUES (?)", (self.path.stem,))
            self._conn.commit()
        except sqlite3.Error as e:
            logger.error("Failed to open project file", path=str(self.path), error=str(e))
            raise StoreError(f"Failed to open project file {self.path}: {e}") from e
        logger.info("Project file opened", path=str(self.path))

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                logger.error("Store operation failed", operation=operation, error=str(e))
                raise StoreError(f"{operation} failed: {e}") from e
            except StoreError:
                self._conn.rollback()
                raise

    def _fetch_row(self, conn: sqlite3.Connection, identity: Identity) -> sqlite3.Row:
        row = conn.execute(f"SELECT * FROM {TABLES[identity.kind]} WHERE id = ?", (identity.id,)).fetchone()
        if row is None:
            raise StoreError(f"Item {identity} does not exist")
        return row

    def _uid_exists(self, conn: sqlite3.Connection, uid: int) -> bool:
        row = conn.execute(
            "SELECT count(*) FROM (SELECT uid FROM requirements UNION SELECT uid FROM solutions) WHERE uid = ?",
            (uid,),
        ).fetchone()
        return row[0] > 0

    @property
    def name(self) -> str:
        """Project name recorded when the file was created."""
        with self._transaction("name") as conn:
            row = conn.execute("SELECT name FROM info ORDER BY id LIMIT 1").fetchone()
        return row["name"] if row else self.path.stem

    def load_items(self) -> dict[Identity, dict[str, Any]]:
        items: dict[Identity, dict[str, Any]] = {}
        with self._transaction("load_items") as conn:
            for kind, table in TABLES.items():
                for row in conn.execute(f"SELECT * FROM {table}"):
                    attributes = {column: row[column] for column in COLUMNS[kind]}
                    attributes["shown"] = bool(attributes["shown"])
                    if kind is ItemKind.SOLUTION:
                        attributes["children"] = []
                    items[Identity(row["id"], kind)] = attributes
            for row in conn.execute("SELECT solution, child, child_type FROM solution_children ORDER BY rowid"):
                solution = items.get(Identity(row["solution"], ItemKind.SOLUTION))
                if solution is not None:
                    solution["children"].append(Identity(row["child"], ItemKind(row["child_type"])))
        logger.debug("Loaded items", count=len(items))
        return items

    def load_links(self) -> dict[Identity, Identity]:
        links: dict[Identity, Identity] = {}
        with self._transaction("load_links") as conn:
            for kind, table in TABLES.items():
                query = f"SELECT id, parent, parent_type FROM {table} WHERE parent IS NOT NULL"
                for row in conn.execute(query):
                    links[Identity(row["id"], kind)] = Identity(row["parent"], ItemKind(row["parent_type"]))
        logger.debug("Loaded links", count=len(links))
        return links

    def add_association(self, parent: Identity, child: Identity) -> None:
        with self._transaction("add_association") as conn:
            self._fetch_row(conn, parent)
            row = self._fetch_row(conn, child)
            if row["parent"] is not None:
                raise StoreError(f"Item {child} already has a parent")
            conn.execute(
                f"UPDATE {TABLES[child.kind]} SET parent = ?, parent_type = ? WHERE id = ?",
                (parent.id, int(parent.kind), child.id),
            )
        logger.debug("Association stored", parent=str(parent), child=str(child))

    def remove_association(self, child: Identity) -> None:
        with self._transaction("remove_association") as conn:
            conn.execute(
                f"UPDATE {TABLES[child.kind]} SET parent = NULL, parent_type = NULL WHERE id = ?",
                (child.id,),
            )

    def remove_all_associations_for(self, identity: Identity) -> None:
        with self._transaction("remove_all_associations_for") as conn:
            conn.execute(
                f"UPDATE {TABLES[identity.kind]} SET parent = NULL, parent_type = NULL WHERE id = ?",
                (identity.id,),
            )
            for table in TABLES.values():
                conn.execute(
                    f"UPDATE {table} SET parent = NULL, parent_type = NULL WHERE parent = ? AND parent_type = ?",
                    (identity.id, int(identity.kind)),
                )

    def get_attribute(self, identity: Identity, name: str) -> Any:
        with self._transaction("get_attribute") as conn:
            row = self._fetch_row(conn, identity)
        if name == PARENT_ATTRIBUTE:
            if row["parent"] is None:
                return None
            return Identity(row["parent"], ItemKind(row["parent_type"]))
        if name in COMPOSITE_ATTRIBUTES:
            return tuple(row[part] for part in COMPOSITE_ATTRIBUTES[name])
        if name not in COLUMNS[identity.kind]:
            raise StoreError(f"Unknown attribute '{name}' for item {identity}")
        if name == "shown":
            return bool(row[name])
        return row[name]

    def set_attribute(self, identity: Identity, name: str, value: Any) -> None:
        if name in COMPOSITE_ATTRIBUTES:
            columns = COMPOSITE_ATTRIBUTES[name]
            values = tuple(value)
        elif name in COLUMNS[identity.kind]:
            columns = (name,)
            values = (value,)
        else:
            raise StoreError(f"Unknown attribute '{name}' for item {identity}")
        if len(columns) != len(values):
            raise StoreError(f"Attribute '{name}' expects {len(columns)} values")

        assignments = ", ".join(f"{column} = ?" for column in columns)
        with self._transaction("set_attribute") as conn:
            self._fetch_row(conn, identity)
            conn.execute(f"UPDATE {TABLES[identity.kind]} SET {assignments} WHERE id = ?", (*values, identity.id))
        logger.debug("Attribute stored", identity=str(identity), name=name)

    def create_item(self, kind: ItemKind) -> Identity:
        with self._transaction("create_item") as conn:
            # Keep generating until the uid is free in both tables
            uid = random.getrandbits(63)
            while self._uid_exists(conn, uid):
                uid = random.getrandbits(63)
            cursor = conn.execute(f"INSERT INTO {TABLES[kind]} (uid) VALUES (?)", (uid,))
            identity = Identity(cursor.lastrowid, kind)
        logger.info("Item created", identity=str(identity), uid=uid)
        return identity

    def remove_item(self, identity: Identity) -> None:
        with self._transaction("remove_item") as conn:
            self._fetch_row(conn, identity)
            conn.execute(f"DELETE FROM {TABLES[identity.kind]} WHERE id = ?", (identity.id,))
            conn.execute(
                "DELETE FROM solution_children WHERE child = ? AND child_type = ?",
                (identity.id, int(identity.kind)),
            )
            if identity.kind is ItemKind.SOLUTION:
                conn.execute("DELETE FROM solution_children WHERE solution = ?", (identity.id,))
        logger.info("Item removed", identity=str(identity))

    def add_child(self, solution: Identity, child: Identity) -> None:
        if solution.kind is not ItemKind.SOLUTION:
            raise StoreError(f"Item {solution} cannot own children")
        with self._transaction("add_child") as conn:
            self._fetch_row(conn, solution)
            self._fetch_row(conn, child)
            conn.execute(
                "INSERT OR IGNORE INTO solution_children (solution, child, child_type) VALUES (?, ?, ?)",
                (solution.id, child.id, int(child.kind)),
            )

    def remove_child(self, solution: Identity, child: Identity) -> None:
        with self._transaction("remove_child") as conn:
            conn.execute(
                "DELETE FROM solution_children WHERE solution = ? AND child = ? AND child_type = ?",
                (solution.id, child.id, int(child.kind)),
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        logger.debug("Project file closed", path=str(self.path))
