"""Generic repository over one table.

Every entity repository shares the same operation set:
create / get / update / delete / list. Subclasses declare their fields,
defaults and dependents, and add entity-specific checks in `_validate`.

All writes go through `DomainStore.transaction()`, which serializes writers
and runs validate-then-commit inside one SQLite transaction.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Generic, Literal, TypeVar

import structlog

from eduarch.store.errors import ConflictError, NotFoundError, ValidationError
from eduarch.store.models import Record
from eduarch.store.fields import Normalizer
from eduarch.utils.validators import generate_id, utc_now

if TYPE_CHECKING:
    from eduarch.store.domain_store import DomainStore

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=Record)

OnDelete = Literal["cascade", "set_null", "unlink"]


@dataclass(frozen=True)
class Dependent:
    """Rows in another table that reference this entity."""

    table: str
    column: str
    on_delete: OnDelete
    # Repository name used to cascade, only for on_delete == "cascade"
    repository: str | None = None


def quote(column: str) -> str:
    """Quote a column name ("order" is a keyword)."""
    return f'"{column}"'


def to_db(value: Any) -> Any:
    """Convert a Python value to its SQLite representation."""
    if isinstance(value, Enum):
        return value.value
    return value


class Repository(Generic[R]):
    """Base class for entity repositories."""

    entity: ClassVar[str]
    table: ClassVar[str]
    id_prefix: ClassVar[str]
    record_cls: ClassVar[type]

    # Writable fields and their normalizers, in column order
    fields: ClassVar[dict[str, Normalizer]]
    # Values used when a field is omitted on create
    defaults: ClassVar[dict[str, Any]] = {}
    # Fields that update() refuses to touch
    read_only: ClassVar[frozenset[str]] = frozenset()
    # Timestamp columns filled by the repository
    created_column: ClassVar[str | None] = "created_at"
    updated_column: ClassVar[str | None] = "updated_at"
    # Fields not stored in this table's columns
    virtual_fields: ClassVar[frozenset[str]] = frozenset()

    dependents: ClassVar[tuple[Dependent, ...]] = ()

    def __init__(self, store: DomainStore):
        self._store = store

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def create(self, **values: Any) -> R:
        """Validate and store a new record.

        Raises:
            ValidationError: Missing/malformed field or unresolved reference
            ConflictError: A uniqueness rule would be violated
        """
        self._reject_unknown(values)
        data = {**self.defaults, **values}
        data = {name: self._normalize(name, value) for name, value in data.items()}

        with self._store.transaction() as conn:
            self._fill_defaults(conn, data)
            for name in self.fields:
                if name not in data:
                    raise ValidationError(name, "required")

            self._validate(conn, data, changed=None, entity_id=None)

            entity_id = generate_id(self.id_prefix)
            now = utc_now()
            row = {"id": entity_id}
            row.update((k, v) for k, v in data.items() if k not in self.virtual_fields)
            if self.created_column:
                row.setdefault(self.created_column, now)
            if self.updated_column:
                row[self.updated_column] = now

            columns = ", ".join(quote(c) for c in row)
            placeholders = ", ".join("?" for _ in row)
            conn.execute(
                f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})",
                [to_db(v) for v in row.values()],
            )
            self._after_write(conn, entity_id, data, changed=None)
            record = self._load(conn, entity_id)

        logger.debug(f"{self.table}.created", id=entity_id)
        return record

    def get(self, entity_id: str) -> R:
        """Get record by id.

        Raises:
            NotFoundError: If the id does not resolve
        """
        with self._store.connection() as conn:
            return self._load(conn, entity_id)

    def exists(self, entity_id: str) -> bool:
        with self._store.connection() as conn:
            return self._exists(conn, entity_id)

    def update(self, entity_id: str, **changes: Any) -> R:
        """Apply a partial update and re-validate the touched constraints.

        Raises:
            NotFoundError: If the id does not resolve
            ValidationError: Unknown/read-only field or invariant violation
            ConflictError: A uniqueness rule would be violated
        """
        self._reject_unknown(changes)
        for name in changes:
            if name in self.read_only:
                raise ValidationError(name, "read_only")
        normalized = {name: self._normalize(name, value) for name, value in changes.items()}

        with self._store.transaction() as conn:
            current = self._load(conn, entity_id)
            if not normalized:
                return current

            data = {name: getattr(current, name) for name in self.fields}
            data.update(normalized)
            changed = set(normalized)
            self._validate(conn, data, changed=changed, entity_id=entity_id)

            row = {k: v for k, v in normalized.items() if k not in self.virtual_fields}
            if self.updated_column:
                row[self.updated_column] = utc_now()
            if row:
                assignments = ", ".join(f"{quote(c)} = ?" for c in row)
                conn.execute(
                    f"UPDATE {self.table} SET {assignments} WHERE id = ?",
                    [to_db(v) for v in row.values()] + [entity_id],
                )
            self._after_write(conn, entity_id, data, changed=changed)
            record = self._load(conn, entity_id)

        logger.debug(f"{self.table}.updated", id=entity_id, fields=sorted(changed))
        return record

    def delete(self, entity_id: str, cascade: bool | None = None) -> None:
        """Delete a record, honoring the delete policy for its dependents.

        Args:
            entity_id: Record to delete
            cascade: True to delete dependents, False to refuse if any exist,
                None to use the configured policy

        Raises:
            NotFoundError: If the id does not resolve
            ConflictError: Dependents exist and cascading is not allowed
        """
        if cascade is None:
            cascade = self._store.cascade_by_default

        with self._store.transaction() as conn:
            if not self._exists(conn, entity_id):
                raise NotFoundError(self.entity, entity_id)
            self._delete(conn, entity_id, cascade)

        logger.debug(f"{self.table}.deleted", id=entity_id, cascade=cascade)

    def list(
        self,
        where: Callable[[R], bool] | None = None,
        order_by: str | None = None,
        **filters: Any,
    ) -> list[R]:
        """List records matching equality filters and an optional predicate.

        Args:
            where: Extra predicate applied to each record
            order_by: Field to sort by, "-field" for descending.
                Defaults to insertion order.
            **filters: Column equality filters, e.g. teacher_id="usr_..."

        Raises:
            ValidationError: Unknown filter or sort field
        """
        known = self._record_fields()
        for name in filters:
            if name not in known or name in self.virtual_fields:
                raise ValidationError(name, "unknown_filter")

        sql = f"SELECT * FROM {self.table}"
        params: list[Any] = []
        if filters:
            sql += " WHERE " + " AND ".join(f"{quote(c)} = ?" for c in filters)
            params = [to_db(v) for v in filters.values()]
        sql += " ORDER BY rowid"

        with self._store.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
            records = [self._row_to_record(conn, row) for row in rows]

        if where is not None:
            records = [r for r in records if where(r)]

        if order_by:
            descending = order_by.startswith("-")
            key = order_by.lstrip("-")
            if key not in known:
                raise ValidationError("order_by", "unknown_field", f"order_by: unknown field '{key}'")
            present = [r for r in records if getattr(r, key) is not None]
            missing = [r for r in records if getattr(r, key) is None]
            present.sort(key=lambda r: to_db(getattr(r, key)), reverse=descending)
            # None values always go last
            records = present + missing

        return records

    # -------------------------------------------------------------------------
    # Hooks for subclasses
    # -------------------------------------------------------------------------

    def _fill_defaults(self, conn: sqlite3.Connection, data: dict[str, Any]) -> None:
        """Fill defaults that depend on stored state (e.g. next order)."""

    def _validate(
        self,
        conn: sqlite3.Connection,
        data: dict[str, Any],
        changed: set[str] | None,
        entity_id: str | None,
    ) -> None:
        """Check references and invariants.

        `changed` is None on create (check everything), otherwise the set of
        fields being updated. `entity_id` is None on create.
        """

    def _after_write(
        self,
        conn: sqlite3.Connection,
        entity_id: str,
        data: dict[str, Any],
        changed: set[str] | None,
    ) -> None:
        """Persist virtual fields after the row is written."""

    def _before_delete(self, conn: sqlite3.Connection, entity_id: str) -> None:
        """Remove rows owned by this record that are not dependents."""

    def _row_to_record(self, conn: sqlite3.Connection, row: sqlite3.Row) -> R:
        """Convert database row to record, coercing enums."""
        values = {}
        for name in row.keys():
            value = row[name]
            enum_cls = getattr(self.fields.get(name), "enum_cls", None)
            if value is not None and enum_cls is not None:
                value = enum_cls(value)
            values[name] = value
        return self.record_cls(**values)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _touched(changed: set[str] | None, *names: str) -> bool:
        """True on create or when any of `names` is being updated."""
        return changed is None or bool(changed.intersection(names))

    def _record_fields(self) -> set[str]:
        return set(self.record_cls.__dataclass_fields__)

    def _reject_unknown(self, values: dict[str, Any]) -> None:
        for name in values:
            if name not in self.fields:
                if name in self._record_fields():
                    raise ValidationError(name, "read_only")
                raise ValidationError(name, "unknown_field")

    def _normalize(self, name: str, value: Any) -> Any:
        return self.fields[name](name, value)

    def _exists(self, conn: sqlite3.Connection, entity_id: str) -> bool:
        row = conn.execute(
            f"SELECT 1 FROM {self.table} WHERE id = ?", (entity_id,)
        ).fetchone()
        return row is not None

    def _load(self, conn: sqlite3.Connection, entity_id: str) -> R:
        row = conn.execute(
            f"SELECT * FROM {self.table} WHERE id = ?", (entity_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(self.entity, entity_id)
        return self._row_to_record(conn, row)

    def _require(
        self,
        conn: sqlite3.Connection,
        field: str,
        table: str,
        entity_id: str,
    ) -> sqlite3.Row:
        """Resolve a foreign key or fail with ValidationError."""
        row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (entity_id,)).fetchone()
        if row is None:
            raise ValidationError(
                field,
                "must_reference_existing",
                f"{field}: '{entity_id}' does not reference an existing {table[:-1]}",
            )
        return row

    def _count_dependents(self, conn: sqlite3.Connection, entity_id: str) -> dict[str, int]:
        counts: dict[str, int] = {}
        for dep in self.dependents:
            (n,) = conn.execute(
                f"SELECT COUNT(*) FROM {dep.table} WHERE {dep.column} = ?",
                (entity_id,),
            ).fetchone()
            if n:
                counts[dep.table] = counts.get(dep.table, 0) + n
        return counts

    def _delete(self, conn: sqlite3.Connection, entity_id: str, cascade: bool) -> None:
        counts = self._count_dependents(conn, entity_id)
        if counts and not cascade:
            logger.warning(f"{self.table}.delete_restricted", id=entity_id, dependents=counts)
            summary = ", ".join(f"{n} {table}" for table, n in counts.items())
            raise ConflictError(
                "restrict",
                f"{self.entity} '{entity_id}' has dependents ({summary})",
                dependents=counts,
            )

        for dep in self.dependents:
            if dep.on_delete == "cascade":
                child_repo = self._store.repository(dep.repository)
                rows = conn.execute(
                    f"SELECT id FROM {dep.table} WHERE {dep.column} = ?", (entity_id,)
                ).fetchall()
                for row in rows:
                    child_repo._delete(conn, row["id"], cascade=True)
            elif dep.on_delete == "set_null":
                conn.execute(
                    f"UPDATE {dep.table} SET {dep.column} = NULL WHERE {dep.column} = ?",
                    (entity_id,),
                )
            else:
                conn.execute(f"DELETE FROM {dep.table} WHERE {dep.column} = ?", (entity_id,))

        self._before_delete(conn, entity_id)
        conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (entity_id,))
