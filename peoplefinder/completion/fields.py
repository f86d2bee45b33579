# peoplefinder/completion/fields.py
"""
Field registry: which columns take part in completion scoring and how their
presence is evaluated by the record store.

Every expression produced here is built from SQLAlchemy column objects looked
up on the registered tables, so field names never reach the SQL text directly.
"""

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from sqlalchemy import String, Table, and_, cast, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from .errors import ConfigurationError


class FieldKind(PyEnum):
    """How presence of a field is decided"""

    SCALAR = "scalar"
    JOIN_EXISTENCE = "join_existence"
    COMPOSITE = "composite"


@dataclass(frozen=True)
class FieldSpec:
    """
    A single completion field.

    ``columns`` holds the backing column(s) on the record table. Composite
    fields list the current representation first and legacy ones after it.
    JoinExistence fields name the related table and its foreign key instead.
    """

    name: str
    kind: FieldKind = FieldKind.SCALAR
    columns: Tuple[str, ...] = ()
    related_table: Optional[str] = None
    foreign_key: Optional[str] = None

    @classmethod
    def scalar(cls, name: str, column: Optional[str] = None) -> "FieldSpec":
        return cls(name=name, kind=FieldKind.SCALAR, columns=(column or name,))

    @classmethod
    def composite(cls, name: str, *columns: str) -> "FieldSpec":
        return cls(name=name, kind=FieldKind.COMPOSITE, columns=tuple(columns))

    @classmethod
    def join_existence(cls, name: str, related_table: str, foreign_key: str) -> "FieldSpec":
        return cls(
            name=name,
            kind=FieldKind.JOIN_EXISTENCE,
            related_table=related_table,
            foreign_key=foreign_key,
        )


DEFAULT_FIELD_SPECS = (
    FieldSpec.scalar("building"),
    FieldSpec.scalar("city"),
    FieldSpec.scalar("location_in_building"),
    FieldSpec.scalar("primary_phone_number"),
    FieldSpec.composite("profile_photo", "profile_photo_id", "image"),
    FieldSpec.scalar("email"),
    FieldSpec.scalar("given_name"),
    FieldSpec.scalar("surname"),
    FieldSpec.join_existence("groups", "memberships", "person_id"),
    FieldSpec.scalar("description"),
    FieldSpec.scalar("current_project"),
)


def column_present(column) -> ColumnElement:
    """Cast to text is non-empty. NULL and '' are both absent."""
    return func.length(func.coalesce(cast(column, String), "")) > 0


def value_present(value: Any) -> bool:
    """Application-side equivalent of :func:`column_present`"""
    if value is None:
        return False
    return str(value) != ""


class FieldRegistry:
    """
    Immutable set of FieldSpecs bound to the record table.

    Specs are validated against the table metadata once, at construction.
    """

    def __init__(self, record_table: Table, specs: Iterable[FieldSpec] = DEFAULT_FIELD_SPECS):
        self.record_table = record_table
        specs = tuple(specs)

        registered: Dict[str, FieldSpec] = {}
        for spec in specs:
            if spec.name in registered:
                raise ConfigurationError(f"Field {spec.name!r} registered twice")
            self._check_spec(spec)
            registered[spec.name] = spec

        self._specs = registered

    def _check_spec(self, spec: FieldSpec) -> None:
        if spec.kind is FieldKind.JOIN_EXISTENCE:
            if not spec.related_table or not spec.foreign_key:
                raise ConfigurationError(f"Field {spec.name!r} needs a related table and foreign key")
            related = self.record_table.metadata.tables.get(spec.related_table)
            if related is None:
                raise ConfigurationError(f"Field {spec.name!r} references unknown table {spec.related_table!r}")
            if spec.foreign_key not in related.c:
                raise ConfigurationError(
                    f"Field {spec.name!r} references unknown column {spec.related_table}.{spec.foreign_key}"
                )
            return

        if not spec.columns:
            raise ConfigurationError(f"Field {spec.name!r} has no backing column")
        if spec.kind is FieldKind.SCALAR and len(spec.columns) != 1:
            raise ConfigurationError(f"Scalar field {spec.name!r} must have exactly one column")
        for column_name in spec.columns:
            if column_name not in self.record_table.c:
                raise ConfigurationError(
                    f"Field {spec.name!r} references unknown column {self.record_table.name}.{column_name}"
                )

    def __contains__(self, name: str) -> bool:
        return name in self._specs

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, name: str) -> FieldSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise ConfigurationError(f"Field {name!r} is not registered") from None

    @property
    def id_column(self):
        return self.record_table.c.id

    def resolve_presence_expression(self, spec: FieldSpec) -> ColumnElement:
        """Boolean expression evaluated by the store for one field of one row"""
        table = self.record_table

        if spec.kind is FieldKind.SCALAR:
            return column_present(table.c[spec.columns[0]])

        if spec.kind is FieldKind.COMPOSITE:
            return or_(*(column_present(table.c[name]) for name in spec.columns))

        related = table.metadata.tables[spec.related_table]
        foreign_key = related.c[spec.foreign_key]
        return select(foreign_key).where(foreign_key == self.id_column).exists()

    def resolve_absence_expression(self, spec: FieldSpec) -> ColumnElement:
        if spec.kind is FieldKind.COMPOSITE:
            # Absent only when every representation is blank
            return and_(*(~column_present(self.record_table.c[name]) for name in spec.columns))
        return ~self.resolve_presence_expression(spec)

    def is_present(self, spec: FieldSpec, record: Any) -> Optional[bool]:
        """
        Presence of ``spec`` on an already loaded record (model instance or mapping).

        Returns None for JoinExistence fields whose relation was not loaded
        with the record, so the caller can ask the store instead.
        """
        if spec.kind is FieldKind.SCALAR:
            return value_present(read_attribute(record, spec.columns[0]))

        if spec.kind is FieldKind.COMPOSITE:
            return any(value_present(read_attribute(record, name)) for name in spec.columns)

        related = read_attribute(record, spec.name, missing=_MISSING)
        if related is _MISSING:
            return None
        return bool(related)


_MISSING = object()


def read_attribute(record: Any, name: str, missing: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, missing)
    return getattr(record, name, missing)
