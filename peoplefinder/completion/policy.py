# peoplefinder/completion/policy.py
"""
Completion policy: the fields that make up the completion score and the
smaller "adequate" subset every profile is expected to have.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

from .errors import ConfigurationError
from .fields import FieldKind, FieldRegistry, FieldSpec

DEFAULT_ADEQUATE_FIELDS = (
    "building",
    "city",
    "location_in_building",
    "primary_phone_number",
)

DEFAULT_COMPLETION_FIELDS = DEFAULT_ADEQUATE_FIELDS + (
    "profile_photo",
    "email",
    "given_name",
    "surname",
    "groups",
)


class CompletionPolicy:
    """Ordered, equally weighted set of registered fields"""

    def __init__(
        self,
        registry: FieldRegistry,
        adequate_fields: Sequence[str] = DEFAULT_ADEQUATE_FIELDS,
        full_fields: Sequence[str] = DEFAULT_COMPLETION_FIELDS,
        order_by: str = "email",
    ):
        self.registry = registry
        self.adequate_fields = _unique_names(adequate_fields, "adequate")
        self.full_fields = _unique_names(full_fields, "completion")

        for name in self.full_fields:
            registry.get(name)

        not_in_full = [name for name in self.adequate_fields if name not in self.full_fields]
        if not_in_full:
            raise ConfigurationError(f"Adequate fields {not_in_full} are not completion fields")

        if order_by not in registry.record_table.c:
            raise ConfigurationError(f"Cannot order listings by unknown column {order_by!r}")
        self.order_by = order_by

    def __repr__(self):
        return f"<CompletionPolicy full={list(self.full_fields)} adequate={list(self.adequate_fields)}>"

    @property
    def fields(self) -> List[FieldSpec]:
        return [self.registry.get(name) for name in self.full_fields]

    @property
    def composite_fields(self) -> List[FieldSpec]:
        return [spec for spec in self.fields if spec.kind is FieldKind.COMPOSITE]

    def __len__(self) -> int:
        return len(self.full_fields)

    def presence_expression(self, name: str) -> ColumnElement:
        return self.registry.resolve_presence_expression(self.registry.get(name))

    def inadequate_filter(self) -> ColumnElement:
        """
        Store predicate selecting records with any adequate field blank, or
        with no photo in any representation.
        """
        missing = [self.registry.resolve_absence_expression(self.registry.get(name)) for name in self.adequate_fields]
        missing.extend(
            self.registry.resolve_absence_expression(spec)
            for spec in self.composite_fields
            if spec.name not in self.adequate_fields
        )
        return or_(*missing)

    def listing_order(self) -> Tuple[ColumnElement, ...]:
        table = self.registry.record_table
        return (table.c[self.order_by].asc(), table.c.id.asc())


def _unique_names(names: Optional[Iterable[str]], label: str) -> Tuple[str, ...]:
    names = tuple(names or ())
    if not names:
        raise ConfigurationError(f"The {label} field list must not be empty")
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate {label} fields: {duplicates}")
    return names
