# peoplefinder/services/completion_service.py
"""
Completion Service - profile completion scores, averages and distribution
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Set

from flask import current_app
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from peoplefinder.completion.buckets import (
    DEFAULT_BUCKET_SPEC,
    DEFAULT_BUCKETS,
    BucketDefinition,
    parse_bucket_spec,
)
from peoplefinder.completion.errors import NotFound, StorageError
from peoplefinder.completion.fields import DEFAULT_FIELD_SPECS, FieldKind, FieldRegistry, read_attribute
from peoplefinder.completion.policy import DEFAULT_ADEQUATE_FIELDS, DEFAULT_COMPLETION_FIELDS, CompletionPolicy
from peoplefinder.completion.query_builder import (
    AVERAGE_ALIAS,
    build_average_query,
    build_bucketed_query,
    build_field_presence_query,
    build_inadequate_count_query,
    build_inadequate_query,
    build_presence_query,
)

COMPLETE_SCORE = 100
EXTENSION_KEY = "completion_service"


@dataclass
class FieldCompleteness:
    """How many records have a single completion field filled in"""

    field_name: str
    total_records: int
    records_with_value: int
    records_without_value: int
    completeness_percentage: float


@dataclass
class InadequatePage:
    """One page of the inadequate profile listing"""

    items: List[Dict[str, Any]]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CompletionService:
    """
    Read-only completion queries against the record store.

    Holds no mutable state. Every call opens its own connection and releases
    it on return, error or cancellation, so one instance can be shared by
    any number of concurrent callers. Calls are read committed at query time:
    two calls are not guaranteed to see the same snapshot.
    """

    def __init__(self, engine: Engine, policy: CompletionPolicy, buckets: BucketDefinition = DEFAULT_BUCKETS):
        self.engine = engine
        self.policy = policy
        self.buckets = buckets

    def _execute(self, statement, description: str) -> list:
        try:
            with self.engine.connect() as connection:
                return connection.execute(statement).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error computing {description}: {str(e)}", exc_info=True)
            raise StorageError(f"Failed to compute {description}") from e

    def _scalar_row(self, rows: list, description: str):
        if len(rows) != 1 or len(rows[0]) != 1:
            raise StorageError(f"Unexpected result shape for {description}: {rows!r}")
        return rows[0][0]

    def _average(self, ids: Optional[Iterable]) -> Optional[float]:
        rows = self._execute(build_average_query(self.policy, ids), AVERAGE_ALIAS)
        value = self._scalar_row(rows, AVERAGE_ALIAS)
        return None if value is None else float(value)

    def score_for(self, record_id) -> int:
        """
        Completion score (0-100) of a single record, rounded half up.

        Raises NotFound when no record has ``record_id``; the average over no
        rows is NULL whereas an existing empty profile averages to 0.
        """
        if record_id is None:
            raise NotFound(record_id)
        average = self._average([record_id])
        if average is None:
            raise NotFound(record_id)
        return round_half_up(average)

    def average_score(self, ids: Optional[Iterable] = None) -> float:
        """
        Average completion score rounded to 2 decimal places.

        ``ids=None`` and an empty collection both average every record. The
        filter is only applied when it names at least one id, mirroring the
        single statement used for all cases. An empty table averages to 0.0.
        """
        average = self._average(ids)
        if average is None:
            return 0.0
        return round(average, 2)

    def bucketed_distribution(self) -> Dict[str, int]:
        """Record count per configured bucket, over every record"""
        rows = self._execute(build_bucketed_query(self.policy, self.buckets), "bucketed completion")
        distribution = self.buckets.parse_bucketed_results(rows)
        current_app.logger.debug(f"Completion distribution: {distribution}")
        return distribution

    def is_complete(self, record_id) -> bool:
        return self.score_for(record_id) == COMPLETE_SCORE

    def missing_fields_for(self, record_id, record: Any) -> Set[str]:
        """
        Completion fields blank on an already loaded record.

        Evaluated on the record attributes in the application because the
        caller needs field-level detail. A JoinExistence relation that was not
        loaded with the record is checked against the store by ``record_id``.
        """
        missing = set()
        for spec in self.policy.fields:
            present = self.policy.registry.is_present(spec, record)
            if present is None:
                present = self._related_row_exists(record_id, spec)
            if not present:
                missing.add(spec.name)
        return missing

    def needed_for_completion(self, record: Any, field_name: str, record_id=None) -> bool:
        """
        Whether ``field_name`` still has to be filled in on ``record``.

        Accepts a Composite field by its own name or by any of its backing
        columns, e.g. ``profile_photo_id`` for the photo. ``record_id``
        defaults to the record's own ``id``, read from a model instance or a
        mapping alike.
        """
        spec = self._spec_for(field_name)
        if spec is None:
            return False
        if record_id is None:
            record_id = read_attribute(record, "id")
        present = self.policy.registry.is_present(spec, record)
        if present is None:
            present = self._related_row_exists(record_id, spec)
        return not present

    def _spec_for(self, field_name: str):
        for spec in self.policy.fields:
            if spec.name == field_name:
                return spec
            if spec.kind is FieldKind.COMPOSITE and field_name in spec.columns:
                return spec
        return None

    def _related_row_exists(self, record_id, spec) -> bool:
        if record_id is None:
            return False
        rows = self._execute(build_presence_query(self.policy, spec.name, record_id), f"{spec.name} presence")
        return bool(rows and rows[0][0])

    def field_completeness(self) -> List[FieldCompleteness]:
        """Present/absent counts for each completion field, in policy order"""
        rows = self._execute(build_field_presence_query(self.policy), "field completeness")
        if len(rows) != 1:
            raise StorageError(f"Unexpected result shape for field completeness: {rows!r}")
        counts = rows[0]._mapping
        total = int(counts["total"] or 0)

        fields = []
        for name in self.policy.full_fields:
            with_value = int(counts[name] or 0)
            completeness = (with_value / total * 100) if total > 0 else 0.0
            fields.append(
                FieldCompleteness(
                    field_name=name,
                    total_records=total,
                    records_with_value=with_value,
                    records_without_value=total - with_value,
                    completeness_percentage=round(completeness, 2),
                )
            )
        return fields

    def inadequate_records(self, page: int = 1, per_page: int = 25) -> InadequatePage:
        """Records missing an adequate field or a photo, ordered for stable paging"""
        page = max(1, page)
        offset = (page - 1) * per_page
        try:
            with self.engine.connect() as connection:
                total = connection.execute(build_inadequate_count_query(self.policy)).scalar_one()
                rows = connection.execute(build_inadequate_query(self.policy, limit=per_page, offset=offset)).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error listing inadequate profiles: {str(e)}", exc_info=True)
            raise StorageError("Failed to list inadequate profiles") from e

        return InadequatePage(items=[dict(row._mapping) for row in rows], total=total, page=page, per_page=per_page)


def init_completion_service(app) -> CompletionService:
    """
    Build the registry, policy and buckets from configuration once and share
    a single service on the application. Configuration problems surface here,
    at startup, never during a query.
    """
    from peoplefinder.models import Person, db

    buckets = parse_bucket_spec(app.config.get("COMPLETION_BUCKETS") or DEFAULT_BUCKET_SPEC)
    registry = FieldRegistry(Person.__table__, DEFAULT_FIELD_SPECS)
    policy = CompletionPolicy(
        registry,
        adequate_fields=app.config.get("COMPLETION_ADEQUATE_FIELDS") or DEFAULT_ADEQUATE_FIELDS,
        full_fields=app.config.get("COMPLETION_FIELDS") or DEFAULT_COMPLETION_FIELDS,
        order_by=app.config.get("COMPLETION_LISTING_ORDER", "email"),
    )

    with app.app_context():
        engine = db.engine

    service = CompletionService(engine, policy, buckets)
    app.extensions[EXTENSION_KEY] = service
    app.logger.info(f"Completion scoring initialised: {policy!r} {buckets!r}")
    return service


def get_completion_service() -> CompletionService:
    try:
        return current_app.extensions[EXTENSION_KEY]
    except KeyError:
        raise RuntimeError("Completion service has not been initialised for this application") from None
