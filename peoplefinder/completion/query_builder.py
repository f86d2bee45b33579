# peoplefinder/completion/query_builder.py
"""
Aggregate statements for completion scoring.

Scores, averages and the bucketed histogram are computed entirely by the
record store so the application does constant work whatever the table size.

The first implementation loaded every record, scored each one in Python and
reduced the results. That was O(n) in memory and round-trip time and was
replaced by the statements below; it is not kept as a fallback.
"""

from typing import Iterable, Mapping, Optional

from sqlalchemy import Float, Integer, Numeric, case, cast, func, select
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from .buckets import BucketDefinition
from .policy import CompletionPolicy

AVERAGE_ALIAS = "average_completion_score"


def presence_term(presence: ColumnElement) -> ColumnElement:
    """1 when the field is present, 0 otherwise"""
    return case((presence, 1), else_=0)


def build_score_expression(policy: CompletionPolicy) -> ColumnElement:
    """
    Per-row completion percentage, unrounded.

    The term sum is cast to float before dividing so policies whose size does
    not divide 100 are not truncated.
    """
    terms = [presence_term(policy.presence_expression(name)) for name in policy.full_fields]
    total = terms[0]
    for term in terms[1:]:
        total = total + term
    return cast(total, Float) * 100 / len(policy)


def _normalise_ids(ids: Optional[Iterable]) -> list:
    if ids is None:
        return []
    if isinstance(ids, (str, bytes, int)):
        return [ids]
    return list(dict.fromkeys(ids))


def build_average_query(policy: CompletionPolicy, ids: Optional[Iterable] = None) -> Select:
    """
    AVG of the score expression rounded to 2 decimal places.

    An empty or missing ``ids`` averages the whole table. A single id yields
    that record's own score, which is how per-record lookups are served.
    AVG over no rows is NULL, which callers use to detect unknown ids.
    """
    table = policy.registry.record_table
    average = func.round(cast(func.avg(build_score_expression(policy)), Numeric(5, 2)), 2, type_=Float)

    statement = select(average.label(AVERAGE_ALIAS)).select_from(table)
    ids = _normalise_ids(ids)
    if ids:
        statement = statement.where(table.c.id.in_(ids))
    return statement


def build_bucket_case(score: ColumnElement, buckets: BucketDefinition) -> ColumnElement:
    return case(*((score.between(bucket.lo, bucket.hi), bucket.label) for bucket in buckets))


def build_bucketed_query(policy: CompletionPolicy, buckets: BucketDefinition) -> Select:
    """
    Histogram of integer scores per bucket.

    Records are first counted per distinct rounded score, then each distinct
    score is mapped to its bucket and the counts are summed. The score
    expression is evaluated once per record, and the bucket CASE once per
    distinct score. Grouping is always on subquery columns so the statement
    does not depend on the dialect matching repeated expressions.
    """
    table = policy.registry.record_table

    scored = select(
        func.round(cast(build_score_expression(policy), Numeric), type_=Integer).label("score"),
    ).select_from(table).subquery("scored")

    score_counts = (
        select(func.count().label("record_count"), scored.c.score)
        .group_by(scored.c.score)
        .subquery("score_counts")
    )

    bucketed = select(
        score_counts.c.record_count,
        build_bucket_case(score_counts.c.score, buckets).label("bucket"),
    ).subquery("bucketed")

    return (
        select(bucketed.c.bucket, func.sum(bucketed.c.record_count, type_=Integer).label("record_count"))
        .group_by(bucketed.c.bucket)
        .order_by(bucketed.c.bucket)
    )


def build_presence_counts_query(policy: CompletionPolicy, presences: Mapping[str, ColumnElement]) -> Select:
    """Record total plus one present-count column per labelled presence expression"""
    table = policy.registry.record_table
    columns = [func.count(table.c.id).label("total")]
    columns.extend(
        func.coalesce(func.sum(presence_term(presence)), 0, type_=Integer).label(label)
        for label, presence in presences.items()
    )
    return select(*columns).select_from(table)


def build_field_presence_query(policy: CompletionPolicy) -> Select:
    """Per completion field, the number of records where it is present"""
    return build_presence_counts_query(
        policy, {name: policy.presence_expression(name) for name in policy.full_fields}
    )


def build_inadequate_query(policy: CompletionPolicy, limit: Optional[int] = None, offset: int = 0) -> Select:
    """Records missing an adequate field or a photo, in a stable order for paging"""
    table = policy.registry.record_table
    statement = select(table).where(policy.inadequate_filter()).order_by(*policy.listing_order())
    if limit is not None:
        statement = statement.limit(limit).offset(offset)
    return statement


def build_inadequate_count_query(policy: CompletionPolicy) -> Select:
    table = policy.registry.record_table
    return select(func.count(table.c.id)).select_from(table).where(policy.inadequate_filter())


def build_presence_query(policy: CompletionPolicy, name: str, record_id) -> Select:
    """Whether one field is present on one record, evaluated by the store"""
    table = policy.registry.record_table
    return (
        select(policy.presence_expression(name).label("present"))
        .select_from(table)
        .where(table.c.id == record_id)
    )
