# peoplefinder/completion/buckets.py
"""
Score buckets for the completion histogram.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Tuple

from .errors import ConfigurationError, StorageError, ValidationError

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class Bucket:
    """Inclusive score range"""

    lo: int
    hi: int

    @property
    def label(self) -> str:
        return f"[{self.lo},{self.hi}]"

    def __contains__(self, score: int) -> bool:
        return self.lo <= score <= self.hi


class BucketDefinition:
    """
    Ordered, non-overlapping buckets whose union is exactly 0..100, so every
    integer score lands in exactly one bucket.
    """

    def __init__(self, buckets: Iterable[Tuple[int, int]]):
        self.buckets = tuple(bucket if isinstance(bucket, Bucket) else Bucket(*bucket) for bucket in buckets)
        self._validate()

    def _validate(self) -> None:
        if not self.buckets:
            raise ConfigurationError("At least one score bucket is required")

        expected_lo = MIN_SCORE
        for bucket in self.buckets:
            if bucket.lo > bucket.hi:
                raise ConfigurationError(f"Bucket {bucket.label} has its bounds reversed")
            if bucket.lo != expected_lo:
                raise ConfigurationError(
                    f"Bucket {bucket.label} should start at {expected_lo}; buckets must not overlap or leave gaps"
                )
            expected_lo = bucket.hi + 1

        if expected_lo - 1 != MAX_SCORE:
            raise ConfigurationError(f"Buckets must end at {MAX_SCORE}, not {expected_lo - 1}")

    def __iter__(self) -> Iterator[Bucket]:
        return iter(self.buckets)

    def __len__(self) -> int:
        return len(self.buckets)

    def __repr__(self):
        return f"<BucketDefinition {' '.join(self.labels)}>"

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(bucket.label for bucket in self.buckets)

    def default_distribution(self) -> Dict[str, int]:
        return {label: 0 for label in self.labels}

    def parse_bucketed_results(self, rows: Iterable[Any]) -> Dict[str, int]:
        """
        Merge raw ``(bucket, record_count)`` rows over a zero-filled
        distribution. The store omits buckets without records; this restores
        them so every configured label is always present.
        """
        results = self.default_distribution()
        for row in rows:
            mapping = row._mapping if hasattr(row, "_mapping") else row
            try:
                label = mapping["bucket"]
                count = mapping["record_count"]
            except (KeyError, TypeError) as exc:
                raise StorageError(f"Unexpected bucketed result row: {row!r}") from exc

            if label not in results:
                raise StorageError(f"Bucketed result contains unknown bucket {label!r}")
            results[label] = int(count or 0)
        return results


DEFAULT_BUCKET_SPEC = "0-19,20-49,50-79,80-100"
DEFAULT_BUCKETS = BucketDefinition([(0, 19), (20, 49), (50, 79), (80, 100)])


def parse_bucket_spec(value: str) -> BucketDefinition:
    """
    Parse ``"0-19,20-49,50-79,80-100"`` into a BucketDefinition.

    Raises ValidationError for malformed text and ConfigurationError when the
    ranges do not tile 0..100.
    """
    if value is None or not str(value).strip():
        raise ValidationError("COMPLETION_BUCKETS must not be empty")

    ranges = []
    for raw_item in str(value).split(","):
        item = raw_item.strip()
        if not item:
            continue
        lo, sep, hi = item.partition("-")
        if not sep:
            raise ValidationError(f"Invalid bucket {item!r}; expected 'lo-hi'")
        try:
            ranges.append((int(lo), int(hi)))
        except ValueError:
            raise ValidationError(f"Invalid bucket {item!r}; bounds must be integers") from None

    if not ranges:
        raise ValidationError("COMPLETION_BUCKETS must name at least one bucket")
    return BucketDefinition(ranges)