# peoplefinder/completion/__init__.py
"""
Profile completion scoring: field registry, policy, buckets and the
aggregate statements that score records inside the database.
"""

from .buckets import DEFAULT_BUCKETS, Bucket, BucketDefinition, parse_bucket_spec
from .errors import CompletionError, ConfigurationError, NotFound, StorageError, ValidationError
from .fields import DEFAULT_FIELD_SPECS, FieldKind, FieldRegistry, FieldSpec
from .policy import DEFAULT_ADEQUATE_FIELDS, DEFAULT_COMPLETION_FIELDS, CompletionPolicy

__all__ = [
    "Bucket",
    "BucketDefinition",
    "DEFAULT_BUCKETS",
    "parse_bucket_spec",
    "CompletionError",
    "ConfigurationError",
    "NotFound",
    "StorageError",
    "ValidationError",
    "FieldKind",
    "FieldSpec",
    "FieldRegistry",
    "DEFAULT_FIELD_SPECS",
    "CompletionPolicy",
    "DEFAULT_ADEQUATE_FIELDS",
    "DEFAULT_COMPLETION_FIELDS",
]
