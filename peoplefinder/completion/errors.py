# peoplefinder/completion/errors.py
"""
Error taxonomy for profile completion scoring.
"""


class CompletionError(Exception):
    """Base exception for completion scoring failures."""


class ConfigurationError(CompletionError):
    """Raised while building the field registry, policy or buckets."""


class ValidationError(CompletionError):
    """Raised when a configuration option is malformed."""


class NotFound(CompletionError):
    """Raised when a score is requested for a record that does not exist."""

    def __init__(self, record_id):
        super().__init__(f"No record with id {record_id!r}")
        self.record_id = record_id


class StorageError(CompletionError):
    """Raised when the record store fails or returns a result of the wrong shape."""
