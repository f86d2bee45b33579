# config/validation.py

"""
Environment variable validation for the People Finder application.
Validates required environment variables at startup.
"""

import os
import sys
from typing import List, Tuple

from peoplefinder.completion.buckets import parse_bucket_spec
from peoplefinder.completion.errors import ConfigurationError, ValidationError


def validate_completion_settings(environ=None) -> List[str]:
    """
    Validate completion scoring options.

    Returns:
        List of error messages, empty when the options are usable
    """
    environ = os.environ if environ is None else environ
    errors = []

    raw_buckets = environ.get("COMPLETION_BUCKETS")
    if raw_buckets is not None:
        try:
            parse_bucket_spec(raw_buckets)
        except (ValidationError, ConfigurationError) as e:
            errors.append(f"COMPLETION_BUCKETS is invalid: {e}")

    for name in ("COMPLETION_PAGE_SIZE_DEFAULT", "COMPLETION_PAGE_SIZE_MAX"):
        raw_value = environ.get(name)
        if raw_value is None:
            continue
        try:
            if int(raw_value) < 1:
                raise ValueError(raw_value)
        except ValueError:
            errors.append(f"{name} must be a positive integer, got {raw_value!r}")

    return errors


def validate_environment(flask_env: str = None, environ=None) -> Tuple[bool, List[str]]:
    """
    Validate required environment variables.

    Args:
        flask_env: Flask environment (development, production, testing)
                  If None, reads from FLASK_ENV environment variable
        environ: Mapping to validate, defaults to os.environ

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    environ = os.environ if environ is None else environ
    if flask_env is None:
        flask_env = environ.get("FLASK_ENV", "development")

    errors = validate_completion_settings(environ)

    if flask_env == "production":
        secret_key = environ.get("SECRET_KEY", "")
        if not secret_key or secret_key in ("your-secret-key", "your_secret_key"):
            errors.append(
                "SECRET_KEY is required in production and must not be the default value. "
                'Generate a secure key: python -c "import secrets; print(secrets.token_hex(32))"'
            )

        if not environ.get("DATABASE_URL"):
            errors.append(
                "DATABASE_URL is required in production. "
                "Set it to your PostgreSQL connection string."
            )

    is_valid = len(errors) == 0
    return is_valid, errors


def validate_and_exit(flask_env: str = None) -> None:
    """
    Validate environment variables and exit with error if validation fails.
    Intended to be called at application startup.

    Args:
        flask_env: Flask environment (development, production, testing)
    """
    is_valid, errors = validate_environment(flask_env)

    if not is_valid:
        print("=" * 80, file=sys.stderr)
        print("ENVIRONMENT VALIDATION FAILED", file=sys.stderr)
        print("=" * 80, file=sys.stderr)
        print("\nThe following environment variables are missing or invalid:\n", file=sys.stderr)

        for i, error in enumerate(errors, 1):
            print(f"{i}. {error}", file=sys.stderr)

        print("\n" + "=" * 80, file=sys.stderr)
        print("Please check your .env file or environment variables.", file=sys.stderr)
        print("=" * 80, file=sys.stderr)

        sys.exit(1)
