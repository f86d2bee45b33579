# config/base.py
import os


def _coerce_bool(value, default=False):
    """Convert environment-style truthy/falsey values to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_name_list(value):
    """
    Parse a comma-separated list of field names while keeping order and removing duplicates.

    Returns:
        tuple[str, ...]: Normalized names, empty when unset.
    """
    if not value:
        return ()

    seen = set()
    names = []
    for raw_item in value.split(","):
        item = raw_item.strip().lower()
        if not item or item in seen:
            continue
        seen.add(item)
        names.append(item)
    return tuple(names)


def _parse_int(value, default, *, minimum=1, maximum=None):
    """Parse an integer option, falling back to ``default`` when missing or out of bounds."""
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < minimum or (maximum is not None and number > maximum):
        return default
    return number


class Config:
    # SECRET_KEY must be set via environment variable in production
    _flask_env = os.environ.get("FLASK_ENV", "development")
    _is_testing = _flask_env == "testing"
    _is_production = _flask_env == "production"

    SECRET_KEY = os.environ.get("SECRET_KEY")

    if not SECRET_KEY and _is_production:
        raise ValueError(
            "SECRET_KEY environment variable is required in production. "
            'Generate with: python -c "import secrets; print(secrets.token_hex(32))"'
        )

    if not SECRET_KEY and not _is_testing:
        import warnings

        warnings.warn(
            "SECRET_KEY not set. Using default for development only. "
            "Set SECRET_KEY environment variable before deploying.",
            UserWarning,
        )
        SECRET_KEY = "dev-secret-key-change-in-production"

    if not SECRET_KEY:
        SECRET_KEY = "test-secret-key-placeholder"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Profile completion scoring
    # Buckets are "lo-hi" ranges that must tile 0-100; parsed and validated at startup
    COMPLETION_BUCKETS = os.environ.get("COMPLETION_BUCKETS", "0-19,20-49,50-79,80-100")
    # Empty means the built-in field lists
    COMPLETION_FIELDS = _parse_name_list(os.environ.get("COMPLETION_FIELDS", ""))
    COMPLETION_ADEQUATE_FIELDS = _parse_name_list(os.environ.get("COMPLETION_ADEQUATE_FIELDS", ""))
    COMPLETION_LISTING_ORDER = os.environ.get("COMPLETION_LISTING_ORDER", "email")
    COMPLETION_PAGE_SIZE_MAX = _parse_int(os.environ.get("COMPLETION_PAGE_SIZE_MAX"), 100, maximum=500)
    COMPLETION_PAGE_SIZE_DEFAULT = min(
        _parse_int(os.environ.get("COMPLETION_PAGE_SIZE_DEFAULT"), 25, maximum=500),
        COMPLETION_PAGE_SIZE_MAX,
    )

    JSON_SORT_KEYS = False
    CREATE_TABLES_ON_STARTUP = _coerce_bool(os.environ.get("CREATE_TABLES_ON_STARTUP"), default=True)


class DevelopmentConfig(Config):
    DEBUG = True
    # Project root is the parent of the config directory
    _config_dir = os.path.dirname(os.path.abspath(__file__))
    _project_root = os.path.dirname(_config_dir)
    instance_path = os.path.join(_project_root, "instance")

    # Use absolute path for SQLite - Windows needs forward slashes in URI
    db_path = os.path.join(instance_path, "peoplefinder_dev.db")
    db_path_normalized = db_path.replace("\\", "/")
    db_uri = f"sqlite:///{db_path_normalized}"

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", db_uri)
    SQLALCHEMY_ECHO = _coerce_bool(os.environ.get("SQLALCHEMY_ECHO"), default=False)
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": 5,
            }
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {}


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get("SECRET_KEY", "test-secret-key-for-testing-only")
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"  # Overridden per test with a temporary file
    SQLALCHEMY_ECHO = False
    CREATE_TABLES_ON_STARTUP = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": 5,
        }
    }


class ProductionConfig(Config):
    DEBUG = False
    uri = os.environ.get("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
