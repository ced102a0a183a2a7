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


def _parse_loader_list(value):
    """
    Parse a comma-separated contact loader list while keeping order and removing duplicates.

    Returns:
        tuple[str, ...]: Normalized loader identifiers.
    """
    if not value:
        return ()

    seen = set()
    loaders = []
    for raw_item in value.split(","):
        item = raw_item.strip().lower().replace("_", "-")
        if not item or item in seen:
            continue
        seen.add(item)
        loaders.append(item)
    return tuple(loaders)


def _parse_optional_float(value):
    """Parse a positive float, returning None when unset or invalid."""
    if value is None or str(value).strip() == "":
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


class Config:
    _flask_env = os.environ.get("FLASK_ENV", "development")
    _is_testing = _flask_env == "testing"
    _is_production = _flask_env == "production"

    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Only require SECRET_KEY in production mode
    if not SECRET_KEY and _is_production:
        raise ValueError(
            "SECRET_KEY environment variable is required in production. "
            'Generate with: python -c "import secrets; print(secrets.token_hex(32))"'
        )

    if not SECRET_KEY:
        SECRET_KEY = "dev-secret-key-change-in-production"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Contact loader configuration
    CONTACT_LOADERS = _parse_loader_list(os.environ.get("CONTACT_LOADERS", "csv-s3-upload,empower"))

    # Empower provisioning integration (Auth0 management API + shared secret)
    AUTH0_DOMAIN = os.environ.get("AUTH0_DOMAIN")
    AUTH0_MANAGEMENT_API_CLIENT_ID = os.environ.get("AUTH0_MANAGEMENT_API_CLIENT_ID")
    AUTH0_MANAGEMENT_API_CLIENT_SECRET = os.environ.get("AUTH0_MANAGEMENT_API_CLIENT_SECRET")
    EMPOWER_SHARED_SECRET = os.environ.get("EMPOWER_SHARED_SECRET")

    # CSV upload parsing
    PHONE_NUMBER_COUNTRY = os.environ.get("PHONE_NUMBER_COUNTRY", "US").strip().upper() or "US"

    # Outbound HTTP calls (Auth0, pre-signed storage PUT). None means no timeout.
    HTTP_TIMEOUT_SECONDS = _parse_optional_float(os.environ.get("HTTP_TIMEOUT_SECONDS"))


class DevelopmentConfig(Config):
    DEBUG = True
    _config_dir = os.path.dirname(os.path.abspath(__file__))
    _project_root = os.path.dirname(_config_dir)
    instance_path = os.path.join(_project_root, "instance")

    if not os.path.exists(instance_path):
        os.makedirs(instance_path, exist_ok=True)

    # SQLite URI format: sqlite:///absolute/path (3 slashes for absolute path)
    db_path = os.path.join(instance_path, "campaign_dev.db").replace("\\", "/")
    db_uri = f"sqlite:///{db_path}"

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
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": 5,
        }
    }
    AUTH0_DOMAIN = "auth0.test"
    AUTH0_MANAGEMENT_API_CLIENT_ID = "test-client-id"
    AUTH0_MANAGEMENT_API_CLIENT_SECRET = "test-client-secret"
    EMPOWER_SHARED_SECRET = "test-shared-secret"


class ProductionConfig(Config):
    DEBUG = False
    uri = os.environ.get("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_ECHO = False
