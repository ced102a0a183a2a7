import pytest

from config.base import _coerce_bool, _parse_loader_list, _parse_optional_float
from config.validation import EMPOWER_ENV_VARS, validate_and_exit, validate_environment

PRODUCTION_ENV = {
    "SECRET_KEY": "a-real-production-secret",
    "DATABASE_URL": "postgresql://campaign@db/campaign",
    "AUTH0_DOMAIN": "tenant.auth0.com",
    "AUTH0_MANAGEMENT_API_CLIENT_ID": "id",
    "AUTH0_MANAGEMENT_API_CLIENT_SECRET": "secret",
    "EMPOWER_SHARED_SECRET": "shared",
}


@pytest.fixture
def production_env(monkeypatch):
    for key in list(PRODUCTION_ENV) + ["CONTACT_LOADERS"]:
        monkeypatch.delenv(key, raising=False)
    for key, value in PRODUCTION_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


def test_non_production_environments_skip_validation(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)

    assert validate_environment("development") == (True, [])
    assert validate_environment("testing") == (True, [])


def test_complete_production_environment_is_valid(production_env):
    assert validate_environment("production") == (True, [])


def test_default_secret_key_is_rejected(production_env):
    production_env.setenv("SECRET_KEY", "your-secret-key")

    is_valid, errors = validate_environment("production")

    assert not is_valid
    assert errors[0].startswith("SECRET_KEY is required")


@pytest.mark.parametrize("missing", EMPOWER_ENV_VARS)
def test_empower_settings_required_when_enabled(production_env, missing):
    production_env.delenv(missing)

    is_valid, errors = validate_environment("production")

    assert not is_valid
    assert errors == [f"{missing} is required when the empower contact loader is enabled"]


def test_empower_settings_optional_when_disabled(production_env):
    production_env.setenv("CONTACT_LOADERS", "csv_s3_upload")
    for name in EMPOWER_ENV_VARS:
        production_env.delenv(name)

    assert validate_environment("production") == (True, [])


def test_validate_and_exit(production_env, capsys):
    production_env.delenv("DATABASE_URL")

    with pytest.raises(SystemExit) as excinfo:
        validate_and_exit("production")

    assert excinfo.value.code == 1
    assert "DATABASE_URL is required in production" in capsys.readouterr().err


def test_config_parsers():
    assert _parse_loader_list("CSV_S3_UPLOAD, empower,csv-s3-upload,,") == ("csv-s3-upload", "empower")
    assert _parse_loader_list("") == ()
    assert _parse_optional_float("2.5") == 2.5
    assert _parse_optional_float("") is None
    assert _parse_optional_float("-1") is None
    assert _parse_optional_float("soon") is None
    assert _coerce_bool("Yes") is True
    assert _coerce_bool("off", default=True) is False
    assert _coerce_bool("maybe", default=True) is True


def test_testing_config_is_loaded(app):
    assert app.config["TESTING"] is True
    assert app.config["CONTACT_LOADERS"] == ("csv-s3-upload", "empower")
    assert app.config["PHONE_NUMBER_COUNTRY"] == "US"
    assert app.config["SQLALCHEMY_DATABASE_URI"] == "sqlite:///:memory:"
