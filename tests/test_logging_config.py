import json
import logging

from campaign_app.utils.logging_config import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord("campaign_app.test", logging.INFO, __file__, 10, "Uploaded %s", ("list.csv",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    formatter = JSONFormatter(app_name="Campaign Contact Loaders", app_version="1.0.0")

    payload = json.loads(formatter.format(_record(contacts=3, s3_key="uploads/abc")))

    assert payload["message"] == "Uploaded list.csv"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "campaign_app.test"
    assert payload["app"] == "Campaign Contact Loaders"
    assert payload["contacts"] == 3
    assert payload["s3_key"] == "uploads/abc"
    assert "args" not in payload
    assert "exception" not in payload


def test_setup_logging_replaces_its_own_handlers(app):
    app.config.update({"ENABLE_CONSOLE_LOGGING": True, "ENABLE_FILE_LOGGING": False, "LOG_FORMAT": "json"})
    package_logger = logging.getLogger("campaign_app")
    foreign = logging.NullHandler()
    package_logger.addHandler(foreign)
    try:
        setup_logging(app)
        setup_logging(app)

        managed = [handler for handler in package_logger.handlers if handler is not foreign]
        assert len(managed) == 1
        assert isinstance(managed[0].formatter, JSONFormatter)
        assert foreign in package_logger.handlers
    finally:
        package_logger.removeHandler(foreign)
        app.config.update({"ENABLE_CONSOLE_LOGGING": False, "LOG_FORMAT": "text"})
        setup_logging(app)


def test_setup_logging_writes_rotating_file(app, tmp_path):
    app.config.update({"ENABLE_FILE_LOGGING": True, "LOG_DIR": str(tmp_path / "logs"), "LOG_LEVEL": "INFO"})
    try:
        setup_logging(app)
        app.logger.info("file logging works")
        for handler in app.logger.handlers:
            handler.flush()

        assert "file logging works" in (tmp_path / "logs" / "application.log").read_text()
    finally:
        app.config.update({"ENABLE_FILE_LOGGING": False, "LOG_LEVEL": "WARNING"})
        setup_logging(app)
