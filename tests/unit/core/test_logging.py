import base64
import json
from unittest.mock import MagicMock

import structlog

from stamplink.core.config import DEFAULT_DATA_PROTECTION_KEY, Settings
from stamplink.core.logging import (
    LoggingContext,
    add_correlation_id,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    rename_message_field,
)
from stamplink.domain.services.token_provider import DataProtectorTokenProvider


def test_add_correlation_id_keeps_existing():
    event_dict = add_correlation_id(None, "info", {"correlation_id": "cid_request"})

    assert event_dict["correlation_id"] == "cid_request"


def test_add_correlation_id_generates_one():
    event_dict = add_correlation_id(None, "info", {})

    assert event_dict["correlation_id"].startswith("cid_")


def test_rename_message_field():
    event_dict = rename_message_field(None, "info", {"event": "Validation token rejected"})

    assert event_dict == {"message": "Validation token rejected"}


def test_json_logging_writes_to_stderr(capsys):
    configure_logging(Settings(environment="production", log_format="json", log_level="INFO"))

    get_logger("stamplink.test").info("Validation token rejected", event_type="token_expired")

    captured = capsys.readouterr()
    assert captured.out == ""
    entry = json.loads(captured.err.strip().splitlines()[-1])
    assert entry["message"] == "Validation token rejected"
    assert entry["event_type"] == "token_expired"
    assert entry["level"] == "info"
    assert "timestamp" in entry


def test_log_level_filters_lower_levels(capsys):
    configure_logging(Settings(environment="production", log_level="WARNING"))

    get_logger("stamplink.test").info("should not appear")

    assert "should not appear" not in capsys.readouterr().err


def test_default_key_warning_in_production(capsys):
    configure_logging(
        Settings(environment="production", data_protection_key=DEFAULT_DATA_PROTECTION_KEY)
    )

    assert "Default data protection key in use" in capsys.readouterr().err


def test_logging_context_binds_and_unbinds():
    with LoggingContext(correlation_id="abc123", resource_id="usr_1"):
        assert structlog.contextvars.get_contextvars() == {
            "correlation_id": "abc123",
            "resource_id": "usr_1",
        }

    assert structlog.contextvars.get_contextvars() == {}


def test_bind_and_clear_correlation_id():
    bind_correlation_id("cid_bound")
    try:
        assert structlog.contextvars.get_contextvars()["correlation_id"] == "cid_bound"
    finally:
        clear_context()

    assert structlog.contextvars.get_contextvars() == {}


def test_json_logging_renders_exception_details(capsys):
    configure_logging(Settings(environment="production", log_format="json", log_level="INFO"))
    protector = MagicMock()
    protector.unprotect.side_effect = RuntimeError("unprotect exploded")
    provider = DataProtectorTokenProvider(protector)
    token = base64.b64encode(b"anything").decode("ascii")

    assert provider.validate(token, "purpose", "usr_1", "STAMP") is False

    entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert entry["event_type"] == "unhandled_exception"
    assert entry["level"] == "error"
    assert "RuntimeError: unprotect exploded" in entry["exception"]
