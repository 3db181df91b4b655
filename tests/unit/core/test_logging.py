"""Tests for clipforge.core.logging module."""

import pytest
import structlog

from clipforge.core.logging import add_app_context, get_logger, redact_credentials, setup_logging


@pytest.mark.unit
def test_setup_logging():
    """Test that setup_logging configures structlog."""
    setup_logging()

    logger = structlog.get_logger()
    assert hasattr(logger, "info")
    assert hasattr(logger, "error")


@pytest.mark.unit
def test_get_logger():
    """Test get_logger returns a usable logger."""
    setup_logging()

    logger = get_logger("test")
    logger.info("test message", key="value")
    logger.warning("warning message", count=2)


@pytest.mark.unit
def test_add_app_context():
    """Test app name and environment are added to every event."""
    event = add_app_context(None, "info", {"event": "hello"})

    assert event["app"] == "ClipForge"
    assert event["env"] in ("development", "staging", "production")
    assert event["event"] == "hello"


@pytest.mark.unit
class TestRedactCredentials:
    """Tests for the credential masking processor."""

    def test_masks_present_credentials(self):
        """Test credential values never reach the renderer."""
        event = redact_credentials(
            None, "warning", {"event": "call", "credential": "sk-live", "token": "t"}
        )

        assert event["credential"] == "***"
        assert event["token"] == "***"

    def test_keeps_absent_credentials_visible(self):
        """Test a missing credential stays distinguishable from a masked one."""
        event = redact_credentials(None, "info", {"event": "call", "credential": None})

        assert event["credential"] is None

    def test_other_keys_untouched(self):
        """Test non-secret fields pass through."""
        event = redact_credentials(None, "info", {"event": "call", "provider": "Minimax"})

        assert event == {"event": "call", "provider": "Minimax"}
