"""Tests for base error types."""

import pytest
from danki.common import DankiError, ConfigurationError


class TestDankiError:
    """Test base error behaviour."""

    def test_message_and_context(self):
        """Test that message and context are preserved."""
        error = DankiError("Test error", archive="deck.apkg")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {"archive": "deck.apkg"}

    def test_context_defaults_to_empty(self):
        error = DankiError("No context")
        assert error.context == {}

    def test_configuration_error_inheritance(self):
        """Test ConfigurationError is a DankiError."""
        error = ConfigurationError("Bad config", path="/etc/danki/config.toml")

        assert isinstance(error, DankiError)
        assert error.context["path"] == "/etc/danki/config.toml"

    def test_can_be_caught_as_exception(self):
        with pytest.raises(Exception) as exc_info:
            raise ConfigurationError("boom")
        assert exc_info.value.message == "boom"
