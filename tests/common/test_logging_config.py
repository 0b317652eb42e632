"""Tests for the [logging] config section."""

import pytest
from pydantic import ValidationError
from danki.apkg_reader.config import DankiConfig
from danki.common.logging_config import LoggingConfig


class TestLoggingConfig:
    """Test LoggingConfig validation."""

    def test_console_only_by_default(self):
        config = LoggingConfig()

        assert (config.level, config.format, config.file) == ("INFO", "simple", None)
        assert config.file_max_mb == 10
        assert config.file_backups == 5

    @pytest.mark.parametrize("raw,expected", [(" debug ", "DEBUG"), ("Warning", "WARNING")])
    def test_level_from_env_style_input(self, raw, expected):
        assert LoggingConfig(level=raw).level == expected

    def test_format_is_lowercased(self):
        assert LoggingConfig(format="JSON").format == "json"

    @pytest.mark.parametrize("field,value", [
        ("level", "CRITICAL"),
        ("level", 10),
        ("format", "xml"),
        ("file_max_mb", 0),
        ("file_backups", -1),
    ])
    def test_rejects_unsupported_values(self, field, value):
        with pytest.raises(ValidationError):
            LoggingConfig(**{field: value})

    def test_blank_file_disables_file_logging(self):
        assert LoggingConfig(file="  ").file is None

    def test_misspelled_key_in_danki_config(self):
        with pytest.raises(ValidationError):
            DankiConfig(logging={"fromat": "json"})

    def test_dump_omits_unset_file_for_toml(self):
        data = DankiConfig(logging={"level": "error"}).model_dump(exclude_none=True)

        assert data["logging"] == {
            "level": "ERROR",
            "format": "simple",
            "file_max_mb": 10,
            "file_backups": 5,
        }
