"""``[logging]`` section of the danki config."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class LoggingConfig(BaseModel):
    """Console format, level and the optional JSON log file."""

    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level"
    )
    format: Literal["simple", "detailed", "json"] = Field(
        default="simple",
        description="Console format"
    )
    file: Optional[str] = Field(default=None, description="JSON log file, rotated")
    file_max_mb: int = Field(default=10, ge=1, description="Rotate the log file at this size")
    file_backups: int = Field(default=5, ge=0, description="Rotated log files kept")

    @field_validator('level', 'format', mode='before')
    @classmethod
    def normalize_case(cls, v, info: ValidationInfo):
        # Config files and DANKI_LOGGING__LEVEL accept any casing
        if not isinstance(v, str):
            return v
        v = v.strip()
        return v.upper() if info.field_name == 'level' else v.lower()

    @field_validator('file', mode='before')
    @classmethod
    def empty_file_disables(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
