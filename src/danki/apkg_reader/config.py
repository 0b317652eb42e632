"""Configuration schema for the package reader."""

from pydantic import BaseModel, Field, ConfigDict
from danki.common import LoggingConfig

DEFAULT_ROW_LIMIT = 1000
DEFAULT_EXPORT_FILENAME = "anki_export_quizlet.csv"


class ReaderConfig(BaseModel):
    """Configuration for reading packages."""

    model_config = ConfigDict(extra='forbid')

    row_limit: int = Field(
        default=DEFAULT_ROW_LIMIT,
        ge=1,
        description="Maximum number of cards read from a single package"
    )


class ExportConfig(BaseModel):
    """Configuration for CSV export."""

    model_config = ConfigDict(extra='forbid')

    filename: str = Field(
        default=DEFAULT_EXPORT_FILENAME,
        min_length=1,
        description="Name of the exported CSV file"
    )
    output_dir: str = Field(
        default=".",
        description="Directory the CSV file is written to"
    )


class DankiConfig(BaseModel):
    """Root configuration for danki."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reader: ReaderConfig = Field(default_factory=ReaderConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
