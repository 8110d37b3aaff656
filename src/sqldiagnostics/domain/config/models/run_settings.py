"""
Run settings domain model.

Controls a single invocation: where the configuration and catalog live,
where the workbook goes, how results are staged, and the repeat schedule.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CONFIG_FILE = "config.properties"
DEFAULT_CATALOG_FILE = "sql_queries.json"


class RunSettings(BaseModel):
    """Settings for one diagnostics invocation."""

    model_config = ConfigDict(frozen=True)

    config_path: Path = Field(Path(DEFAULT_CONFIG_FILE), description="Connection properties file")
    catalog_path: Path = Field(Path(DEFAULT_CATALOG_FILE), description="Query catalog JSON file")
    output_dir: Path = Field(Path("."), description="Directory receiving the workbook")
    interval_minutes: int = Field(0, description="Minutes between repeated runs (0 = run once)")
    duration_hours: float = Field(0, description="Total hours to keep repeating (0 = run once)")
    staging: bool = Field(False, description="Stage results as CSV files, then merge")
    strict: bool = Field(False, description="Abort the run on the first failing query")

    @field_validator("interval_minutes", "duration_hours")
    @classmethod
    def validate_not_negative(cls, v, info):
        """Negative schedule values are rejected before anything runs."""
        if v < 0:
            raise ValueError(f"{info.field_name} cannot be negative, got {v}")
        return v
