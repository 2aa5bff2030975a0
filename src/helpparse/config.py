"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "HELPPARSE_"


class Settings(BaseModel):
    default_format:      str = Field(default="auto", description="Parser name or format; 'auto' detects")
    base_path:           Optional[str] = Field(default=None, description="Prefix for relative asset URLs")
    csv_delimiter:       Optional[str] = Field(default=None, min_length=1, max_length=1,
                                               description="CSV delimiter; unset uses tab for .tsv, else comma")
    csv_has_header:      bool = True
    csv_render_as_table: bool = True
    max_rows:            int = Field(default=0, ge=0, description="Max CSV data rows rendered; 0 = unlimited")
    max_field_size:      int = Field(default=0, ge=0, description="Max characters per CSV cell; 0 = unlimited")
    max_nesting:         int = Field(default=0, ge=0, description="Max markdown nesting depth; 0 = markdown-it default")
    render_placeholders: bool = Field(default=True, description="Replace MDX components with placeholders")
    log_level:           str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then HELPPARSE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
