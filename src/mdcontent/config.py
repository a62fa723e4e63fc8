"""Application configuration: settings schema and config.yaml loader"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:         str = "mdcontent"
    db_url:           str = "sqlite:///mdcontent.db"
    content_dir:      str = Field(default="content", description="Root directory of the content collection")
    posts_dir:        str = Field(default="posts", description="Subdirectory of content_dir holding dated posts")
    output_dir:       str = Field(default="dist", description="Directory for exported MD + JSON files")
    parser_config:    str = Field(default="commonmark", description="MarkdownIt parser preset name")
    max_versions:     int = Field(default=10, ge=0, description="Max stored versions per doc; 0 disables pruning")
    words_per_minute: int = Field(default=200, ge=1, description="Reading speed used for reading time")
    strict:           bool = Field(default=False, description="Treat validation warnings as errors")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDCONTENT_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")
        logger.debug("Loaded %s", CONFIG_FILE)

    for name in Settings.model_fields:
        if val := os.getenv(f"MDCONTENT_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
