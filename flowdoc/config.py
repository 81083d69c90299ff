"""
FlowDoc settings.

Values come from ``FLOWDOC_*`` environment variables or a ``.env`` file, e.g.
``FLOWDOC_STORAGE_DIR=~/.flowdoc`` or ``FLOWDOC_DEBUG=true``.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library and CLI settings."""

    model_config = SettingsConfigDict(env_prefix="FLOWDOC_", env_file=".env", extra="ignore")

    # Directory holding one JSON file per storage key
    storage_dir: Path = Path(".flowdoc")
    debug: bool = False

    # Names given to generated flows and nodes
    default_flow_name: str = "Main flow"
    start_node_label: str = "Start"
    new_node_label: str = "New process"
    sub_flow_suffix: str = "detail"


@lru_cache
def get_settings() -> Settings:
    return Settings()
