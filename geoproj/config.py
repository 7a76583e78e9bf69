"""
Configuration for geoproj.

Settings are read from the environment (prefix ``GEOPROJ_``) or a ``.env``
file the first time they are needed:

- GEOPROJ_LIBRARY_PATH: explicit path to the PROJ shared library
- GEOPROJ_DATA_DIR: directory holding proj.db and grid files
- GEOPROJ_LOG_LEVEL: native log level for new contexts
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeoprojSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GEOPROJ_",
        env_file=".env",
        extra="ignore",
    )

    library_path: Optional[str] = Field(
        default=None,
        description="Path to the PROJ shared library; autodetected when unset",
    )
    data_dir: Optional[str] = Field(
        default=None,
        description="PROJ data directory; pyproj's data directory when unset",
    )
    log_level: Literal["none", "error", "debug", "trace", "tell"] = "none"


_settings: Optional[GeoprojSettings] = None


def get_settings() -> GeoprojSettings:
    global _settings
    if _settings is None:
        _settings = GeoprojSettings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
