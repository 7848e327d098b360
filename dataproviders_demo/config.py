from typing import Optional

from pydantic import Field

from dataproviders.config import Settings


class DemoSettings(Settings):
    """Settings of the example dashboard, on top of the composition settings."""

    # App/UI
    app_title: str = Field(default="Provider Analytics Dashboard", alias="APP_TITLE")
    port: int = Field(default=8050, ge=1, le=65535, alias="PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Data
    max_rows: int = Field(default=2000, ge=1, alias="MAX_ROWS")
    default_team: Optional[str] = Field(default=None, alias="DEFAULT_TEAM")


_settings_singleton: Optional[DemoSettings] = None


def get_settings() -> DemoSettings:
    """Get the singleton DemoSettings instance, initializing it on first call."""
    global _settings_singleton
    if _settings_singleton is None:
        _settings_singleton = DemoSettings()
    return _settings_singleton


# Convenience module-level constants used by app.py when running as a script
PORT: int = get_settings().port
DEBUG: bool = get_settings().debug
