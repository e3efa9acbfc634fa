"""Environment-driven settings."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

APP_DIR_NAME = "nw-tracker"
PORTFOLIO_FILE_NAME = "portfolio.json"


@dataclass(frozen=True)
class Settings:
    portfolio_path: Path
    log_level: str = "WARNING"


def config_home(environ: Mapping[str, str]) -> Path:
    """XDG config directory: $XDG_CONFIG_HOME, else $HOME/.config."""
    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    home = environ.get("HOME")
    if home:
        return Path(home) / ".config"
    return Path.home() / ".config"


def default_portfolio_path(environ: Mapping[str, str]) -> Path:
    return config_home(environ) / APP_DIR_NAME / PORTFOLIO_FILE_NAME


def get_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from a .env file and environment variables."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    explicit = environ.get("NW_TRACKER_PORTFOLIO")
    portfolio_path = Path(explicit).expanduser() if explicit else default_portfolio_path(environ)
    log_level = (environ.get("NW_TRACKER_LOG_LEVEL") or "WARNING").strip().upper()
    return Settings(portfolio_path=portfolio_path, log_level=log_level)
