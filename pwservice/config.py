# pwservice/config.py
"""
Settings for pwservice.
Settings saved as JSON in %APPDATA%/pwservice/config.json (Windows) or ~/.pwservice/config.json (fallback).
Environment variables PWSERVICE_<KEY> override both the file and the defaults.
"""

import os
import json
import logging
from typing import Dict, Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PWSERVICE_",
        extra="ignore",
        case_sensitive=False,
    )

    db_path: Optional[str] = Field(default=None, description="sqlite log database; None means default_db_path()")
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origin: str = "*"
    log_level: str = "INFO"
    # argon2id parameters for the one-way hashes written to the log tables
    hash_time_cost: int = Field(default=3, ge=1)
    hash_memory_cost_kb: int = Field(default=65536, ge=8)  # 64 MB
    hash_parallelism: int = Field(default=2, ge=1)

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        # the JSON file arrives as init kwargs; the environment wins over it
        return (env_settings, init_settings)


DEFAULTS: Dict[str, Any] = {name: f.default for name, f in Settings.model_fields.items()}


def _appdata_dir() -> str:
    appdata = os.getenv("APPDATA")
    if appdata:
        return os.path.join(appdata, "pwservice")
    return os.path.join(os.path.expanduser("~"), ".pwservice")


def config_path() -> str:
    return os.path.join(_appdata_dir(), "config.json")


def default_db_path() -> str:
    return os.path.join(_appdata_dir(), "pwservice.db")


def _read_file(p: str) -> Dict[str, Any]:
    if not os.path.exists(p):
        return {}
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read config file %s: %s", p, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is not an object", p)
        return {}
    return data


def default_config() -> Dict[str, Any]:
    """Defaults only: no config file, no environment."""
    out = DEFAULTS.copy()
    out["db_path"] = default_db_path()
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Defaults, then the JSON file, then PWSERVICE_* variables.
    Raises pydantic.ValidationError on badly typed values.
    """
    settings = Settings(**_read_file(path or config_path()))
    out = settings.model_dump()
    if not out.get("db_path"):
        out["db_path"] = default_db_path()
    return out


def save_config(cfg: Dict[str, Any], path: Optional[str] = None) -> None:
    p = path or config_path()
    d = os.path.dirname(p)
    if d:
        os.makedirs(d, exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)
