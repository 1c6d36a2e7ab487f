"""Load ``WeftConfig`` from TOML plus environment overrides."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigError
from ..infra.logging import get_logger
from .models import WeftConfig

logger = get_logger(__name__)

CONFIG_ENV = "WEFT_CONFIG"
CANDIDATES = ("config/config.toml", "config/config.example.toml")

_LLM_ENV = {
    "WEFT_LLM_API_KEY": "api_key",
    "WEFT_LLM_MODEL": "model",
    "WEFT_LLM_BASE_URL": "base_url",
}


def find_config(root: str | Path | None = None) -> Path | None:
    """Explicit ``WEFT_CONFIG`` first, then the candidates under ``root``."""
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path)
    base = Path(root) if root else Path.cwd()
    for name in CANDIDATES:
        p = base / name
        if p.is_file():
            return p
    return None


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    llm = data.setdefault("llm", {})
    if not isinstance(llm, dict) or not isinstance(llm.setdefault("default", {}), dict):
        return data  # left for validation to reject
    default = llm["default"]
    for var, key in _LLM_ENV.items():
        value = os.environ.get(var)
        if value:
            default[key] = value
    if not default.get("api_key") and os.environ.get("OPENAI_API_KEY"):
        default["api_key"] = os.environ["OPENAI_API_KEY"]
    return data


def load_config(path: str | Path | None = None, root: str | Path | None = None) -> WeftConfig:
    """Build a config value; nothing is cached, callers pass the result along.

    A missing file yields defaults. Unreadable or invalid content raises
    ``ConfigError``.
    """
    load_dotenv()
    resolved = Path(path) if path else find_config(root)

    data: dict[str, Any] = {}
    if resolved is not None:
        if not resolved.is_file():
            raise ConfigError(f"Config file not found: {resolved}")
        try:
            with resolved.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {resolved}: {e}", cause=e) from e
        logger.info("config_loaded", path=str(resolved))

    try:
        return WeftConfig.model_validate(_apply_env(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", cause=e) from e
