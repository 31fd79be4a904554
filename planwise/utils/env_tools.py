from __future__ import annotations
import os
from pathlib import Path

import yaml
from dotenv import dotenv_values

DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"


def load_env_once(dotenv_path: str | None = None):
    """
    Load .env without relying on find_dotenv() to avoid assertion errors in -c / REPL contexts.
    Values already present in os.environ win over the file.
    """
    dp = dotenv_path or ".env"
    if not os.environ.get("_PLANWISE_ENV_LOADED", ""):
        if Path(dp).exists():
            env = dotenv_values(dp)
            for k, v in env.items():
                if v is not None and k not in os.environ:
                    os.environ[k] = str(v)
        os.environ["_PLANWISE_ENV_LOADED"] = "1"


def _defaults() -> dict:
    return {
        "app": {"log_level": "INFO", "history_path": "data/history/plans.json", "user_id": "local"},
        "llm": {
            "provider": "gemini",
            "model": "gemini-2.5-flash",
            "base_url": "https://generativelanguage.googleapis.com/v1beta",
            "timeout": 30,
            "max_retries": 3,
        },
        "apis": {"gemini_api_key": None},
    }


def load_config(config_path: str | Path | None = None) -> dict:
    """Load YAML config safely, backfilling defaults for any missing keys."""
    p = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not p.exists():
        return _defaults()
    with p.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    # backfill minimal keys if cfg is partial
    for section, values in _defaults().items():
        cfg.setdefault(section, {})
        if cfg[section] is None:
            cfg[section] = {}
        for key, value in values.items():
            cfg[section].setdefault(key, value)
    return cfg


def _truthy(value, default: bool = False) -> bool:
    if value is None:
        return bool(default)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool | str = False) -> bool:
    """Return boolean interpretation of an environment flag (loads .env once)."""
    load_env_once()
    val = os.getenv(name)
    if val is None:
        return _truthy(default, default=False)
    return _truthy(val, default=False)


def resolve_api_key(cfg: dict | None = None, env_name: str = "GEMINI_API_KEY") -> str | None:
    """
    Layered retrieval of the LLM API key from:
    - os.environ (after loading .env)
    - config/config.yaml → apis.gemini_api_key
    Returns None if not found.
    """
    load_env_once()
    key = os.getenv(env_name)
    if key and key.strip():
        return key.strip()
    cfg = cfg if cfg is not None else load_config()
    key = (cfg.get("apis") or {}).get("gemini_api_key")
    if key and str(key).strip():
        return str(key).strip()
    return None
