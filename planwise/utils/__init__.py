from __future__ import annotations
import logging
import os

# Small logger so modules can do: from planwise.utils import log
def get_logger(name: str = "planwise"):
    lvl = os.getenv("LOG_LEVEL", "INFO").upper()
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=getattr(logging, lvl, logging.INFO),
                            format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return logger

log = get_logger()

from .env_tools import load_env_once, env_flag, load_config, resolve_api_key  # noqa: E402

__all__ = ["get_logger", "log", "load_env_once", "env_flag", "load_config", "resolve_api_key"]
