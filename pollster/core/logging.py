"""Logging utilities."""
from __future__ import annotations

import logging.config
import os
from pathlib import Path

import yaml

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"

_configured = False


def _config_path() -> Path:
    override = os.environ.get("POLLSTER_LOGGING_CONFIG")
    return Path(override) if override else _DEFAULT_CONFIG_PATH


def configure_logging(*, force: bool = False) -> None:
    """Configure logging from the YAML file, falling back to ``basicConfig``.

    Safe to call from every application factory invocation; only the first
    call (or a forced one) touches the logging tree.
    """
    global _configured
    if _configured and not force:
        return

    config_path = _config_path()
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as config_file:
            logging.config.dictConfig(yaml.safe_load(config_file))
    else:
        logging.basicConfig(level=logging.INFO)
    _configured = True


__all__ = ["configure_logging"]
