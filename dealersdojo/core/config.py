"""config.yaml loading and logging setup shared by the launch scripts."""

import logging
from pathlib import Path
from typing import Union

import yaml

from .state import Settings

logger = logging.getLogger(__name__)


def load_config(path: Union[str, Path] = "config.yaml") -> dict:
    """Read the YAML config file; an absent or unreadable file yields {}."""
    config_path = Path(path)
    if not config_path.exists():
        logger.warning("%s not found, using default config", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to load config (%s), using default config", exc)
        return {}


def load_settings(path: Union[str, Path] = "config.yaml") -> Settings:
    settings = Settings()
    config = load_config(path)
    if config:
        settings.load_from_dict(config)
    return settings


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
