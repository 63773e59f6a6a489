"""Configuration loading from an optional YAML file and environment variables."""

import logging
import os
from dataclasses import dataclass, field

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    db_path: str = "./logs/logvault.db"
    queue_size: int = 10000          # 0 = unbounded
    log_level: str = "INFO"
    label: str = "app"
    default_metadata: dict = field(default_factory=dict)

    @property
    def level_number(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")
        return level


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from defaults <- YAML data <- env vars (highest priority)."""
    yaml_data = yaml_data or {}
    queue_size = int(os.environ.get(
        "LOGVAULT_QUEUE_SIZE", yaml_data.get("queue_size", Config.queue_size)
    ))
    if queue_size < 0:
        raise ValueError(f"queue_size must be >= 0, got {queue_size}")

    config = Config(
        db_path=os.environ.get("LOGVAULT_DB_PATH", yaml_data.get("db_path", Config.db_path)),
        queue_size=queue_size,
        log_level=os.environ.get(
            "LOGVAULT_LOG_LEVEL", yaml_data.get("log_level", Config.log_level)
        ),
        label=os.environ.get("LOGVAULT_LABEL", yaml_data.get("label", Config.label)),
        default_metadata=dict(yaml_data.get("metadata") or {}),
    )
    # Fail early on a bad level name
    config.level_number
    return config
