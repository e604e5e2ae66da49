"""
Configuration loader.

Loads YAML config files and provides unified access.
Supports:
- Multiple config files merged together
- Environment variable substitution
- Default values
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"

# Later files override earlier ones
CONFIG_FILES = ["storage.yaml", "jobs.example.yaml", "jobs.yaml"]


def _substitute_env_vars(obj: Any) -> Any:
    """Recursively substitute environment variables in config."""
    if isinstance(obj, str):
        if obj.startswith("${") and "}" in obj:
            var_part = obj[2:obj.index("}")]

            if ":-" in var_part:
                var_name, default = var_part.split(":-", 1)
            else:
                var_name, default = var_part, ""

            value = os.environ.get(var_name, default)

            if obj == f"${{{var_part}}}":
                return value

            return obj.replace(f"${{{var_part}}}", value)

        return obj

    elif isinstance(obj, dict):
        return {k: _substitute_env_vars(v) for k, v in obj.items()}

    elif isinstance(obj, list):
        return [_substitute_env_vars(item) for item in obj]

    return obj


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a single YAML file."""
    if not path.exists():
        logger.warning(f"Config file not found: {path}")
        return {}

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return _substitute_env_vars(data)


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries. Override takes precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


@lru_cache(maxsize=1)
def get_config(config_dir: str | None = None) -> dict[str, Any]:
    """Load and merge all config files."""
    base_dir = Path(config_dir) if config_dir else CONFIG_DIR

    config: dict[str, Any] = {}

    for filename in CONFIG_FILES:
        file_path = base_dir / filename
        if file_path.exists():
            file_config = load_yaml(file_path)
            config = deep_merge(config, file_config)
            logger.debug(f"Loaded config: {filename}")

    return config


def reload_config() -> dict[str, Any]:
    """Force reload config (clears cache)."""
    get_config.cache_clear()
    return get_config()


@dataclass
class JobsConfig:
    """Configuration for job progress tracking."""

    store: str = "postgres"
    worker_id: str = ""
    write_queue_size: int = 0
    log_level: str = "INFO"
    redis_prefix: str = "jobtrack:"


def load_jobs_config() -> JobsConfig:
    """
    Load job tracking configuration from environment variables and config files.

    Environment variables take precedence over config files.

    Returns:
        Jobs configuration.
    """
    config = get_config()
    jobs_config = config.get("jobs", {})

    return JobsConfig(
        store=os.environ.get("JOBS_STORE", jobs_config.get("store", "postgres")),
        worker_id=os.environ.get("JOBS_WORKER_ID", jobs_config.get("worker_id", "")),
        write_queue_size=int(
            os.environ.get(
                "JOBS_WRITE_QUEUE_SIZE",
                jobs_config.get("write_queue_size", 0),
            )
        ),
        log_level=os.environ.get("JOBS_LOG_LEVEL", jobs_config.get("log_level", "INFO")),
        redis_prefix=jobs_config.get("redis_prefix", "jobtrack:"),
    )


def setup_logging(log_level: str) -> None:
    """
    Configure process logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
