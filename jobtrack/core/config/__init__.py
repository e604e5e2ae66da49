"""Config module — loading and managing configuration."""

from jobtrack.core.config.loader import (
    JobsConfig,
    get_config,
    load_jobs_config,
    reload_config,
    setup_logging,
)

__all__ = [
    "JobsConfig",
    "get_config",
    "load_jobs_config",
    "reload_config",
    "setup_logging",
]
