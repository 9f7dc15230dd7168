"""Configuration loading for the task-request pipeline.

Configuration is read from ``src/config/config.yaml`` and the environment
(``.env`` is loaded by the command-line entry point).

Usage Examples
--------------

    >>> from config import load_config
    >>>
    >>> config = load_config()
    >>> config.validate()
    >>> print(config.base_url)

Custom config path:
    >>> from pathlib import Path
    >>> config = load_config(config_path=Path("/custom/path/config.yaml"))

Configuration Priority
---------------------

1. Environment variables (ARXS_API_KEY, ARXS_TENANT_ID, ARXS_IDENTITY_URL, ARXS_BASE_URL)
2. YAML configuration file
3. Dataclass defaults
"""

from config.config import (
    ArxsConfig,
    load_config,
)

__all__ = [
    "load_config",
    "ArxsConfig",
]
