"""Task-request pipeline configuration from YAML file.

Loads from config/config.yaml with all settings in one place:
- ARXS connection settings (identity URL, base URL, API key, tenant)
- Static task-request fields (title, description, tags, location)
- Default lookup inputs for a run (user name, module, kind, type, subject)

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
The ARXS_* variables additionally override the YAML values directly.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.errors.exceptions import ConfigurationError

# Configure module logger
logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        # Support both ${VAR} and ${VAR:-default} syntax
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


# Default config file: config/config.yaml in src/ directory
DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "config.yaml"

# Environment variables that take precedence over the YAML api section
ENV_OVERRIDES = {
    "api_key": "ARXS_API_KEY",
    "tenant_id": "ARXS_TENANT_ID",
    "identity_url": "ARXS_IDENTITY_URL",
    "base_url": "ARXS_BASE_URL",
}


@dataclass
class ArxsConfig:
    """ARXS task-request pipeline configuration.

    Configuration structure:
        arxs:
          api:                  # Connection settings
            identity_url, base_url, api_key, tenant_id,
            timeout_seconds, blob_api_version
          defaults:             # Static task-request fields
            title, description, tags, geo_location
          request:              # Default lookup inputs for one run
            user_name, module, kind, type, subject, image
    """

    # =========================================================================
    # CONNECTION SETTINGS
    # =========================================================================
    identity_url: str = ""
    base_url: str = ""
    api_key: str = ""
    tenant_id: str = ""
    timeout_seconds: float = 30.0
    blob_api_version: str = "2021-08-06"

    # =========================================================================
    # STATIC TASK-REQUEST FIELDS
    # =========================================================================
    defaults: Dict[str, Any] = field(default_factory=dict)

    # =========================================================================
    # DEFAULT LOOKUP INPUTS
    # =========================================================================
    request: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate connection settings before any network call is made."""
        for key in ("identity_url", "base_url"):
            value = getattr(self, key)
            if not value:
                raise ConfigurationError(
                    f"{key} is required. Set {ENV_OVERRIDES[key]} or arxs.api.{key} in config."
                )
            if not value.startswith(("http://", "https://")):
                raise ConfigurationError(
                    f"{key} must start with http:// or https://, got: {value!r}"
                )

        if not self.api_key:
            raise ConfigurationError(
                "api_key is required. Set ARXS_API_KEY or arxs.api.api_key in config."
            )

        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be > 0, got {self.timeout_seconds}"
            )


def load_config(config_path: Optional[Path] = None) -> ArxsConfig:
    """Load pipeline configuration from config.yaml.

    Priority (highest to lowest): ARXS_* environment variables, YAML file
    (with ${VAR} expansion), dataclass defaults. A missing file is not an
    error: the environment alone can configure a run.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if config_path.exists():
        logger.info(f"Loading configuration from file: {config_path}")
    else:
        logger.info(f"No configuration file at {config_path}, using environment only")

    yaml_data = _expand_env_vars(load_yaml(config_path))
    arxs_config = yaml_data.get("arxs", {}) or {}

    api = arxs_config.get("api", {}) or {}
    for key, env_name in ENV_OVERRIDES.items():
        env_value = os.getenv(env_name)
        if env_value:
            api[key] = env_value

    if api.get("api_key"):
        logger.info("ARXS API key configured")
    else:
        logger.warning("ARXS API key not configured")

    return ArxsConfig(
        identity_url=(api.get("identity_url") or "").rstrip("/"),
        base_url=(api.get("base_url") or "").rstrip("/"),
        api_key=api.get("api_key") or "",
        tenant_id=api.get("tenant_id") or "",
        timeout_seconds=float(api.get("timeout_seconds", 30.0)),
        blob_api_version=api.get("blob_api_version", "2021-08-06"),
        defaults=arxs_config.get("defaults", {}) or {},
        request=arxs_config.get("request", {}) or {},
    )
