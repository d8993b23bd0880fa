"""Resolve upload configuration from environment and explicit overrides."""

from __future__ import annotations

import logging
import os
from typing import Any

from resumable_upload.config.helpers import parse_bytes
from resumable_upload.config.upload_config import UploadConfig
from resumable_upload.const import ENV_PREFIX

logger = logging.getLogger(__name__)

_ENV_MAP: dict[str, str] = {
    "access_token": f"{ENV_PREFIX}ACCESS_TOKEN",
    "chunk_size": f"{ENV_PREFIX}CHUNK_SIZE",
    "max_retries": f"{ENV_PREFIX}MAX_RETRIES",
    "retry_backoff": f"{ENV_PREFIX}RETRY_BACKOFF",
    "timeout": f"{ENV_PREFIX}TIMEOUT",
}


def read_env_overrides() -> dict[str, Any]:
    """Read upload configuration overrides from environment variables.

    Values that cannot be parsed are logged and ignored.

    Returns:
        A dictionary of configuration field names to override values.
    """
    overrides: dict[str, Any] = {}

    for field_name, env_var_name in _ENV_MAP.items():
        env_value = os.getenv(env_var_name)
        if env_value is None:
            continue

        try:
            if field_name == "chunk_size":
                overrides[field_name] = parse_bytes(env_value)
            elif field_name == "max_retries":
                overrides[field_name] = int(env_value)
            elif field_name in {"retry_backoff", "timeout"}:
                overrides[field_name] = float(env_value)
            else:
                overrides[field_name] = env_value
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", env_var_name, env_value)

    return overrides


def resolve_upload_config(options: dict[str, Any]) -> UploadConfig:
    """Resolve the effective upload configuration for this run.

    Explicit options win over environment variables; options set to ``None``
    fall through to the environment and then to the model defaults.

    Args:
        options: Explicitly provided configuration values.

    Returns:
        The resolved ``UploadConfig``.

    Raises:
        ConfigError: If the merged configuration is invalid.
    """
    merged = read_env_overrides()
    merged.update({key: value for key, value in options.items() if value is not None})
    return UploadConfig.from_options(**merged)
