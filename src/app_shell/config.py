import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when the server cannot start with the current configuration."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Creates the data directory if needed and raises ConfigError when it
    is not writable or a required environment variable is missing.
    """
    ops = rules.ops

    # 1. Check Data Dir
    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Cannot create data directory {data_dir}: {e}") from e
        if not os.access(data_dir, os.W_OK):
            raise ConfigError(f"Data directory {data_dir} is not writable")

    # 2. Check Required Env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Configuration validated (data dir: %s)", data_dir)
