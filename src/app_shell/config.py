import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Startup configuration is unusable."""


def configure_logging(rules: Rules) -> None:
    """Apply the rules' log level to the root logger."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(rules.ops.log_level)


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigError: If required env vars are missing or the data dir is unusable
    """
    missing = [name for name in rules.ops.required_env if name not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Data directory {data_dir} is not writable: {e}") from e

    logger.info("Configuration validated (data dir %s)", data_dir)
