import logging
import os
from pathlib import Path

from src.rules.models import Rules

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once per process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.
    Raises ValueError listing every problem found.
    """
    ops = rules.ops
    problems = []

    if ops.data_dir_required:
        data_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(data_dir, os.W_OK):
            problems.append(f"Data directory is not writable: {data_dir}")

    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        problems.append(f"Missing required environment variables: {', '.join(missing)}")

    if problems:
        raise ValueError("; ".join(problems))

    logging.getLogger(__name__).info("Configuration validated")
