"""Runtime settings and logging setup for promodsl."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    """Settings read from the environment.

    Attributes:
        log_level: Logging level name for the CLI
        context_path: Default YAML context for ``promodsl apply``
    """

    log_level: str = "WARNING"
    context_path: Path | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from environment variables.

        - PROMODSL_LOG_LEVEL: logging level name (default WARNING)
        - PROMODSL_CONTEXT: path to a YAML cart/config document
        """
        context = os.environ.get("PROMODSL_CONTEXT")
        return cls(
            log_level=os.environ.get("PROMODSL_LOG_LEVEL", "WARNING").upper(),
            context_path=Path(context) if context else None,
        )


def configure_logging(level: str = "WARNING") -> None:
    """Install a stderr handler on the root logger. Only the CLI calls this."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=DEFAULT_LOG_FORMAT,
    )
