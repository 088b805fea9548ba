# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_skip_automator

"""
Logging setup shared by every module.

Modules import the configured `logger` from here instead of configuring loguru themselves.
"""

import os
import sys
from pathlib import Path

from loguru import logger

LOG_DIR = Path("logs")
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def _ensure_log_directory() -> Path:
    """Creates the log directory if it does not exist yet."""
    if not LOG_DIR.exists():
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    return LOG_DIR


def configure_logging(level: str = "INFO", log_file: bool = False) -> None:
    """
    (Re)configures the loguru sinks.

    Args:
        level: Minimum level for the stderr sink.
        log_file: Also record DEBUG and above to a rotating file under `logs/`.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    if not log_file:
        return
    log_dir = _ensure_log_directory()
    logger.add(
        log_dir / "skip_automator.log",
        level="DEBUG",
        rotation="10 MB",
        retention="7 days",
        enqueue=True,
    )


configure_logging(os.environ.get("SKIP_LOG_LEVEL", "INFO"))

__all__ = ["logger", "configure_logging"]
