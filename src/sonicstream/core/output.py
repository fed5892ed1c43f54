"""
Unified output system using Loguru.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def setup_loguru(
    log_file: Optional[Path],
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: int = 5,
    console_output: bool = True,
) -> None:
    """
    Configure loguru with a rotating file sink and an optional stderr sink.

    Args:
        log_file: Path to log file (None disables file logging)
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        rotation: Size or interval at which the file rotates
        retention: Number of rotated files to keep
        console_output: Also log to stderr (useful under uvicorn/docker)
    """
    # Remove default handler
    logger.remove()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation=rotation,
            retention=retention,
            level=level,
            format=LOG_FORMAT,
            enqueue=False,
        )

    if console_output:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    logger.info(f"Loguru initialized: {log_file} (level={level})")
