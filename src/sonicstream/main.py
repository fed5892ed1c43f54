"""
SonicStream - Main entry point
"""

import uvicorn
from loguru import logger

from sonicstream.core.config import load_config


def serve() -> None:
    """Run the web API under uvicorn with host/port from configuration."""
    config = load_config()
    logger.info(f"Starting SonicStream on http://{config.web.host}:{config.web.port}")
    uvicorn.run(
        "web.backend.main:app",
        host=config.web.host,
        port=config.web.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    serve()
