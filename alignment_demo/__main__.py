"""
Entry point for the console server.
Usage: python -m alignment_demo
"""

import uvicorn

from alignment_demo.core.config import get_settings
from alignment_demo.logger import setup_logging

if __name__ == "__main__":
    settings = get_settings()

    setup_logging(settings)

    uvicorn.run(
        "alignment_demo.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,  # logging is configured by setup_logging
        access_log=True,
    )
