import logging
import logging.config
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from alignment_demo.core.config import Settings


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter that stamps every record with the service name."""

    def __init__(self, *args, service_name: str = "unknown", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["service"] = self.service_name

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")
        if "name" in log_record:
            log_record["logger"] = log_record.pop("name")


def _get_log_level(level_str: str) -> int:
    return getattr(logging, level_str.upper(), logging.INFO)


def setup_logging(settings: Settings, service_name: Optional[str] = None) -> None:
    """
    Configure logging for the console.

    Args:
        settings: Loaded application settings
        service_name: Name put on every record. Defaults to
                      ``settings.service_name``.
    """
    if settings.log_level:
        logging_level = _get_log_level(settings.log_level)
    else:
        logging_level = logging.DEBUG if settings.debug else logging.INFO

    if service_name is None:
        service_name = settings.service_name

    noisy_libs_level = _get_log_level(settings.log_level_noisy_libs)
    info_libs_level = _get_log_level(settings.log_level_info_libs)
    access_log_level = logging.INFO if not settings.debug else logging.DEBUG

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": CustomJsonFormatter,
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    "service_name": service_name,
                },
                "console": {
                    "format": "%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if not settings.debug else "console",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"handlers": ["console"], "level": logging_level},
            "loggers": {
                # Web server
                "uvicorn": {"level": info_libs_level},
                "uvicorn.access": {"level": access_log_level},
                "uvicorn.error": {"level": info_libs_level},
                "fastapi": {"level": info_libs_level},
                "starlette": {"level": noisy_libs_level},
                # HTTP
                "httpx": {"level": info_libs_level},
                "httpcore": {"level": noisy_libs_level},
                # Key store
                "sqlalchemy.engine": {"level": noisy_libs_level},
                "sqlalchemy.pool": {"level": noisy_libs_level},
                "aiosqlite": {"level": noisy_libs_level},
                "asyncio": {"level": noisy_libs_level},
                "alignment_demo": {"level": logging_level},
            },
        }
    )

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "context": {
                "service": service_name,
                "debug_mode": settings.debug,
                "log_level": logging.getLevelName(logging_level),
                "noisy_libs_level": logging.getLevelName(noisy_libs_level),
                "info_libs_level": logging.getLevelName(info_libs_level),
            }
        },
    )
