import logging
import sys
from pathlib import Path

from loguru import logger

from src.accounts.runtime.config.config_data import LoggingConfig
from src.accounts.runtime.context import get_config

FMT_PLAIN = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Redirect standard 'logging' records (SQLAlchemy, httpx) to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def configure_logging(cfg: LoggingConfig | None = None) -> None:
    """Install the Loguru sinks described by the logging configuration."""
    main_config = get_config()
    cfg = cfg or main_config.logging
    debug_on = main_config.app.environment != "production"

    logger.remove()
    logger.add(
        sys.stderr,
        level=cfg.level.upper(),
        format="{message}" if cfg.format == "json" else FMT_PLAIN,
        serialize=cfg.format == "json",
        colorize=cfg.format != "json",
        backtrace=debug_on,
        diagnose=debug_on,
    )

    if cfg.file:
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(path),
            level=cfg.level.upper(),
            format="{message}" if cfg.format == "json" else FMT_PLAIN,
            serialize=cfg.format == "json",
            rotation=f"{cfg.max_size_mb} MB",
            retention=cfg.backup_count,
            enqueue=True,
            backtrace=debug_on,
            diagnose=debug_on,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    # httpx logs request URLs at INFO; keep it quiet
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.debug("Logging configured: level={}, format={}", cfg.level, cfg.format)
