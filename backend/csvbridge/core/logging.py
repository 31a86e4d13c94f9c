import logging
import sys
import structlog

# stdlib loggers that are too chatty at INFO for an import service
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "multipart", "celery.redirected")


def _renderer(env: str):
    if env == "prod":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(env: str = "dev", level: str | None = None) -> None:
    """Route structlog through stdlib logging; JSON lines in prod, console otherwise."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(env),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_level = level or ("DEBUG" if env == "dev" else "INFO")
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=root_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = structlog.get_logger()
