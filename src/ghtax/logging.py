import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        timestamper,
        structlog.processors.add_log_level,
    ]

    structlog.configure(
        processors=
        shared_processors
        + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        # stdlib handlers write to stderr, keeping stdout for command output
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    logging.basicConfig(level=level, format="%(message)s")


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
