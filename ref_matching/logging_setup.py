import logging, os, json, sys


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logging.LoggerAdapter(logger, extra={"extras": "{}"})
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s | extras=%(extras)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(level)
    # stdout carries match results, so logs go to stderr
    logger.propagate = False
    return logging.LoggerAdapter(logger, extra={"extras": "{}"})


def with_extras(logger: logging.Logger, **extras):
    # attach JSON extras for consistent structured logs
    return logging.LoggerAdapter(logger.logger if hasattr(logger, "logger") else logger,
                                 extra={"extras": json.dumps(extras, ensure_ascii=False, default=str)})


def set_level(level: str) -> None:
    """Adjust every ref_matching logger created through get_logger."""
    for name, obj in logging.root.manager.loggerDict.items():
        if name.startswith("ref_matching") and isinstance(obj, logging.Logger) and obj.handlers:
            obj.setLevel(level.upper())
