import logging
import os
import sys

from pythonjsonlogger.json import JsonFormatter

_configured = False


def setup_logging(name: str | None = None) -> logging.Logger:
    """
    Configures structured JSON logging for the service and returns a logger.

    The root logger gets a single stdout handler with a JSON formatter that
    includes timestamp, level, logger name, message, trace_id and span_id
    (the last two are filled in by ddtrace log injection when tracing is
    enabled). Configuration happens once per process; later calls only look
    up the named logger.

    Args:
        name: Logger name, usually ``__name__`` of the calling module.

    Returns:
        logging.Logger: The named logger (the root logger when name is None).
    """
    global _configured

    if not _configured:
        formatter = JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
        )
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
        root_logger.handlers = []
        root_logger.addHandler(stream_handler)

        # The SDKs are chatty at INFO; keep their warnings only.
        for logger_name in ["botocore", "boto3", "httpx", "pika", "awscrt"]:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

        _configured = True

    return logging.getLogger(name)
