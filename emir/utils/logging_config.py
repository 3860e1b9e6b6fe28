"""Logging for the renderer CLI and API, with optional GCP Cloud Logging.

Renders run in threadpool workers under the API, so records carry the
thread name. Uvicorn's own loggers are routed through the root handler
so the server and the renderer share one format and one level.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING unless debugging
_NOISY_LOGGERS = ("PIL", "urllib3", "multipart")

SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Access lines stay on the console only
_GCP_EXCLUDED_LOGGERS = ("uvicorn.access",)


def _console_handler(log_level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(log_level)
    return handler


def _route_server_loggers() -> None:
    """Drop uvicorn's own handlers and let its records reach the root logger."""
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True


def setup_logging(
    level: str = "INFO",
    gcp_project_id: Optional[str] = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        gcp_project_id: Optional GCP project ID for Cloud Logging integration
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(log_level))

    noisy_level = logging.NOTSET if log_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    _route_server_loggers()

    if gcp_project_id:
        try:
            import google.cloud.logging
            from google.cloud.logging_v2.handlers.handlers import EXCLUDED_LOGGER_DEFAULTS

            client = google.cloud.logging.Client(project=gcp_project_id)
            client.setup_logging(
                log_level=log_level,
                excluded_loggers=EXCLUDED_LOGGER_DEFAULTS + _GCP_EXCLUDED_LOGGERS,
            )
            logging.info(f"GCP Cloud Logging enabled for project: {gcp_project_id}")
        except ImportError:
            logging.warning(
                "google-cloud-logging not installed. Skipping GCP integration."
            )
        except Exception as e:
            logging.warning(f"Failed to setup GCP Cloud Logging: {e}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name (typically __name__)."""
    return logging.getLogger(name)
