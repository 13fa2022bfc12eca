"""
JSON logging for the speech pipeline.

Every pipeline log line carries its context in ``extra=`` fields, which the
formatter emits as top-level keys: ``run_id`` on each stage of a run,
``segment_index`` on recognition sessions, ``status_code`` for fetch failures
and ``returncode``/``stderr`` for transcode failures. Cleanup problems
(a temp file that would not delete, a session still running after
cancellation) are logged as warnings and never raised.
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Send the root logger and Uvicorn's loggers to one stdout JSON handler.

    Returns the root logger.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Uvicorn installs its own handlers; route them through ours instead
    for name in UVICORN_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.setLevel(level)
        server_logger.handlers = [handler]
        server_logger.propagate = False

    return root
