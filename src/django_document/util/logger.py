import logging
from typing import Any, Literal

DEFAULT_TRACE_LEVEL_NUM = 5  # NOTE: MUST be lower than DEBUG which is 10

logger = logging.getLogger("django_document")
actual_trace_level_num = -1


def setup_logging() -> None:
    # Check if "TRACE" level was already defined. And if so, use its log level.
    # See https://docs.python.org/3/howto/logging.html#custom-levels
    global actual_trace_level_num
    level = logging.getLevelName("TRACE")

    if isinstance(level, int):
        actual_trace_level_num = level
    else:
        actual_trace_level_num = DEFAULT_TRACE_LEVEL_NUM
        logging.addLevelName(actual_trace_level_num, "TRACE")


def trace(message: str, *args: Any, **kwargs: Any) -> None:
    """
    TRACE level logger.

    To display TRACE logs, set the logging level below 5.

    Example:
    ```py
    LOGGING = {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "django_document": {
                "level": 5,
                "handlers": ["console"],
            },
        },
    }
    ```
    """
    if actual_trace_level_num == -1:
        setup_logging()
    if logger.isEnabledFor(actual_trace_level_num):
        logger.log(actual_trace_level_num, message, *args, **kwargs)


def trace_asset_msg(
    action: Literal["RESOLVE", "PREPARE", "RENDER", "SKIP"],
    kind: Literal["css", "js"],
    handle: str,
    extra: str = "",
) -> None:
    """
    TRACE level logger with opinionated format for tracking what happens to an asset.

    Example:
    ```
    RENDER js 'jquery' (head)
    ```
    """
    msg = f"{action} {kind} '{handle}'"
    if extra:
        msg += f" ({extra})"
    trace(msg)
