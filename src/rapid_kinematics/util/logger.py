"""
Logging API for rapid_kinematics, wrapping :py:class:`logging.Logger`.

Forward kinematics and code generation never raise for domain-level bad input;
they report through :py:meth:`log_warn`. Contract violations go through
:py:meth:`log_error`, which logs and then raises :py:class:`ValueError`.
"""
# Standard Library
import logging

LOGGER_NAME = "rapid_kinematics"


def setup_logger(level="info", logger_name: str = LOGGER_NAME):
    """Set up logger level.

    Args:
        level: Log level. Default is "info". Other options are "debug", "warning", "error".
        logger_name: Name of the logger. Default is "rapid_kinematics".

    Raises:
        ValueError: If log level is not one of [info, debug, warning, error].
    """
    FORMAT = "[%(levelname)s] [%(name)s] %(message)s"
    if level == "info":
        level = logging.INFO
    elif level == "debug":
        level = logging.DEBUG
    elif level == "error":
        level = logging.ERROR
    elif level in ["warn", "warning"]:
        level = logging.WARN
    else:
        raise ValueError("Log level should be one of [info, debug, warn, error]")
    logging.basicConfig(format=FORMAT, level=level)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level=level)


def log_debug(txt: str, logger_name: str = LOGGER_NAME, *args, **kwargs):
    """Log debug message. Also see :py:meth:`logging.Logger.debug`."""
    logger = logging.getLogger(logger_name)
    logger.debug(txt, *args, **kwargs)


def log_warn(txt: str, logger_name: str = LOGGER_NAME, *args, **kwargs):
    """Log warning message. Also see :py:meth:`logging.Logger.warning`.

    Args:
        txt: Warning message.
        logger_name: Name of the logger. Default is "rapid_kinematics".
    """
    logger = logging.getLogger(logger_name)
    logger.warning(txt, *args, **kwargs)


def log_info(txt: str, logger_name: str = LOGGER_NAME, *args, **kwargs):
    """Log info message. Also see :py:meth:`logging.Logger.info`."""
    logger = logging.getLogger(logger_name)
    logger.info(txt, *args, **kwargs)


def log_error(
    txt: str,
    logger_name: str = LOGGER_NAME,
    exc_info=False,
    stack_info=False,
    stacklevel: int = 2,
    *args,
    **kwargs
):
    """Log error and raise ValueError.

    Args:
        txt: Helpful message that conveys the error.
        logger_name: Name of the logger. Default is "rapid_kinematics".
        exc_info: Add exception info to message. See :py:meth:`logging.Logger.error`.
        stack_info: Add stacktrace to message. See :py:meth:`logging.Logger.error`.
        stacklevel: See :py:meth:`logging.Logger.error`. Default value of 2 removes this function
            from the stack trace.

    Raises:
        ValueError: Error message with exception.
    """
    logger = logging.getLogger(logger_name)
    logger.error(
        txt, exc_info=exc_info, stack_info=stack_info, stacklevel=stacklevel, *args, **kwargs
    )
    raise ValueError(txt)
