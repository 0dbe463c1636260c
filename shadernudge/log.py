"""
shadernudge.log - package logging with exception tracebacks.

Usage:
    from shadernudge import log

    log.info("[Channel] Listening")
    log.warn("[Channel] Peer vanished")

    try:
        save()
    except OSError as e:
        log.error(e, "[Editor] Save failed")  # message plus traceback

Records go to the standard ``shadernudge`` logger. The application
calls configure() once; library modules only emit.
"""

import logging
import traceback

_logger = logging.getLogger("shadernudge")


def _emit(level: int, msg_or_exc, context: str) -> None:
    if isinstance(msg_or_exc, BaseException):
        _logger.log(level, _format_exception(msg_or_exc, context))
    elif context:
        _logger.log(level, f"{context}: {msg_or_exc}")
    else:
        _logger.log(level, str(msg_or_exc))


def _format_exception(exc: BaseException, context: str) -> str:
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    head = f"{type(exc).__name__}: {exc}"
    if context:
        head = f"{context}: {head}"
    return f"{head}\n{tb}"


def debug(msg_or_exc, context: str = ""):
    _emit(logging.DEBUG, msg_or_exc, context)


def info(msg_or_exc, context: str = ""):
    _emit(logging.INFO, msg_or_exc, context)


def warn(msg_or_exc, context: str = ""):
    """Log a warning; an exception argument adds its traceback."""
    _emit(logging.WARNING, msg_or_exc, context)


warning = warn


def error(msg_or_exc, context: str = ""):
    """Log an error; an exception argument adds its traceback."""
    _emit(logging.ERROR, msg_or_exc, context)


def exception(msg: str = ""):
    """Log an error with the exception currently being handled."""
    _logger.exception(msg)


def set_level(level) -> None:
    """Threshold of the package logger, as int or level name."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _logger.setLevel(level)


def configure(level=logging.INFO) -> None:
    """Attach a stderr handler to the package logger and set its level."""
    if not _logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        _logger.addHandler(handler)
    set_level(level)
