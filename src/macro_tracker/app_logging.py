"""Logging configuration helpers."""

import logging

CONTEXT_FIELDS = ("user_id", "owner_id", "day", "key", "duration_ms")


class ContextFormatter(logging.Formatter):
    """Formatter that appends known ``extra`` fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = [
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        ]
        if not context:
            return message
        head, sep, tail = message.partition("\n")
        return f"{head} [{' '.join(context)}]{sep}{tail}"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure the package logger with a single stream handler."""
    logger = logging.getLogger("macro_tracker")
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
