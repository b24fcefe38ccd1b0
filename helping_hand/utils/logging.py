"""Shared logging configuration."""
import os
import sys
import json
import traceback
from enum import Enum
from typing import Any, Dict, Optional
from aws_lambda_powertools import Logger


def format_exception(exc_info):
    """Format exception info into a single line."""
    if exc_info is True:  # When exc_info=True is passed to logger.exception
        exc_info = sys.exc_info()
    if isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)

    if exc_info and isinstance(exc_info, tuple) and len(exc_info) == 3:
        trace = ''.join(traceback.format_exception(*exc_info))
        return trace.replace('\n', ' | ').strip()
    return None


class SingleLineLogger(Logger):
    """Custom logger that formats exceptions in a single line."""

    def exception(self, message, *args, **kwargs):
        """Override to format exception in a single line."""
        exc_info = kwargs.pop('exc_info', True)
        extra = kwargs.pop('extra', {})
        extra['exception'] = format_exception(exc_info)
        kwargs['exc_info'] = False  # Prevent default multi-line formatting
        kwargs['extra'] = extra
        super().exception(message, *args, **kwargs)


logger = SingleLineLogger(
    service=os.environ.get('POWERTOOLS_SERVICE_NAME', 'helping_hand'),
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    log_uncaught_exceptions=True,
    json_serializer=json.dumps,
    use_rfc3339=True
)

logger.append_keys(
    region=os.environ.get('AWS_REGION'),
    function=os.environ.get('AWS_LAMBDA_FUNCTION_NAME'),
    version=os.environ.get('AWS_LAMBDA_FUNCTION_VERSION')
)


class GenerationEvent(str, Enum):
    """Typed events emitted while generating a week of suggestions."""
    REUSED_EXISTING = "reused_existing"
    REGENERATED = "regenerated"
    CATEGORY_SKIPPED = "category_skipped"
    EMPTY_POOL = "empty_pool"
    PERSISTENCE_FAILED = "persistence_failed"
    CONTEXT_DEGRADED = "context_degraded"


# Events that describe something going wrong but recovered
_WARNING_EVENTS = {
    GenerationEvent.CATEGORY_SKIPPED,
    GenerationEvent.PERSISTENCE_FAILED,
    GenerationEvent.CONTEXT_DEGRADED,
}


class GenerationEvents:
    """
    Structured event sink for the generator.

    Every event becomes one log record with an ``event`` field and the
    given attributes. Tests can pass a Mock or a subclass to capture events.
    """

    def __init__(self, log: Optional[Logger] = None):
        self.log = log or logger

    def emit(self, event: GenerationEvent, error: Optional[BaseException] = None, **fields: Any) -> None:
        extra: Dict[str, Any] = {"event": event.value}
        extra.update({key: _loggable(value) for key, value in fields.items()})
        if error is not None:
            extra["error"] = str(error)
            extra["error_type"] = type(error).__name__
            extra["exception"] = format_exception(error)
        if event in _WARNING_EVENTS:
            self.log.warning(event.value, extra=extra)
        else:
            self.log.info(event.value, extra=extra)


def _loggable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set)):
        return [_loggable(item) for item in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
