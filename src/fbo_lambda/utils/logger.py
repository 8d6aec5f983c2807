"""
Structured logger for request-scoped JSON logging.

``StructuredLogger`` binds a service name and an optional request id and writes
one JSON line per call through the shared AWS Lambda Powertools ``Logger``.
"""

import traceback
from typing import Any, Dict, Optional

from aws_lambda_powertools import Logger

from fbo_lambda.handlers.utils import observability


def describe_error(error: BaseException) -> Dict[str, Any]:
    """Render an exception as the ``error`` field of a log record."""
    return {
        'name': type(error).__name__,
        'message': str(error),
        'stack': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
    }


class StructuredLogger:
    """JSON logger bound to a service name and an optional request id."""

    def __init__(self, service: str, request_id: Optional[str] = None, logger: Optional[Logger] = None) -> None:
        self.service = service
        self.request_id = request_id
        self._logger = logger or observability.logger

    def info(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self._log('info', message, meta=meta)

    def warn(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self._log('warning', message, meta=meta)

    def debug(self, message: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self._log('debug', message, meta=meta)

    def error(self, message: str, error: Optional[BaseException] = None, meta: Optional[Dict[str, Any]] = None) -> None:
        self._log('error', message, error=error, meta=meta)

    def child(self, suffix: str) -> 'StructuredLogger':
        """Return a logger for ``<service>:<suffix>`` sharing this logger's request id."""
        return StructuredLogger(f'{self.service}:{suffix}', self.request_id, self._logger)

    def _log(
        self,
        level: str,
        message: str,
        error: Optional[BaseException] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> None:
        record: Dict[str, Any] = {'service': self.service}
        if self.request_id:
            record['requestId'] = self.request_id

        record.update(meta or {})

        if error is not None:
            record['error'] = describe_error(error)

        getattr(self._logger, level)(message, extra={observability.RECORD_FIELDS_KEY: record})


def create_logger(service: str, request_id: Optional[str] = None) -> StructuredLogger:
    """Create a structured logger for the given service."""
    return StructuredLogger(service, request_id)
