"""
Centralized observability utilities for the gateway Lambda.

This module provides configured instances of AWS Lambda Powertools for logging,
tracing, and metrics collection shared by every handler and client.
"""

import logging
import os
import sys
from typing import IO, Any, Dict, Optional

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.logging.formatter import LambdaPowertoolsFormatter
from aws_lambda_powertools.metrics import Metrics
from aws_lambda_powertools.tracing import Tracer

# Metrics namespace for gateway KPIs
METRICS_NAMESPACE = 'FboLambda'

# Key order of every JSON log line
LOG_RECORD_ORDER = ['timestamp', 'level', 'service', 'message']

# Extra key carrying the fields merged into the top level of a record
RECORD_FIELDS_KEY = 'record_fields'

DEFAULT_LOG_LEVEL = 'DEBUG'


class RecordFieldsFormatter(LambdaPowertoolsFormatter):
    """
    Powertools JSON formatter that merges ``RECORD_FIELDS_KEY`` into the record.

    Fields travel as a single ``extra`` entry, so keys such as ``name`` or
    ``filename`` that clash with ``logging.LogRecord`` attributes reach the
    output unchanged. Merged fields win over the formatter's own keys.
    """

    def serialize(self, log: Dict[str, Any]) -> str:
        fields = log.pop(RECORD_FIELDS_KEY, None)
        if fields:
            log.update(fields)
        return super().serialize(log)


class PropagatingStreamHandler(logging.StreamHandler):
    """Stream handler whose write failures reach the logging call."""

    def handleError(self, record: logging.LogRecord) -> None:
        raise


def log_level() -> str:
    """Level from POWERTOOLS_LOG_LEVEL or LOG_LEVEL, DEBUG when neither is set."""
    return os.environ.get('POWERTOOLS_LOG_LEVEL') or os.environ.get('LOG_LEVEL') or DEFAULT_LOG_LEVEL


def build_logger(service: Optional[str] = None, stream: Optional[IO[str]] = None) -> Logger:
    """
    Build a Powertools logger writing one JSON line per record.

    Args:
        service: Service name; Powertools falls back to POWERTOOLS_SERVICE_NAME
        stream: Output stream, stderr by default

    Returns:
        Logger without the "location" key, RFC 3339 UTC timestamps and
        ``LOG_RECORD_ORDER`` key order
    """
    formatter = RecordFieldsFormatter(log_record_order=LOG_RECORD_ORDER, use_rfc3339=True, utc=True)
    return Logger(
        service=service,
        level=log_level(),
        logger_handler=PropagatingStreamHandler(stream or sys.stderr),
        logger_formatter=formatter,
        location=None,
    )


# JSON output on stderr, service name can be set by environment variable "POWERTOOLS_SERVICE_NAME".
# Structured loggers set "service" per record.
logger: Logger = build_logger()

# Service name can be set by environment variable "POWERTOOLS_SERVICE_NAME"
# Disabled by setting POWERTOOLS_TRACE_DISABLED to "True"
tracer: Tracer = Tracer()

# Namespace and service name can be set by environment variables:
# - POWERTOOLS_METRICS_NAMESPACE
# - POWERTOOLS_SERVICE_NAME
metrics = Metrics(namespace=METRICS_NAMESPACE)
