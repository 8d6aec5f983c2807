"""
Lambda handlers.

The gateway handler classifies each inbound event and dispatches it:

- s3_handler: S3 object notifications
- http_handler: API Gateway REST (v1) and HTTP API (v2) requests
- custom_handler: direct invocations carrying an ``action``
- bill_handlers: billing endpoints behind the HTTP handler
"""

# Re-export handler utilities for convenience
from fbo_lambda.handlers.utils.observability import logger, metrics, tracer

__all__ = [
    "logger",
    "tracer",
    "metrics",
]
