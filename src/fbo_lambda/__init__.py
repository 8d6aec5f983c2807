"""
FBO Lambda gateway.

Routes S3 notifications, API Gateway HTTP requests and custom invocation
payloads to handlers backed by the finance API, S3, PostgreSQL, MongoDB and
BigQuery:

- config: environment validation and per-service configuration
- clients: external service clients and the process-wide container
- logic: finance API business rules
- security: API key authorization
- models: Pydantic event and payload models
- handlers: event classification, dispatch and the Lambda handler
- utils: errors, structured logging, retries and response envelopes
"""

__version__ = "1.0.0"
__description__ = "AWS Lambda gateway to the FBO finance backends"

from fbo_lambda.handlers.utils.observability import logger, metrics, tracer

__all__ = [
    "logger",
    "tracer",
    "metrics",
]
