"""
Cross-cutting utilities: typed errors, structured logging, retries and response envelopes.
"""

from fbo_lambda.utils.errors import (
    AuthenticationError,
    AuthorizationError,
    BigQueryError,
    ConfigurationError,
    DatabaseError,
    ExternalServiceError,
    LambdaError,
    MongoError,
    PostgresError,
    ValidationError,
)
from fbo_lambda.utils.logger import StructuredLogger, create_logger
from fbo_lambda.utils.responses import create_error_response, create_response, create_success_response
from fbo_lambda.utils.retry import retry_with_backoff

__all__ = [
    'AuthenticationError',
    'AuthorizationError',
    'BigQueryError',
    'ConfigurationError',
    'DatabaseError',
    'ExternalServiceError',
    'LambdaError',
    'MongoError',
    'PostgresError',
    'ValidationError',
    'StructuredLogger',
    'create_logger',
    'create_error_response',
    'create_response',
    'create_success_response',
    'retry_with_backoff',
]
