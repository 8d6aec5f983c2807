"""
Typed error hierarchy for the gateway.

Every error raised by configuration loading, client wrappers and handlers is a
``LambdaError``. Concrete subtypes fix their ``error_code``/``status_code`` pair;
both are read-only once the error is constructed.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class LambdaError(Exception):
    """Base exception class for gateway errors."""

    default_error_code = "LAMBDA_ERROR"
    default_status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self._error_code = error_code or self.default_error_code
        self._status_code = status_code or self.default_status_code
        self.details = details if details is not None else {}
        self.timestamp = datetime.now(timezone.utc)

    @property
    def error_code(self) -> str:
        return self._error_code

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "name": self.name,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "message": self.message,
            "details": {key: value if not isinstance(value, BaseException) else repr(value)
                        for key, value in self.details.items()},
            "timestamp": self.timestamp.isoformat(),
        }

    def __repr__(self) -> str:
        return f"{self.name}(message={self.message!r}, error_code={self.error_code!r})"


class _FixedCodeError(LambdaError):
    """Subtypes whose code and status are part of the type, not the instance."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)

    @property
    def error_code(self) -> str:
        return type(self).default_error_code

    @property
    def status_code(self) -> int:
        return type(self).default_status_code


class ValidationError(_FixedCodeError):
    """Raised when caller input is invalid."""

    default_error_code = "VALIDATION_ERROR"
    default_status_code = 400


class AuthenticationError(_FixedCodeError):
    """Raised when a request carries no credentials."""

    default_error_code = "UNAUTHORIZED"
    default_status_code = 401


class AuthorizationError(_FixedCodeError):
    """Raised when a request carries credentials that are not accepted."""

    default_error_code = "FORBIDDEN"
    default_status_code = 403


class ConfigurationError(_FixedCodeError):
    """Raised when the process configuration is missing or invalid."""

    default_error_code = "CONFIGURATION_ERROR"
    default_status_code = 500


class ExternalServiceError(_FixedCodeError):
    """Raised when an upstream dependency fails."""

    default_error_code = "EXTERNAL_SERVICE_ERROR"
    default_status_code = 502


class DatabaseError(_FixedCodeError):
    """Raised when a database engine fails."""

    default_error_code = "DATABASE_ERROR"
    default_status_code = 500


class PostgresError(DatabaseError):
    default_error_code = "POSTGRES_ERROR"


class MongoError(DatabaseError):
    default_error_code = "MONGO_ERROR"


class BigQueryError(DatabaseError):
    default_error_code = "BIGQUERY_ERROR"
