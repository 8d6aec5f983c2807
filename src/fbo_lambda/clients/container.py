"""
Process-wide service container.

Builds each client at most once per process, on first use, and hands the same
instances to every warm invocation.
"""

from functools import cached_property
from typing import Optional

from fbo_lambda.clients.bigquery_client import BigQueryClient
from fbo_lambda.clients.http_client import HttpClient
from fbo_lambda.clients.mongo_client import MongoClient
from fbo_lambda.clients.postgres_client import PostgresClient
from fbo_lambda.clients.s3_client import S3Client
from fbo_lambda.config.app_config import AppConfig, get_config
from fbo_lambda.logic.finance_service import FinanceService
from fbo_lambda.utils.errors import LambdaError
from fbo_lambda.utils.logger import StructuredLogger, create_logger

_CLIENT_ATTRIBUTES = ('s3', 'http', 'postgres', 'mongo', 'bigquery')


class ServiceContainer:
    """Lazily created, shared clients for one configuration."""

    def __init__(self, config: AppConfig, logger: Optional[StructuredLogger] = None) -> None:
        self.config = config
        self.logger = logger or create_logger('ServiceContainer')

    @cached_property
    def s3(self) -> S3Client:
        return S3Client(self.config.aws, self.logger)

    @cached_property
    def http(self) -> HttpClient:
        return HttpClient(
            base_url=self.config.finance.base_url,
            timeout_ms=self.config.finance.timeout_ms,
            logger=self.logger,
        )

    @cached_property
    def postgres(self) -> PostgresClient:
        return PostgresClient(self.config.postgres, self.logger)

    @cached_property
    def mongo(self) -> MongoClient:
        return MongoClient(self.config.mongo, self.logger)

    @cached_property
    def bigquery(self) -> BigQueryClient:
        return BigQueryClient(self.config.bigquery, self.logger)

    @cached_property
    def finance_service(self) -> FinanceService:
        return FinanceService(self.http, self.config.finance, self.logger)

    def close(self) -> None:
        """Disconnect every client that was created; errors are logged, not raised."""
        for attribute in _CLIENT_ATTRIBUTES:
            # cached_property stores created instances in the instance dict
            client = self.__dict__.get(attribute)
            if client is None:
                continue
            try:
                client.disconnect()
            except LambdaError as exc:
                self.logger.error('Failed to close client', exc, {'client': attribute})


_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Return the process-wide container, creating it from ``get_config()`` on first use.

    Raises:
        ConfigurationError: If the environment is invalid
    """
    global _container
    if _container is None:
        _container = ServiceContainer(get_config())
    return _container


def reset_container() -> None:
    """Close and drop the process-wide container and the cached configuration."""
    global _container
    if _container is not None:
        _container.close()
    _container = None
    get_config.cache_clear()
