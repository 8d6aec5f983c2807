"""
Application configuration factory.

Validates the process environment into ``GatewayEnvVars`` and regroups it into
the frozen, per-service ``AppConfig`` consumed by clients and handlers.
"""

import os
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from fbo_lambda.config.env_vars import GatewayEnvVars
from fbo_lambda.utils.errors import ConfigurationError
from fbo_lambda.utils.logger import create_logger


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class FinanceConfig(_FrozenModel):
    base_url: str
    api_key: str
    dispersion_endpoint: str
    timeout_ms: int = 30000


class AwsConfig(_FrozenModel):
    region: str
    s3_bucket_name: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None


class PostgresConfig(_FrozenModel):
    uri: str
    max_connections: int = 10
    connection_timeout_ms: int = 30000
    idle_timeout_ms: int = 30000


class MongoConfig(_FrozenModel):
    uri: str
    database: Optional[str] = None
    max_pool_size: int = 10
    min_pool_size: int = 1
    max_idle_time_ms: int = 30000
    server_selection_timeout_ms: int = 30000


class BigQueryConfig(_FrozenModel):
    project_id: str
    dataset_id: str
    location: str = 'US'
    key_filename: Optional[str] = None
    credentials: Optional[Dict[str, str]] = None
    auto_retry: bool = True


class AppConfig(_FrozenModel):
    """Complete, immutable application configuration."""

    app_name: str
    environment: str
    expiration_hours: int
    finance: FinanceConfig
    aws: AwsConfig
    postgres: PostgresConfig
    mongo: MongoConfig
    bigquery: BigQueryConfig

    @property
    def is_development(self) -> bool:
        return self.environment in ('development', 'dev')

    @property
    def is_production(self) -> bool:
        return self.environment in ('production', 'prod')

    @property
    def is_local(self) -> bool:
        return self.environment == 'local'


def _format_validation_errors(exc: PydanticValidationError) -> str:
    lines = []
    for error in exc.errors():
        field = '.'.join(str(part) for part in error['loc'])
        lines.append(f"{field}: {error['msg']}")
    return '\n'.join(lines)


def _bigquery_credentials(env: GatewayEnvVars) -> Optional[Dict[str, str]]:
    if not (env.BIGQUERY_CLIENT_EMAIL and env.BIGQUERY_PRIVATE_KEY):
        return None
    return {
        'type': 'service_account',
        'client_email': env.BIGQUERY_CLIENT_EMAIL,
        # Keys stored in env vars carry escaped newlines
        'private_key': env.BIGQUERY_PRIVATE_KEY.replace('\\n', '\n'),
        'project_id': env.BIGQUERY_PROJECT_ID,
        'token_uri': 'https://oauth2.googleapis.com/token',
    }


def create_config(env: GatewayEnvVars) -> AppConfig:
    """Create the application configuration from validated environment variables."""
    return AppConfig(
        app_name=env.LAMBDA_FUNCTION_NAME,
        environment=env.ENVIRONMENT,
        expiration_hours=env.EXPIRATION_HOURS,
        finance=FinanceConfig(
            base_url=env.FINANCE_BASE_URL,
            api_key=env.FINANCE_API_KEY,
            dispersion_endpoint=env.FINANCE_DISPERSION_ENDPOINT,
            timeout_ms=env.FINANCE_TIMEOUT_MS,
        ),
        aws=AwsConfig(
            region=env.AWS_REGION,
            s3_bucket_name=env.S3_BUCKET_NAME,
            access_key_id=env.AWS_ACCESS_KEY_ID or None,
            secret_access_key=env.AWS_SECRET_ACCESS_KEY or None,
        ),
        postgres=PostgresConfig(
            uri=env.PG_URI,
            max_connections=env.PG_MAX_CONNECTIONS,
            connection_timeout_ms=env.PG_CONNECTION_TIMEOUT,
            idle_timeout_ms=env.PG_IDLE_TIMEOUT,
        ),
        mongo=MongoConfig(
            uri=env.MONGO_URI,
            database=env.MONGO_DATABASE or None,
            max_pool_size=env.MONGO_MAX_POOL_SIZE,
            min_pool_size=env.MONGO_MIN_POOL_SIZE,
            max_idle_time_ms=env.MONGO_MAX_IDLE_TIME,
            server_selection_timeout_ms=env.MONGO_SERVER_SELECTION_TIMEOUT,
        ),
        bigquery=BigQueryConfig(
            project_id=env.BIGQUERY_PROJECT_ID,
            dataset_id=env.BIGQUERY_DATASET_ID,
            location=env.BIGQUERY_LOCATION,
            key_filename=env.BIGQUERY_KEY_FILENAME or None,
            credentials=_bigquery_credentials(env),
            auto_retry=env.BIGQUERY_AUTO_RETRY,
        ),
    )


def validate_environment(raw_env: Mapping[str, str]) -> AppConfig:
    """
    Validate a flat environment mapping into an ``AppConfig``.

    Every missing or invalid variable is collected before failing, so a single
    ``ConfigurationError`` lists all of them as ``FIELD: reason`` lines.

    Args:
        raw_env: Environment variables, typically ``os.environ``

    Returns:
        Frozen application configuration

    Raises:
        ConfigurationError: If any variable is missing or invalid
    """
    try:
        env = GatewayEnvVars.model_validate(dict(raw_env))
    except PydanticValidationError as exc:
        raise ConfigurationError(
            f'Environment validation failed:\n{_format_validation_errors(exc)}',
            details={'errors': exc.errors(include_url=False, include_context=False, include_input=False)},
        ) from exc

    return create_config(env)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Validate ``os.environ`` once per process and return the shared configuration."""
    config = validate_environment(os.environ)

    logger = create_logger('Config')
    logger.info('Environment validation successful', {
        'environment': config.environment,
        'appName': config.app_name,
        'awsRegion': config.aws.region,
    })
    return config


def describe_config(config: AppConfig) -> Dict[str, Any]:
    """Non-secret summary of the configuration for health responses and logs."""
    return {
        'appName': config.app_name,
        'environment': config.environment,
        'awsRegion': config.aws.region,
        's3Bucket': config.aws.s3_bucket_name,
        'bigqueryProject': config.bigquery.project_id,
        'mongoDatabase': config.mongo.database,
    }
