"""
Environment variable model for type-safe configuration.

This module declares every environment variable the gateway reads, with its
coercion, validation rule and default, as a Pydantic model.
"""

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fbo_lambda.utils.helpers import is_valid_url

EnvironmentName = Literal['development', 'production', 'local', 'dev', 'prod', 'test']


class GatewayEnvVars(BaseModel):
    """Environment variables for the gateway Lambda."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    # Application
    ENVIRONMENT: Annotated[EnvironmentName, Field(
        description='Deployment environment name',
    )] = 'development'

    LAMBDA_FUNCTION_NAME: Annotated[str, Field(
        min_length=1,
        description='Application / function name reported in logs',
    )]

    EXPIRATION_HOURS: Annotated[int, Field(
        ge=1,
        description='Expiration window in hours for generated links and records',
    )] = 12

    # Finance API
    FINANCE_BASE_URL: Annotated[str, Field(
        min_length=1,
        description='Base URL of the finance API',
    )]

    FINANCE_API_KEY: Annotated[str, Field(
        min_length=1,
        description='API key shared with the finance API and expected from HTTP callers',
    )]

    FINANCE_DISPERSION_ENDPOINT: Annotated[str, Field(
        description='Path of the dispersion endpoint on the finance API',
    )] = '/api/v1/dispersion/receive'

    FINANCE_TIMEOUT_MS: Annotated[int, Field(
        ge=1000,
        description='Finance API request timeout in milliseconds',
    )] = 30000

    # AWS
    AWS_REGION: Annotated[str, Field(
        min_length=1,
        description='AWS region for S3 access',
    )] = 'us-east-2'

    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None

    S3_BUCKET_NAME: Annotated[str, Field(
        min_length=1,
        description='Default S3 bucket',
    )]

    # PostgreSQL
    PG_URI: Annotated[str, Field(
        min_length=1,
        description='PostgreSQL connection string',
    )]

    PG_MAX_CONNECTIONS: Annotated[int, Field(ge=1)] = 10
    PG_CONNECTION_TIMEOUT: Annotated[int, Field(ge=1000, description='Milliseconds')] = 30000
    PG_IDLE_TIMEOUT: Annotated[int, Field(ge=1000, description='Milliseconds')] = 30000

    # MongoDB
    MONGO_URI: Annotated[str, Field(
        min_length=1,
        description='MongoDB connection string',
    )]

    MONGO_DATABASE: Optional[str] = None
    MONGO_MAX_POOL_SIZE: Annotated[int, Field(ge=1)] = 10
    MONGO_MIN_POOL_SIZE: Annotated[int, Field(ge=0)] = 1
    MONGO_MAX_IDLE_TIME: Annotated[int, Field(ge=1000, description='Milliseconds')] = 30000
    MONGO_SERVER_SELECTION_TIMEOUT: Annotated[int, Field(ge=1000, description='Milliseconds')] = 30000

    # BigQuery
    BIGQUERY_PROJECT_ID: Annotated[str, Field(min_length=1)]
    BIGQUERY_DATASET_ID: Annotated[str, Field(min_length=1)]
    BIGQUERY_LOCATION: str = 'US'
    BIGQUERY_KEY_FILENAME: Optional[str] = None
    BIGQUERY_CLIENT_EMAIL: Optional[str] = None
    BIGQUERY_PRIVATE_KEY: Optional[str] = None
    BIGQUERY_AUTO_RETRY: bool = True

    @field_validator('FINANCE_BASE_URL')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that the finance base URL is an absolute URL."""
        if not is_valid_url(v):
            raise ValueError('must be a valid URL')
        return v.rstrip('/')

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT in ('development', 'dev')

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT in ('production', 'prod')

    @property
    def is_local(self) -> bool:
        return self.ENVIRONMENT == 'local'
