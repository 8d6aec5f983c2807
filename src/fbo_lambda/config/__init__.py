"""
Configuration module.

- env_vars: environment variable model and validation rules
- app_config: per-service configuration factory and process-wide accessor
"""

from fbo_lambda.config.app_config import (
    AppConfig,
    AwsConfig,
    BigQueryConfig,
    FinanceConfig,
    MongoConfig,
    PostgresConfig,
    get_config,
    validate_environment,
)
from fbo_lambda.config.env_vars import GatewayEnvVars

__all__ = [
    'AppConfig',
    'AwsConfig',
    'BigQueryConfig',
    'FinanceConfig',
    'GatewayEnvVars',
    'MongoConfig',
    'PostgresConfig',
    'get_config',
    'validate_environment',
]
