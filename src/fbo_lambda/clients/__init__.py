"""
External service clients.

- s3_client: S3 object storage
- http_client: JSON HTTP with retries, plus a per-base-URL registry
- postgres_client: pooled PostgreSQL queries and transactions
- mongo_client: MongoDB document operations
- bigquery_client: BigQuery queries, inserts and schema management
"""

from fbo_lambda.clients.base import BaseClient
from fbo_lambda.clients.bigquery_client import BigQueryClient
from fbo_lambda.clients.http_client import HttpClient, clear_http_clients, get_http_client
from fbo_lambda.clients.mongo_client import MongoClient
from fbo_lambda.clients.postgres_client import PostgresClient
from fbo_lambda.clients.s3_client import S3Client

__all__ = [
    'BaseClient',
    'BigQueryClient',
    'HttpClient',
    'MongoClient',
    'PostgresClient',
    'S3Client',
    'clear_http_clients',
    'get_http_client',
]
