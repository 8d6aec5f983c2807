"""
BigQuery client wrapper.

Authenticates with a key file, inline service-account credentials or
application default credentials, in that order. SDK failures are logged once
and re-raised as ``BigQueryError``.
"""

import concurrent.futures
import time
from typing import Any, Dict, List, Optional, Sequence, Union

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery
from google.oauth2 import service_account

from fbo_lambda.clients.base import BaseClient
from fbo_lambda.config.app_config import BigQueryConfig
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.utils.errors import BigQueryError
from fbo_lambda.utils.helpers import truncate_string
from fbo_lambda.utils.logger import StructuredLogger

SchemaSpec = Sequence[Union[bigquery.SchemaField, Dict[str, Any]]]

SDK_ERRORS = (GoogleAPIError, GoogleAuthError)

# Unreadable key files and malformed service-account info fail before any API call
CONNECT_ERRORS = SDK_ERRORS + (OSError, ValueError)

QUERY_ERRORS = SDK_ERRORS + (concurrent.futures.TimeoutError,)

_LOGGED_QUERY_LENGTH = 100


class BigQueryClient(BaseClient):
    """BigQuery queries, streaming inserts and table/dataset management."""

    service_name = 'BigQueryClient'

    def __init__(self, bigquery_config: BigQueryConfig, logger: Optional[StructuredLogger] = None) -> None:
        super().__init__(logger)
        self.config = bigquery_config
        self._client: Optional[bigquery.Client] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def retry(self) -> Optional[Any]:
        return bigquery.DEFAULT_RETRY if self.config.auto_retry else None

    def _build_client(self) -> bigquery.Client:
        if self.config.key_filename:
            return bigquery.Client.from_service_account_json(
                self.config.key_filename,
                project=self.config.project_id,
                location=self.config.location,
            )
        credentials = None
        if self.config.credentials:
            credentials = service_account.Credentials.from_service_account_info(self.config.credentials)
        return bigquery.Client(
            project=self.config.project_id,
            credentials=credentials,
            location=self.config.location,
        )

    def connect(self) -> None:
        """
        Build the SDK client and verify access by listing one dataset.

        Raises:
            BigQueryError: If authentication or the access check fails
        """
        if self._client is not None:
            return

        try:
            client = self._build_client()
            list(client.list_datasets(max_results=1, retry=self.retry))
        except CONNECT_ERRORS as exc:
            self.logger.error('BigQuery connection failed', exc, {'projectId': self.config.project_id})
            raise BigQueryError('Failed to connect to BigQuery', details={'error': exc}) from exc

        self._client = client
        self.logger.info('BigQuery client connected', {
            'projectId': self.config.project_id,
            'location': self.config.location,
        })

    def disconnect(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        self.logger.info('BigQuery client disconnected')

    @property
    def client(self) -> bigquery.Client:
        self.connect()
        return self._client

    def _table_id(self, dataset_id: str, table_id: str) -> str:
        return f'{self.config.project_id}.{dataset_id}.{table_id}'

    def _dataset_id(self, dataset_id: str) -> str:
        return f'{self.config.project_id}.{dataset_id}'

    def _fail(self, message: str, exc: Exception, **details: Any) -> BigQueryError:
        self.logger.error(message, exc, details)
        return BigQueryError(message, details={'error': exc, **details})

    @tracer.capture_method
    def query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        location: Optional[str] = None,
        dry_run: bool = False,
        max_results: Optional[int] = None,
        maximum_bytes_billed: Optional[int] = None,
        labels: Optional[Dict[str, str]] = None,
        job_timeout_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Run a standard SQL query and return its rows as dicts.

        Args:
            sql: Standard SQL text
            params: ``ScalarQueryParameter``/``ArrayQueryParameter`` values
            location: Job location, defaults to the configured location
            dry_run: Validate and estimate only; returns no rows
            max_results: Maximum rows to fetch
            maximum_bytes_billed: Fail the job above this many billed bytes
            labels: Job labels
            job_timeout_ms: Time to wait for the job result

        Returns:
            Result rows

        Raises:
            BigQueryError: If the job fails
        """
        job_config = bigquery.QueryJobConfig(
            use_legacy_sql=False,
            dry_run=dry_run,
            query_parameters=list(params or []),
        )
        if maximum_bytes_billed is not None:
            job_config.maximum_bytes_billed = maximum_bytes_billed
        if labels:
            job_config.labels = labels

        start = time.monotonic()
        try:
            job = self.client.query(
                sql,
                job_config=job_config,
                location=location or self.config.location,
                retry=self.retry,
            )
            if dry_run:
                rows: List[Dict[str, Any]] = []
            else:
                timeout = job_timeout_ms / 1000 if job_timeout_ms else None
                rows = [dict(row.items()) for row in job.result(max_results=max_results, timeout=timeout)]
        except QUERY_ERRORS as exc:
            raise self._fail('BigQuery query execution failed', exc, query=sql) from exc

        self.logger.debug('BigQuery query executed successfully', {
            'query': truncate_string(sql, _LOGGED_QUERY_LENGTH),
            'rowCount': len(rows),
            'duration': int((time.monotonic() - start) * 1000),
            'dryRun': dry_run,
        })
        return rows

    @tracer.capture_method
    def insert(
        self,
        dataset_id: str,
        table_id: str,
        rows: Sequence[Dict[str, Any]],
        ignore_unknown_values: bool = False,
        skip_invalid_rows: bool = False,
        template_suffix: Optional[str] = None,
        create_insert_id: bool = True,
    ) -> None:
        """Stream rows into a table; any per-row error fails the whole call."""
        try:
            errors = self.client.insert_rows_json(
                self._table_id(dataset_id, table_id),
                list(rows),
                ignore_unknown_values=ignore_unknown_values,
                skip_invalid_rows=skip_invalid_rows,
                template_suffix=template_suffix,
                row_ids=bigquery.AutoRowIDs.GENERATE_UUID if create_insert_id else bigquery.AutoRowIDs.DISABLED,
                retry=self.retry,
            )
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery insert operation failed', exc, datasetId=dataset_id, tableId=table_id,
                             rowCount=len(rows)) from exc

        if errors:
            error = BigQueryError('BigQuery insert operation failed', details={
                'errors': errors,
                'datasetId': dataset_id,
                'tableId': table_id,
                'rowCount': len(rows),
            })
            self.logger.error('BigQuery insert operation failed', error, {'datasetId': dataset_id, 'tableId': table_id})
            raise error

        self.logger.info('BigQuery insert completed successfully', {
            'datasetId': dataset_id,
            'tableId': table_id,
            'rowCount': len(rows),
        })

    @tracer.capture_method
    def create_table(
        self,
        dataset_id: str,
        table_id: str,
        schema: SchemaSpec,
        description: Optional[str] = None,
    ) -> None:
        """
        Create a table.

        ``schema`` accepts ``SchemaField`` objects or their API dicts
        (``{"name": ..., "type": ..., "mode": ...}``).
        """
        fields = [field if isinstance(field, bigquery.SchemaField) else bigquery.SchemaField.from_api_repr(field)
                  for field in schema]
        table = bigquery.Table(self._table_id(dataset_id, table_id), schema=fields)
        if description:
            table.description = description

        try:
            self.client.create_table(table, retry=self.retry)
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery table creation failed', exc, datasetId=dataset_id, tableId=table_id) from exc

        self.logger.info('BigQuery table created successfully', {
            'datasetId': dataset_id,
            'tableId': table_id,
            'fieldCount': len(fields),
        })

    @tracer.capture_method
    def delete_table(self, dataset_id: str, table_id: str) -> None:
        try:
            self.client.delete_table(self._table_id(dataset_id, table_id), retry=self.retry)
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery table deletion failed', exc, datasetId=dataset_id, tableId=table_id) from exc

        self.logger.info('BigQuery table deleted successfully', {'datasetId': dataset_id, 'tableId': table_id})

    @tracer.capture_method
    def table_exists(self, dataset_id: str, table_id: str) -> bool:
        try:
            self.client.get_table(self._table_id(dataset_id, table_id), retry=self.retry)
            exists = True
        except NotFound:
            exists = False
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery table existence check failed', exc, datasetId=dataset_id,
                             tableId=table_id) from exc

        self.logger.debug('BigQuery table existence check', {
            'datasetId': dataset_id,
            'tableId': table_id,
            'exists': exists,
        })
        return exists

    @tracer.capture_method
    def get_table_metadata(self, dataset_id: str, table_id: str) -> Dict[str, Any]:
        """Return the table resource as the API represents it."""
        try:
            table = self.client.get_table(self._table_id(dataset_id, table_id), retry=self.retry)
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery table metadata retrieval failed', exc, datasetId=dataset_id,
                             tableId=table_id) from exc

        self.logger.debug('BigQuery table metadata retrieved', {
            'datasetId': dataset_id,
            'tableId': table_id,
            'numRows': table.num_rows,
            'numBytes': table.num_bytes,
        })
        return table.to_api_repr()

    @tracer.capture_method
    def create_dataset(self, dataset_id: str, location: Optional[str] = None, description: Optional[str] = None) -> None:
        dataset = bigquery.Dataset(self._dataset_id(dataset_id))
        dataset.location = location or self.config.location
        if description:
            dataset.description = description

        try:
            self.client.create_dataset(dataset, retry=self.retry)
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery dataset creation failed', exc, datasetId=dataset_id) from exc

        self.logger.info('BigQuery dataset created successfully', {
            'datasetId': dataset_id,
            'location': dataset.location,
        })

    @tracer.capture_method
    def delete_dataset(self, dataset_id: str, force: bool = False) -> None:
        """Delete a dataset; ``force`` also deletes the tables it contains."""
        try:
            self.client.delete_dataset(self._dataset_id(dataset_id), delete_contents=force, retry=self.retry)
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery dataset deletion failed', exc, datasetId=dataset_id) from exc

        self.logger.info('BigQuery dataset deleted successfully', {'datasetId': dataset_id, 'force': force})

    @tracer.capture_method
    def dataset_exists(self, dataset_id: str) -> bool:
        try:
            self.client.get_dataset(self._dataset_id(dataset_id), retry=self.retry)
            exists = True
        except NotFound:
            exists = False
        except SDK_ERRORS as exc:
            raise self._fail('BigQuery dataset existence check failed', exc, datasetId=dataset_id) from exc

        self.logger.debug('BigQuery dataset existence check', {'datasetId': dataset_id, 'exists': exists})
        return exists
