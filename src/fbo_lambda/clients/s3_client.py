"""
S3 client wrapper.

Thin boto3 wrapper used for finance file storage. SDK failures are logged once
and re-raised as ``ExternalServiceError`` carrying the original exception.
"""

from typing import Any, Dict, Optional, Union

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from fbo_lambda.clients.base import BaseClient
from fbo_lambda.config.app_config import AwsConfig
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.models.files import FileMetadata
from fbo_lambda.utils.errors import ExternalServiceError
from fbo_lambda.utils.logger import StructuredLogger

S3_RETRY_CONFIG = Config(retries={'max_attempts': 3, 'mode': 'adaptive'})

SERVER_SIDE_ENCRYPTION = 'AES256'


class S3Client(BaseClient):
    """S3 operations with adaptive retries and server-side encryption on upload."""

    service_name = 'S3Client'

    def __init__(
        self,
        aws_config: AwsConfig,
        logger: Optional[StructuredLogger] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        super().__init__(logger)
        self.aws_config = aws_config
        self.endpoint_url = endpoint_url
        self._client: Optional[Any] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        if self._client is not None:
            return

        client_kwargs: Dict[str, Any] = {
            'region_name': self.aws_config.region,
            'config': S3_RETRY_CONFIG,
        }
        # Explicit credentials are only set for local development
        if self.aws_config.access_key_id and self.aws_config.secret_access_key:
            client_kwargs['aws_access_key_id'] = self.aws_config.access_key_id
            client_kwargs['aws_secret_access_key'] = self.aws_config.secret_access_key
        if self.endpoint_url:
            client_kwargs['endpoint_url'] = self.endpoint_url

        self._client = boto3.client('s3', **client_kwargs)
        self.logger.info('S3 Client initialized', {'region': self.aws_config.region})

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def client(self) -> Any:
        self.connect()
        return self._client

    def _raise(self, message: str, exc: Exception, bucket: str, key: str) -> None:
        self.logger.error(message, exc, {'bucket': bucket, 'key': key})
        raise ExternalServiceError(message, details={'error': exc, 'bucket': bucket, 'key': key}) from exc

    @tracer.capture_method
    def upload_file(
        self,
        bucket: str,
        key: str,
        body: Union[bytes, str],
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        cache_control: Optional[str] = None,
    ) -> None:
        """
        Upload an object with AES256 server-side encryption.

        Args:
            bucket: Target bucket
            key: Object key
            body: Object content
            content_type: Optional Content-Type
            metadata: Optional user metadata
            cache_control: Optional Cache-Control header

        Raises:
            ExternalServiceError: If S3 rejects the upload
        """
        params: Dict[str, Any] = {
            'Bucket': bucket,
            'Key': key,
            'Body': body,
            'ServerSideEncryption': SERVER_SIDE_ENCRYPTION,
        }
        if content_type:
            params['ContentType'] = content_type
        if metadata:
            params['Metadata'] = metadata
        if cache_control:
            params['CacheControl'] = cache_control

        self.logger.info('Uploading file to S3', {'bucket': bucket, 'key': key, 'size': len(body)})
        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as exc:
            self._raise('Failed to upload file to S3', exc, bucket, key)

        self.logger.info('File uploaded successfully', {'bucket': bucket, 'key': key})

    @tracer.capture_method
    def get_file(self, bucket: str, key: str) -> bytes:
        """Download an object and return its content."""
        self.logger.info('Downloading file from S3', {'bucket': bucket, 'key': key})
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
            content = response['Body'].read()
        except (ClientError, BotoCoreError) as exc:
            self._raise('Failed to download file from S3', exc, bucket, key)

        self.logger.info('File downloaded successfully', {'bucket': bucket, 'key': key, 'size': len(content)})
        return content

    @tracer.capture_method
    def get_object_metadata(self, bucket: str, key: str) -> FileMetadata:
        """Fetch object metadata without downloading the content."""
        self.logger.info('Fetching metadata for S3 object', {'bucket': bucket, 'key': key})
        try:
            response = self.client.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            self._raise('Failed to get object metadata', exc, bucket, key)

        metadata = FileMetadata(
            bucket=bucket,
            key=key,
            size=response.get('ContentLength', 0),
            last_modified=response.get('LastModified'),
            etag=response.get('ETag', ''),
            content_type=response.get('ContentType'),
        )
        self.logger.info('Metadata retrieved successfully', {'bucket': bucket, 'key': key, 'size': metadata.size})
        return metadata

    @tracer.capture_method
    def delete_file(self, bucket: str, key: str) -> None:
        self.logger.info('Deleting file from S3', {'bucket': bucket, 'key': key})
        try:
            self.client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            self._raise('Failed to delete file from S3', exc, bucket, key)
