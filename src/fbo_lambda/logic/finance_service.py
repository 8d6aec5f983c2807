"""
Business logic for the finance API integration.

Sends dispersion file notifications to the finance API, validates finance
files before they are processed and reports the API's health.
"""

import os
import time
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fbo_lambda.clients.http_client import HttpClient
from fbo_lambda.config.app_config import FinanceConfig
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.utils.errors import LambdaError
from fbo_lambda.utils.helpers import format_bytes, get_error_message
from fbo_lambda.utils.logger import StructuredLogger, create_logger

ALLOWED_EXTENSIONS = ('.csv', '.xlsx', '.txt')

MIN_FILE_SIZE_BYTES = 1024
MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024

HEALTH_CHECK_TIMEOUT_MS = 5000


class DispersionData(BaseModel):
    """Dispersion file notification sent to the finance API."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: Annotated[str, Field(min_length=1, alias='fileName')]
    file_size: Annotated[int, Field(ge=0, alias='fileSize')]
    upload_time: Annotated[str, Field(alias='uploadTime', description='ISO-8601 upload timestamp')]
    metadata: Optional[Dict[str, Any]] = None


class FinanceApiResponse(BaseModel):
    """Envelope returned by the finance API, or built locally on failure."""

    model_config = ConfigDict(extra='allow')

    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None


class FileValidationResult(BaseModel):
    valid: bool
    errors: List[str] = []


class FinanceService:
    """Finance API operations built on a shared ``HttpClient``."""

    def __init__(
        self,
        http_client: HttpClient,
        finance_config: FinanceConfig,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Initialize the finance service.

        Args:
            http_client: Client used for every finance API call
            finance_config: Base URL, API key and endpoint paths
            logger: Parent logger; the service logs under ``<parent>:FinanceService``
        """
        self.http_client = http_client
        self.config = finance_config
        self.logger = logger.child('FinanceService') if logger else create_logger('FinanceService')

    def _auth_headers(self) -> Dict[str, str]:
        return {'X-API-Key': self.config.api_key}

    @tracer.capture_method
    def send_dispersion_data(self, data: DispersionData) -> FinanceApiResponse:
        """
        POST a dispersion file notification to the finance API.

        Failures are logged and reported in the returned response instead of
        being raised, so one bad notification does not abort a batch.
        """
        endpoint = self.config.dispersion_endpoint
        self.logger.info('Sending dispersion data to Finance API', {
            'fileName': data.file_name,
            'fileSize': data.file_size,
            'endpoint': endpoint,
        })

        try:
            payload = self.http_client.post(
                f'{self.config.base_url}{endpoint}',
                data=data.model_dump(by_alias=True, exclude_none=True),
                headers=self._auth_headers(),
                timeout_ms=self.config.timeout_ms,
            )
            response = FinanceApiResponse.model_validate(payload)
        except (LambdaError, ValueError) as exc:
            self.logger.error('Failed to send dispersion data', exc, {
                'fileName': data.file_name,
                'endpoint': endpoint,
            })
            return FinanceApiResponse(success=False, error=get_error_message(exc))

        self.logger.info('Dispersion data sent successfully', {
            'fileName': data.file_name,
            'success': response.success,
            'responseMessage': response.message,
        })
        return response

    def validate_finance_file(self, file_name: str, file_size: int) -> FileValidationResult:
        """
        Check a file against the finance processing rules.

        Args:
            file_name: File name or object key; only the extension is checked
            file_size: Size in bytes

        Returns:
            Validation result listing every rule the file breaks
        """
        errors: List[str] = []

        extension = os.path.splitext(file_name.lower())[1]
        if extension not in ALLOWED_EXTENSIONS:
            errors.append(f"Invalid file extension: {extension or '(none)'}. Allowed: {', '.join(ALLOWED_EXTENSIONS)}")

        if file_size > MAX_FILE_SIZE_BYTES:
            errors.append(f'File size exceeds maximum allowed size of {format_bytes(MAX_FILE_SIZE_BYTES)}')

        if file_size < MIN_FILE_SIZE_BYTES:
            errors.append(f'File size is too small (minimum {format_bytes(MIN_FILE_SIZE_BYTES)} required)')

        return FileValidationResult(valid=not errors, errors=errors)

    @tracer.capture_method
    def get_health_status(self) -> Dict[str, Any]:
        """Call the finance API health endpoint; never raises."""
        start = time.monotonic()
        try:
            self.http_client.get(
                f'{self.config.base_url}/health',
                headers=self._auth_headers(),
                timeout_ms=HEALTH_CHECK_TIMEOUT_MS,
            )
            healthy = True
        except LambdaError as exc:
            healthy = False
            self.logger.error('Finance API health check failed', exc)

        response_time_ms = int((time.monotonic() - start) * 1000)
        if healthy:
            self.logger.info('Finance API health check successful', {'responseTime': response_time_ms})
        return {'healthy': healthy, 'response_time_ms': response_time_ms}
