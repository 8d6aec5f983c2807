"""
HTTP client wrapper.

httpx client with keep-alive connection pooling, redacted request logging and
explicit retries built on ``retry_with_backoff``. Every status >= 400 is a
failure; exhausted requests raise ``ExternalServiceError``.
"""

from typing import Any, Dict, Optional

import httpx

from fbo_lambda.clients.base import BaseClient
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.utils.errors import ExternalServiceError
from fbo_lambda.utils.logger import StructuredLogger
from fbo_lambda.utils.retry import retry_with_backoff

USER_AGENT = 'Yummy-FBO-Lambda/1.0'

DEFAULT_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'application/json',
    'Content-Type': 'application/json',
}

SENSITIVE_HEADERS = frozenset({'authorization', 'x-api-key', 'cookie', 'set-cookie'})

REDACTED = '[REDACTED]'

POOL_LIMITS = httpx.Limits(max_connections=50, max_keepalive_connections=10, keepalive_expiry=60.0)


def sanitize_headers(headers: Any) -> Dict[str, str]:
    """Copy headers for logging with credentials replaced by ``[REDACTED]``."""
    if not headers:
        return {}
    return {
        str(key): REDACTED if str(key).lower() in SENSITIVE_HEADERS else str(value)
        for key, value in dict(headers).items()
    }


class HttpClient(BaseClient):
    """Synchronous JSON HTTP client with bounded retries."""

    service_name = 'HttpClient'

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_ms: int = 30000,
        retries: int = 3,
        retry_delay_ms: int = 1000,
        headers: Optional[Dict[str, str]] = None,
        logger: Optional[StructuredLogger] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            base_url: Prefix for relative request URLs
            timeout_ms: Default per-request timeout in milliseconds
            retries: Retries after the first attempt; 0 disables retrying
            retry_delay_ms: Base backoff delay in milliseconds
            headers: Headers added to every request
            logger: Parent structured logger
            transport: Custom httpx transport, e.g. ``httpx.MockTransport`` in tests
        """
        super().__init__(logger)
        self.base_url = base_url or ''
        self.timeout_ms = timeout_ms
        self.retries = retries
        self.retry_delay_ms = retry_delay_ms
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._transport = transport
        self._client: Optional[httpx.Client] = None

        self.logger.info('HTTP Client initialized', {
            'baseURL': self.base_url,
            'timeout': timeout_ms,
            'retries': retries,
        })

    @property
    def is_connected(self) -> bool:
        return self._client is not None and not self._client.is_closed

    def connect(self) -> None:
        if self.is_connected:
            return
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout_ms / 1000,
            limits=POOL_LIMITS,
            headers=self.headers,
            transport=self._transport,
            event_hooks={'request': [self._log_request], 'response': [self._log_response]},
        )

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def client(self) -> httpx.Client:
        self.connect()
        return self._client

    def _log_request(self, request: httpx.Request) -> None:
        self.logger.debug('HTTP Request', {
            'method': request.method,
            'url': str(request.url),
            'headers': sanitize_headers(request.headers),
        })

    def _log_response(self, response: httpx.Response) -> None:
        self.logger.debug('HTTP Response', {
            'status': response.status_code,
            'statusText': response.reason_phrase,
            'url': str(response.request.url),
        })

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        if 'json' in response.headers.get('content-type', ''):
            return response.json()
        return response.text

    def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        def attempt() -> Any:
            try:
                response = self.client.request(method, url, **kwargs)
                if response.is_error:
                    response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise ExternalServiceError(
                    f'HTTP {exc.response.status_code}: {exc.response.reason_phrase}',
                    details={
                        'error': exc,
                        'status_code': exc.response.status_code,
                        'method': method,
                        'url': url,
                    },
                ) from exc
            except httpx.HTTPError as exc:
                raise ExternalServiceError(
                    f'HTTP request failed: {exc}',
                    details={'error': exc, 'method': method, 'url': url},
                ) from exc
            return self._decode(response)

        try:
            return retry_with_backoff(attempt, self.retries, self.retry_delay_ms)
        except ExternalServiceError as exc:
            self.logger.error('HTTP Response Error', exc, {
                'method': method,
                'url': url,
                'status': exc.details.get('status_code'),
            })
            raise

    @staticmethod
    def _request_options(
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if params:
            options['params'] = params
        if headers:
            options['headers'] = headers
        if timeout_ms is not None:
            options['timeout'] = timeout_ms / 1000
        return options

    @tracer.capture_method
    def get(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None,
            timeout_ms: Optional[int] = None) -> Any:
        return self._send('GET', url, **self._request_options(params, headers, timeout_ms))

    @tracer.capture_method
    def post(self, url: str, data: Any = None, params: Optional[Dict[str, Any]] = None,
             headers: Optional[Dict[str, str]] = None, timeout_ms: Optional[int] = None) -> Any:
        return self._send('POST', url, json=data, **self._request_options(params, headers, timeout_ms))

    @tracer.capture_method
    def put(self, url: str, data: Any = None, params: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None, timeout_ms: Optional[int] = None) -> Any:
        return self._send('PUT', url, json=data, **self._request_options(params, headers, timeout_ms))

    @tracer.capture_method
    def delete(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None,
               timeout_ms: Optional[int] = None) -> Any:
        return self._send('DELETE', url, **self._request_options(params, headers, timeout_ms))


# Clients cached per base URL for the lifetime of the process
_http_clients: Dict[str, HttpClient] = {}


def get_http_client(base_url: str, **kwargs: Any) -> HttpClient:
    """Return the cached client for ``base_url``, creating it on first use."""
    if base_url not in _http_clients:
        _http_clients[base_url] = HttpClient(base_url=base_url, **kwargs)
    return _http_clients[base_url]


def clear_http_clients() -> None:
    """Close and drop every cached client."""
    for client in _http_clients.values():
        client.disconnect()
    _http_clients.clear()

