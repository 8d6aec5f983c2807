"""
API key authorization for HTTP requests.
"""

import hmac
from typing import Any, Mapping, Optional

from fbo_lambda.config.app_config import FinanceConfig
from fbo_lambda.utils.errors import AuthenticationError, AuthorizationError

API_KEY_HEADER = 'x-api-key'


def get_header(headers: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    """Case-insensitive header lookup; API Gateway v1 keeps caller casing, v2 lower-cases."""
    if not headers:
        return None
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def is_authorized(api_key: Optional[str], finance_config: FinanceConfig) -> Optional[bool]:
    """
    Compare a caller's API key with the configured finance API key.

    Returns:
        None when no key was supplied, otherwise whether the key matches
    """
    if not api_key:
        return None
    return hmac.compare_digest(api_key.encode(), finance_config.api_key.encode())


def require_api_key(headers: Optional[Mapping[str, Any]], finance_config: FinanceConfig) -> None:
    """
    Enforce the ``X-Api-Key`` header.

    Raises:
        AuthenticationError: If the header is missing
        AuthorizationError: If the key does not match
    """
    authorized = is_authorized(get_header(headers, API_KEY_HEADER), finance_config)
    if authorized is None:
        raise AuthenticationError('Missing API key')
    if not authorized:
        raise AuthorizationError('Invalid API key')
