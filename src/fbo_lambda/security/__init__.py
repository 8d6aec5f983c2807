"""
Security module: API key authorization for HTTP requests.
"""

from .auth import API_KEY_HEADER, get_header, is_authorized, require_api_key

__all__ = [
    'API_KEY_HEADER',
    'get_header',
    'is_authorized',
    'require_api_key',
]
