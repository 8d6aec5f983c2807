"""
Small helpers shared by handlers and clients.
"""

import json
import math
import re
from typing import Any, Optional
from urllib.parse import urlparse

_BYTE_UNITS = ['Bytes', 'KB', 'MB', 'GB', 'TB', 'PB', 'EB', 'ZB', 'YB']


def safe_json_loads(payload: Optional[str]) -> Optional[Any]:
    """Parse JSON, returning None when the payload is empty or malformed."""
    if not payload:
        return None
    try:
        return json.loads(payload)
    except (TypeError, ValueError):
        return None


def get_error_message(error: Any) -> str:
    """Extract a human readable message from anything that was raised or passed as an error."""
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    return 'Unknown error occurred'


def sanitize_file_name(file_name: str) -> str:
    """Replace characters outside ``[a-zA-Z0-9.-]`` so the name is safe as an object key segment."""
    sanitized = re.sub(r'[^a-zA-Z0-9.-]', '_', file_name)
    sanitized = re.sub(r'_{2,}', '_', sanitized)
    return sanitized.strip('_')


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Format a byte count, e.g. ``1536 -> '1.5 KB'``."""
    if num_bytes == 0:
        return '0 Bytes'

    precision = max(decimals, 0)
    index = min(int(math.floor(math.log(num_bytes, 1024))), len(_BYTE_UNITS) - 1)
    value = round(num_bytes / (1024 ** index), precision)
    return f'{value:g} {_BYTE_UNITS[index]}'


def is_valid_url(value: str) -> bool:
    """Check that ``value`` is an absolute URL with a scheme and a host."""
    try:
        parsed = urlparse(value)
    except (TypeError, ValueError):
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def truncate_string(value: str, max_length: int) -> str:
    """Truncate ``value`` to ``max_length`` characters, marking the cut with an ellipsis."""
    if len(value) <= max_length:
        return value
    return value[:max_length - 3] + '...'
