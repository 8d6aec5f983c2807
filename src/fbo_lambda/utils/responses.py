"""
Response envelope builders.

Every handler returns the API Gateway proxy shape produced here:
``{statusCode, headers, body, isBase64Encoded}`` where ``body`` is a JSON
object string that always leads with ``message``.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fbo_lambda.utils.errors import LambdaError
from fbo_lambda.utils.helpers import get_error_message

POWERED_BY = 'FBO-Lambda'

DEFAULT_HEADERS = {
    'Content-Type': 'application/json',
    'X-Powered-By': POWERED_BY,
}

GENERIC_ERROR_MESSAGE = 'Internal server error'


def create_response(
    status_code: int,
    message: Optional[str] = None,
    body_fields: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    is_base64_encoded: bool = False,
) -> Dict[str, Any]:
    """Create standardized API Gateway response."""
    response_headers = dict(DEFAULT_HEADERS)
    if headers:
        response_headers.update(headers)

    body: Dict[str, Any] = {}
    if message is not None:
        body['message'] = message
    if body_fields:
        body.update(body_fields)

    return {
        'statusCode': status_code,
        'headers': response_headers,
        'body': json.dumps(body, separators=(',', ':'), default=str),
        'isBase64Encoded': is_base64_encoded,
    }


def create_success_response(data: Any, message: Optional[str] = None, status_code: int = 200) -> Dict[str, Any]:
    """Wrap a handler result in a success envelope."""
    return create_response(status_code, message or 'OK', {
        'success': True,
        'data': data,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


def create_error_response(error: BaseException, request_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Convert an escaping error into a failure envelope.

    The body carries a generic message plus the machine readable error code and
    message; stack traces and ``details`` are never exposed.
    """
    if isinstance(error, LambdaError):
        status_code = error.status_code
        code = error.error_code
    else:
        status_code = 500
        code = 'INTERNAL_ERROR'

    fields: Dict[str, Any] = {
        'success': False,
        'error': {
            'code': code,
            'message': get_error_message(error),
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }
    if request_id:
        fields['requestId'] = request_id

    message = 'Request failed' if status_code < 500 else GENERIC_ERROR_MESSAGE
    return create_response(status_code, message, fields)
