"""
API Gateway request handler.

Accepts REST API (v1) and HTTP API (v2) proxy events. Every request must carry
the finance API key in ``X-Api-Key``; the method then selects a billing endpoint.
"""

import base64
import binascii
from http import HTTPStatus
from typing import Any, Callable, Dict, Mapping, Optional

from fbo_lambda.handlers.bill_handlers import create_bill_handler, get_bill_handler
from fbo_lambda.handlers.utils.context import HandlerContext
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.security.auth import require_api_key
from fbo_lambda.utils.errors import LambdaError, ValidationError

HTTP_ROUTES: Dict[str, Callable[[Optional[str]], Dict[str, Any]]] = {
    'GET': get_bill_handler,
    'POST': create_bill_handler,
}


def get_http_method(event: Mapping[str, Any]) -> Optional[str]:
    """
    Extract the HTTP method of an API Gateway event.

    HTTP API (v2) events carry it at ``requestContext.http.method``; REST API
    (v1) events carry a top-level ``httpMethod`` next to ``requestContext``.
    """
    request_context = event.get('requestContext')
    if not isinstance(request_context, Mapping):
        return None

    http = request_context.get('http')
    if isinstance(http, Mapping) and isinstance(http.get('method'), str):
        return http['method'].upper()

    method = event.get('httpMethod')
    if isinstance(method, str):
        return method.upper()
    return None


def get_request_body(event: Mapping[str, Any]) -> Optional[str]:
    """Return the request body as text, decoding it when API Gateway base64-encoded it."""
    body = event.get('body')
    if not body or not event.get('isBase64Encoded'):
        return body
    try:
        return base64.b64decode(body).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValidationError('Request body is not valid base64 encoded UTF-8', details={'error': exc}) from exc


@tracer.capture_method
def handle_http_event(event: Mapping[str, Any], context: HandlerContext) -> Dict[str, Any]:
    """
    Authorize and route an API Gateway request.

    Raises:
        AuthenticationError: If ``X-Api-Key`` is missing
        AuthorizationError: If ``X-Api-Key`` does not match
        LambdaError: With status 405 for methods other than GET and POST
    """
    method = get_http_method(event)
    context.logger.info('Processing HTTP event', {
        'method': method,
        'path': event.get('rawPath') or event.get('path'),
    })

    require_api_key(event.get('headers'), context.config.finance)

    route = HTTP_ROUTES.get(method)
    if route is None:
        raise LambdaError(
            f'Unsupported HTTP method: {method}',
            error_code='METHOD_NOT_ALLOWED',
            status_code=HTTPStatus.METHOD_NOT_ALLOWED.value,
        )
    return route(get_request_body(event))
