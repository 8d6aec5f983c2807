"""
Billing endpoints.

``GET`` echoes the bill described by the request body; ``POST`` validates a
bill creation request. Persistence belongs to the finance systems.
"""

from http import HTTPStatus
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.models.bill import CreateBillRequest
from fbo_lambda.utils.errors import ValidationError
from fbo_lambda.utils.helpers import safe_json_loads
from fbo_lambda.utils.responses import create_response


def _bad_request() -> Dict[str, Any]:
    return create_response(HTTPStatus.BAD_REQUEST.value, HTTPStatus.BAD_REQUEST.phrase)


def _parse_object(body: str) -> Dict[str, Any]:
    payload = safe_json_loads(body)
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


@tracer.capture_method
def get_bill_handler(body: Optional[str]) -> Dict[str, Any]:
    if not body:
        return _bad_request()
    return create_response(HTTPStatus.OK.value, HTTPStatus.OK.phrase, {'bill': _parse_object(body)})


@tracer.capture_method
def create_bill_handler(body: Optional[str]) -> Dict[str, Any]:
    """
    Validate a bill creation request.

    Raises:
        ValidationError: If the body is not a JSON object or misses required bill fields
    """
    if not body:
        return _bad_request()

    try:
        request = CreateBillRequest.model_validate(_parse_object(body))
    except PydanticValidationError as exc:
        field_errors = [
            {'field': '.'.join(str(part) for part in error['loc']), 'message': error['msg']}
            for error in exc.errors()
        ]
        raise ValidationError('Bill validation failed', details={'field_errors': field_errors}) from exc

    return create_response(HTTPStatus.CREATED.value, HTTPStatus.CREATED.phrase, {
        'bill': request.model_dump(exclude_none=True),
    })
