"""
Event classification and dispatch.

An inbound event is classified by an ordered tuple of shape predicates; the
first predicate that recognizes the event decides its type. Dispatch is a
lookup from event type to handler.
"""

from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from fbo_lambda.handlers.custom_handler import handle_custom_event
from fbo_lambda.handlers.http_handler import get_http_method, handle_http_event
from fbo_lambda.handlers.s3_handler import handle_s3_event
from fbo_lambda.handlers.utils.context import HandlerContext
from fbo_lambda.utils.errors import LambdaError


class EventType(str, Enum):
    S3 = 's3'
    HTTP = 'http'
    CUSTOM = 'custom'
    UNKNOWN = 'unknown'


def _match_s3(event: Mapping[str, Any]) -> Optional[EventType]:
    records = event.get('Records')
    if isinstance(records, list) and records and isinstance(records[0], Mapping) and 's3' in records[0]:
        return EventType.S3
    return None


def _match_http(event: Mapping[str, Any]) -> Optional[EventType]:
    return EventType.HTTP if get_http_method(event) else None


def _match_custom(event: Mapping[str, Any]) -> Optional[EventType]:
    return EventType.CUSTOM if isinstance(event.get('action'), str) else None


# Order matters: the first match wins
EVENT_CLASSIFIERS = (_match_s3, _match_http, _match_custom)


def classify_event(event: Any) -> EventType:
    """Return the type of ``event``; anything unrecognized is ``EventType.UNKNOWN``."""
    if not isinstance(event, Mapping):
        return EventType.UNKNOWN
    for classifier in EVENT_CLASSIFIERS:
        event_type = classifier(event)
        if event_type is not None:
            return event_type
    return EventType.UNKNOWN


EventHandler = Callable[[Mapping[str, Any], HandlerContext], Dict[str, Any]]

EVENT_HANDLERS: Dict[EventType, EventHandler] = {
    EventType.S3: handle_s3_event,
    EventType.HTTP: handle_http_event,
    EventType.CUSTOM: handle_custom_event,
}


def dispatch_event(event: Any, context: HandlerContext) -> Dict[str, Any]:
    """
    Route ``event`` to its handler and return the handler's response envelope.

    Raises:
        LambdaError: If the event type has no handler
    """
    event_type = classify_event(event)
    context.logger.info('Processing event', {'eventType': event_type.value})

    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        raise LambdaError(f'Unsupported event type: {event_type.value}', error_code='UNSUPPORTED_EVENT')
    return handler(event, context)
