"""
Gateway Handler - Lambda handler for every inbound event type.

Classifies the event, dispatches it through the event router and is the only
place where errors become response envelopes.
"""

from typing import Any, Dict

from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from fbo_lambda.clients.container import get_container
from fbo_lambda.handlers.event_router import classify_event, dispatch_event
from fbo_lambda.handlers.utils.context import HandlerContext
from fbo_lambda.handlers.utils.observability import logger, metrics, tracer
from fbo_lambda.utils.errors import LambdaError
from fbo_lambda.utils.logger import create_logger
from fbo_lambda.utils.responses import create_error_response


@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
@logger.inject_lambda_context
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Gateway Lambda handler.

    Args:
        event: S3 notification, API Gateway proxy event or custom payload
        context: Lambda context object

    Returns:
        API Gateway proxy response envelope
    """
    request_logger = create_logger('LambdaHandler', context.aws_request_id)
    event_type = classify_event(event)

    tracer.put_annotation('event_type', event_type.value)
    request_logger.info('Lambda function invoked', {
        'eventType': event_type.value,
        'functionName': context.function_name,
        'functionVersion': context.function_version,
        'remainingTimeInMillis': context.get_remaining_time_in_millis(),
    })
    metrics.add_metric(name='RequestCount', unit=MetricUnit.Count, value=1)

    try:
        # Configuration is validated on first use so a bad environment is reported per invocation
        handler_context = HandlerContext(
            request_id=context.aws_request_id,
            function_name=context.function_name,
            logger=request_logger,
            container=get_container(),
        )
        response = dispatch_event(event, handler_context)
    except Exception as exc:
        failure: Dict[str, Any] = {'eventType': event_type.value, 'errorCode': 'INTERNAL_ERROR'}
        if isinstance(exc, LambdaError):
            failure['errorCode'] = exc.error_code
            failure['lambdaError'] = exc.to_dict()
        request_logger.error('Lambda function failed', exc, failure)
        metrics.add_metric(name='RequestError', unit=MetricUnit.Count, value=1)
        return create_error_response(exc, context.aws_request_id)

    metrics.add_metric(name='RequestSuccess', unit=MetricUnit.Count, value=1)
    request_logger.info('Lambda function completed successfully', {
        'eventType': event_type.value,
        'statusCode': response['statusCode'],
        'duration': handler_context.elapsed_ms(),
    })
    return response
