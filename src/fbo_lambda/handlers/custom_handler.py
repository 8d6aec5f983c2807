"""
Custom invocation handler.

Direct invocations name an ``action``; each action maps to one function below.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from fbo_lambda.config.app_config import describe_config
from fbo_lambda.handlers.utils.context import HandlerContext
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.models.events import CustomAction, CustomEvent, ProcessSpecificFileData
from fbo_lambda.utils.errors import ValidationError
from fbo_lambda.utils.responses import create_response


def health_check(event: CustomEvent, context: HandlerContext) -> Dict[str, Any]:
    """
    Report the function and its configuration.

    With ``data.checkFinanceApi`` set, the finance API health endpoint is called too.
    """
    body = {
        'environment': context.environment,
        'functionName': context.function_name,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'config': describe_config(context.config),
    }
    if isinstance(event.data, dict) and event.data.get('checkFinanceApi'):
        body['financeApi'] = context.container.finance_service.get_health_status()
    return create_response(200, 'Health check passed', body)


def process_data(event: CustomEvent, context: HandlerContext) -> Dict[str, Any]:
    context.logger.info('Processing custom data', {'hasData': event.data is not None})
    return create_response(200, 'Data processed successfully')


def download_bank_files(event: CustomEvent, context: HandlerContext) -> Dict[str, Any]:
    context.logger.info('Downloading bank files', {'bucket': context.config.aws.s3_bucket_name})
    return create_response(200, 'download_bank_files action completed successfully')


def process_specific_file(event: CustomEvent, context: HandlerContext) -> Dict[str, Any]:
    """
    Validate one stored file against the finance file rules.

    ``data`` must carry ``fileName``; ``bucket`` defaults to ``S3_BUCKET_NAME``.
    """
    try:
        request = ProcessSpecificFileData.model_validate(event.data or {})
    except PydanticValidationError as exc:
        raise ValidationError('process_specific_file requires data.fileName', details={'error': exc}) from exc

    bucket = request.bucket or context.config.aws.s3_bucket_name
    metadata = context.container.s3.get_object_metadata(bucket, request.file_name)
    validation = context.container.finance_service.validate_finance_file(metadata.key, metadata.size)

    context.logger.info('Processed specific file', {
        'bucket': bucket,
        'key': metadata.key,
        'size': metadata.size,
        'valid': validation.valid,
    })
    return create_response(200, 'process_specific_file action completed successfully', {
        'file': metadata.model_dump(mode='json'),
        'validation': validation.model_dump(),
    })


CUSTOM_ACTIONS: Dict[str, Callable[[CustomEvent, HandlerContext], Dict[str, Any]]] = {
    CustomAction.HEALTH_CHECK.value: health_check,
    CustomAction.PROCESS_DATA.value: process_data,
    CustomAction.DOWNLOAD_BANK_FILES.value: download_bank_files,
    CustomAction.PROCESS_SPECIFIC_FILE.value: process_specific_file,
}


@tracer.capture_method
def handle_custom_event(event: Mapping[str, Any], context: HandlerContext) -> Dict[str, Any]:
    """
    Run the function registered for ``event["action"]``.

    Raises:
        ValidationError: If the action is not registered
    """
    try:
        custom_event = CustomEvent.model_validate(dict(event))
    except PydanticValidationError as exc:
        raise ValidationError('Invalid custom event', details={'error': exc}) from exc
    context.logger.info('Processing custom event', {'action': custom_event.action})

    action = CUSTOM_ACTIONS.get(custom_event.action)
    if action is None:
        raise ValidationError(f'Unsupported custom action: {custom_event.action}')
    return action(custom_event, context)
