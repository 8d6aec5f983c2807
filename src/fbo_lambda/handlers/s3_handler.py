"""
S3 notification handler.

Checks every object in the notification against the finance file rules and
reports the outcome per object.
"""

from typing import Any, Dict, List, Mapping
from urllib.parse import unquote_plus

from aws_lambda_powertools.utilities.data_classes import S3Event

from fbo_lambda.handlers.utils.context import HandlerContext
from fbo_lambda.handlers.utils.observability import tracer
from fbo_lambda.utils.responses import create_response


@tracer.capture_method
def handle_s3_event(event: Mapping[str, Any], context: HandlerContext) -> Dict[str, Any]:
    s3_event = S3Event(dict(event))
    records = list(s3_event.records)
    context.logger.info('Processing S3 event', {'recordCount': len(records)})

    finance_service = context.container.finance_service
    files: List[Dict[str, Any]] = []
    for record in records:
        bucket_name = record.s3.bucket.name
        # Keys arrive URL encoded, with spaces as "+"
        object_key = unquote_plus(record.s3.get_object.key)
        size = int(record.s3.get_object.get('size', 0))

        validation = finance_service.validate_finance_file(object_key, size)
        context.logger.info('Processing S3 object', {
            'bucketName': bucket_name,
            'objectKey': object_key,
            'size': size,
            'valid': validation.valid,
        })
        if not validation.valid:
            context.logger.warn('S3 object is not a valid finance file', {
                'bucketName': bucket_name,
                'objectKey': object_key,
                'errors': validation.errors,
            })

        files.append({
            'bucket': bucket_name,
            'key': object_key,
            'size': size,
            'valid': validation.valid,
            'errors': validation.errors,
        })

    return create_response(200, 'S3 event processed successfully', {
        'processedItems': len(records),
        'files': files,
    })
