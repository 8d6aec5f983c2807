"""
Gateway Lambda Function - Entry point for every event source.

This module serves as the Lambda function entry point that delegates to the
gateway handler, which classifies S3 notifications, API Gateway requests and
custom invocation payloads and routes them to their handlers.
"""

import os
import sys
from typing import Any, Dict

# Add the fbo_lambda package to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from aws_lambda_powertools.utilities.typing import LambdaContext
from fbo_lambda.handlers.gateway_handler import lambda_handler as gateway_handler


def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Lambda function entry point.

    Args:
        event: Lambda event payload
        context: Lambda context object

    Returns:
        API Gateway response dictionary
    """
    return gateway_handler(event, context)
