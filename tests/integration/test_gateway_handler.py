"""
Integration tests for the gateway Lambda handler.

Events flow through classification, dispatch and the real handlers; S3 is
served by moto.
"""

import json
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from fbo_lambda.handlers.gateway_handler import lambda_handler
from fbo_lambda.utils.logger import StructuredLogger


def _body(response):
    return json.loads(response["body"])


class TestGatewayHandler:
    """Test cases for lambda_handler."""

    def test_custom_health_check(self, custom_event, lambda_context):
        response = lambda_handler(custom_event, lambda_context)

        body = _body(response)
        assert response["statusCode"] == 200
        assert body["message"] == "Health check passed"
        assert body["environment"] == "test"
        assert body["functionName"] == "fbo-lambda-test"

    def test_http_get(self, http_api_event, lambda_context):
        response = lambda_handler(http_api_event, lambda_context)

        assert response["statusCode"] == 200
        assert response["headers"]["Content-Type"] == "application/json"
        assert _body(response)["bill"]["batch_id"] == "batch-1"

    def test_http_post(self, api_gateway_event, lambda_context):
        response = lambda_handler(api_gateway_event, lambda_context)

        assert response["statusCode"] == 201
        assert _body(response)["bill"]["rif"] == "J-12345678-9"

    def test_http_missing_api_key(self, api_gateway_event, lambda_context):
        del api_gateway_event["headers"]["X-Api-Key"]

        response = lambda_handler(api_gateway_event, lambda_context)

        body = _body(response)
        assert response["statusCode"] == 401
        assert body["message"] == "Request failed"
        assert body["error"] == {"code": "UNAUTHORIZED", "message": "Missing API key"}
        assert body["requestId"] == "test-request-id-123"

    def test_http_wrong_api_key(self, api_gateway_event, lambda_context):
        api_gateway_event["headers"]["X-Api-Key"] = "nope"

        response = lambda_handler(api_gateway_event, lambda_context)

        assert response["statusCode"] == 403

    def test_http_method_not_allowed(self, api_gateway_event, lambda_context):
        api_gateway_event["httpMethod"] = "PUT"

        response = lambda_handler(api_gateway_event, lambda_context)

        assert response["statusCode"] == 405
        assert _body(response)["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_http_invalid_bill(self, api_gateway_event, lambda_context):
        api_gateway_event["body"] = json.dumps({"name": "ACME"})

        response = lambda_handler(api_gateway_event, lambda_context)

        assert response["statusCode"] == 400
        assert _body(response)["error"]["code"] == "VALIDATION_ERROR"

    def test_s3_notification(self, s3_event, lambda_context):
        response = lambda_handler(s3_event, lambda_context)

        body = _body(response)
        assert response["statusCode"] == 200
        assert body["processedItems"] == 1
        assert body["files"][0]["valid"] is True

    def test_unknown_event(self, lambda_context):
        response = lambda_handler({"unexpected": True}, lambda_context)

        body = _body(response)
        assert response["statusCode"] == 500
        assert body["message"] == "Internal server error"
        assert body["error"]["code"] == "UNSUPPORTED_EVENT"

    def test_unknown_custom_action(self, lambda_context):
        response = lambda_handler({"action": "reboot"}, lambda_context)

        assert response["statusCode"] == 400

    def test_invalid_configuration_is_reported_per_invocation(self, custom_event, lambda_context):
        with patch.dict("os.environ", {"FINANCE_BASE_URL": "not-a-url"}):
            response = lambda_handler(custom_event, lambda_context)

        body = _body(response)
        assert response["statusCode"] == 500
        assert body["error"]["code"] == "CONFIGURATION_ERROR"
        assert "FINANCE_BASE_URL" in body["error"]["message"]

    def test_unexpected_exception(self, custom_event, lambda_context):
        with patch("fbo_lambda.handlers.gateway_handler.dispatch_event", side_effect=KeyError("boom")):
            response = lambda_handler(custom_event, lambda_context)

        body = _body(response)
        assert response["statusCode"] == 500
        assert body["error"]["code"] == "INTERNAL_ERROR"

    def test_failure_log_carries_error_dict(self, api_gateway_event, lambda_context, powertools_logger, read_logs):
        del api_gateway_event["headers"]["X-Api-Key"]
        request_logger = StructuredLogger("LambdaHandler", "test-request-id-123", powertools_logger)

        with patch("fbo_lambda.handlers.gateway_handler.create_logger", return_value=request_logger):
            lambda_handler(api_gateway_event, lambda_context)

        [failure] = [record for record in read_logs() if record["message"] == "Lambda function failed"]
        assert failure["errorCode"] == "UNAUTHORIZED"
        assert failure["lambdaError"]["name"] == "AuthenticationError"
        assert failure["lambdaError"]["status_code"] == 401
        assert failure["error"]["message"] == "Missing API key"

    def test_emits_request_metrics(self, custom_event, lambda_context, capsys):
        lambda_handler(custom_event, lambda_context)

        emitted = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
        metric_names = {
            metric["Name"]
            for record in emitted
            for directive in record["_aws"]["CloudWatchMetrics"]
            for metric in directive["Metrics"]
        }
        assert {"RequestCount", "RequestSuccess"} <= metric_names


class TestProcessSpecificFile:
    """process_specific_file reads object metadata from S3."""

    @pytest.fixture
    def stored_file(self):
        with mock_aws():
            s3 = boto3.client("s3", region_name="us-east-2")
            s3.create_bucket(Bucket="fbo-test-bucket", CreateBucketConfiguration={"LocationConstraint": "us-east-2"})
            s3.put_object(Bucket="fbo-test-bucket", Key="in/dispersion.csv", Body=b"x" * 4096)
            yield "in/dispersion.csv"

    def test_valid_stored_file(self, stored_file, lambda_context):
        event = {"action": "process_specific_file", "data": {"fileName": stored_file}}

        response = lambda_handler(event, lambda_context)

        body = _body(response)
        assert response["statusCode"] == 200
        assert body["file"]["size"] == 4096
        assert body["validation"]["valid"] is True

    def test_missing_stored_file(self, stored_file, lambda_context):
        event = {"action": "process_specific_file", "data": {"fileName": "in/missing.csv"}}

        response = lambda_handler(event, lambda_context)

        assert response["statusCode"] == 502
        assert _body(response)["error"]["code"] == "EXTERNAL_SERVICE_ERROR"
