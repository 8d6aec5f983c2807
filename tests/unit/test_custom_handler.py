"""
Unit tests for the custom invocation handler.
"""

import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from fbo_lambda.clients.s3_client import S3Client
from fbo_lambda.handlers.custom_handler import CUSTOM_ACTIONS, handle_custom_event
from fbo_lambda.logic.finance_service import FinanceService
from fbo_lambda.models import CustomAction, FileMetadata
from fbo_lambda.utils.errors import ExternalServiceError, ValidationError


class TestHandleCustomEvent:
    """Test cases for handle_custom_event."""

    def test_every_action_is_registered(self):
        assert set(CUSTOM_ACTIONS) == {action.value for action in CustomAction}

    def test_health_check(self, handler_context):
        response = handle_custom_event({"action": "health_check"}, handler_context)

        body = json.loads(response["body"])
        assert response["statusCode"] == 200
        assert body["message"] == "Health check passed"
        assert body["environment"] == "test"
        assert body["functionName"] == "fbo-lambda-test"
        assert "timestamp" in body
        assert body["config"]["s3Bucket"] == "fbo-test-bucket"
        assert "financeApi" not in body
        handler_context.container.finance_service.get_health_status.assert_not_called()

    def test_health_check_with_finance_api(self, handler_context):
        finance_service = handler_context.container.finance_service
        finance_service.get_health_status.return_value = {"healthy": False, "response_time_ms": 12}

        response = handle_custom_event(
            {"action": "health_check", "data": {"checkFinanceApi": True}}, handler_context
        )

        body = json.loads(response["body"])
        assert response["statusCode"] == 200
        assert body["financeApi"] == {"healthy": False, "response_time_ms": 12}
        finance_service.get_health_status.assert_called_once_with()

    def test_process_data(self, handler_context):
        response = handle_custom_event({"action": "process_data", "data": {"rows": 3}}, handler_context)

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["message"] == "Data processed successfully"

    def test_download_bank_files(self, handler_context):
        response = handle_custom_event({"action": "download_bank_files"}, handler_context)

        assert json.loads(response["body"])["message"] == "download_bank_files action completed successfully"

    def test_unknown_action(self, handler_context):
        with pytest.raises(ValidationError, match="Unsupported custom action: reboot") as exc_info:
            handle_custom_event({"action": "reboot"}, handler_context)

        assert exc_info.value.status_code == 400

    def test_empty_action(self, handler_context):
        with pytest.raises(ValidationError, match="Unsupported custom action"):
            handle_custom_event({"action": ""}, handler_context)


class TestProcessSpecificFile:
    """Test cases for the process_specific_file action."""

    @pytest.fixture
    def file_context(self, handler_context, app_config):
        s3 = Mock(spec=S3Client)
        s3.get_object_metadata.return_value = FileMetadata(
            bucket="fbo-test-bucket",
            key="in/dispersion.csv",
            size=4096,
            last_modified=datetime(2024, 1, 1, tzinfo=timezone.utc),
            etag='"abc"',
            content_type="text/csv",
        )
        handler_context.container.s3 = s3
        handler_context.container.finance_service = FinanceService(Mock(), app_config.finance)
        return handler_context

    def test_defaults_to_configured_bucket(self, file_context):
        event = {"action": "process_specific_file", "data": {"fileName": "in/dispersion.csv"}}

        response = handle_custom_event(event, file_context)

        body = json.loads(response["body"])
        assert response["statusCode"] == 200
        assert body["file"]["key"] == "in/dispersion.csv"
        assert body["file"]["size"] == 4096
        assert body["validation"] == {"valid": True, "errors": []}
        file_context.container.s3.get_object_metadata.assert_called_once_with("fbo-test-bucket", "in/dispersion.csv")

    def test_explicit_bucket(self, file_context):
        event = {"action": "process_specific_file", "data": {"fileName": "in/dispersion.csv", "bucket": "other"}}

        handle_custom_event(event, file_context)

        file_context.container.s3.get_object_metadata.assert_called_once_with("other", "in/dispersion.csv")

    def test_requires_file_name(self, file_context):
        with pytest.raises(ValidationError, match="data.fileName"):
            handle_custom_event({"action": "process_specific_file", "data": {}}, file_context)

    def test_storage_errors_propagate(self, file_context):
        file_context.container.s3.get_object_metadata.side_effect = ExternalServiceError("S3 get_object_metadata failed")

        with pytest.raises(ExternalServiceError):
            handle_custom_event({"action": "process_specific_file", "data": {"fileName": "x.csv"}}, file_context)
