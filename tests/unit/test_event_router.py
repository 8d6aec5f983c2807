"""
Unit tests for event classification and dispatch.
"""

from unittest.mock import Mock, patch

import pytest

from fbo_lambda.handlers.event_router import EventType, classify_event, dispatch_event
from fbo_lambda.utils.errors import LambdaError


class TestClassifyEvent:
    """Test cases for classify_event."""

    def test_s3_event(self, s3_event):
        assert classify_event(s3_event) is EventType.S3

    def test_http_api_v2_event(self, http_api_event):
        assert classify_event(http_api_event) is EventType.HTTP

    def test_rest_api_v1_event(self, api_gateway_event):
        assert classify_event(api_gateway_event) is EventType.HTTP

    def test_custom_event(self, custom_event):
        assert classify_event(custom_event) is EventType.CUSTOM

    @pytest.mark.parametrize(
        "event",
        [
            {},
            {"Records": []},
            {"Records": [{"eventSource": "aws:sqs", "body": "{}"}]},
            {"httpMethod": "GET"},
            {"requestContext": {"requestId": "r"}},
            {"action": 42},
            None,
            "string event",
            [1, 2, 3],
        ],
    )
    def test_unknown_event(self, event):
        assert classify_event(event) is EventType.UNKNOWN

    def test_s3_wins_over_action(self, s3_event):
        s3_event["action"] = "health_check"

        assert classify_event(s3_event) is EventType.S3

    def test_http_wins_over_action(self, api_gateway_event):
        api_gateway_event["action"] = "health_check"

        assert classify_event(api_gateway_event) is EventType.HTTP


class TestDispatchEvent:
    """Test cases for dispatch_event."""

    @pytest.mark.parametrize(
        "fixture_name,event_type",
        [("s3_event", EventType.S3), ("http_api_event", EventType.HTTP), ("custom_event", EventType.CUSTOM)],
    )
    def test_routes_to_registered_handler(self, request, handler_context, fixture_name, event_type):
        event = request.getfixturevalue(fixture_name)
        handler = Mock(return_value={"statusCode": 200})

        with patch.dict("fbo_lambda.handlers.event_router.EVENT_HANDLERS", {event_type: handler}):
            response = dispatch_event(event, handler_context)

        assert response == {"statusCode": 200}
        handler.assert_called_once_with(event, handler_context)

    def test_unknown_event_raises(self, handler_context):
        with pytest.raises(LambdaError, match="Unsupported event type: unknown") as exc_info:
            dispatch_event({"foo": "bar"}, handler_context)

        assert exc_info.value.error_code == "UNSUPPORTED_EVENT"
        assert exc_info.value.status_code == 500

    def test_logs_event_type(self, handler_context, custom_event, read_logs):
        dispatch_event(custom_event, handler_context)

        records = read_logs()
        assert records[0]["message"] == "Processing event"
        assert records[0]["eventType"] == "custom"
