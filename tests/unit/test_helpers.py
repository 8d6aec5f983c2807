"""
Unit tests for shared helpers.
"""

import pytest

from fbo_lambda.utils.helpers import (
    format_bytes,
    get_error_message,
    is_valid_url,
    safe_json_loads,
    sanitize_file_name,
    truncate_string,
)


class TestSafeJsonLoads:
    def test_valid_json(self):
        assert safe_json_loads('{"a": 1}') == {"a": 1}

    @pytest.mark.parametrize("payload", [None, "", "{not json", "[1, 2"])
    def test_invalid_or_empty(self, payload):
        assert safe_json_loads(payload) is None


class TestGetErrorMessage:
    def test_exception(self):
        assert get_error_message(ValueError("bad")) == "bad"

    def test_exception_without_message(self):
        assert get_error_message(KeyError()) == "KeyError"

    def test_string(self):
        assert get_error_message("plain") == "plain"

    def test_other(self):
        assert get_error_message({"code": 1}) == "Unknown error occurred"


class TestSanitizeFileName:
    @pytest.mark.parametrize(
        "file_name,expected",
        [
            ("report 2024.csv", "report_2024.csv"),
            ("a//b\\c.txt", "a_b_c.txt"),
            ("__dispersión__.xlsx", "dispersi_n_.xlsx"),
            ("safe-name.csv", "safe-name.csv"),
        ],
    )
    def test_sanitize(self, file_name, expected):
        assert sanitize_file_name(file_name) == expected


class TestFormatBytes:
    @pytest.mark.parametrize(
        "num_bytes,expected",
        [
            (0, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (50 * 1024 * 1024, "50 MB"),
            (3 * 1024 ** 3, "3 GB"),
        ],
    )
    def test_format(self, num_bytes, expected):
        assert format_bytes(num_bytes) == expected

    def test_decimals(self):
        assert format_bytes(1234, decimals=0) == "1 KB"


class TestIsValidUrl:
    @pytest.mark.parametrize("value", ["https://finance.example.com", "http://localhost:8080/api"])
    def test_valid(self, value):
        assert is_valid_url(value) is True

    @pytest.mark.parametrize("value", ["", "finance.example.com", "/relative/path", "https://"])
    def test_invalid(self, value):
        assert is_valid_url(value) is False


class TestTruncateString:
    def test_short_string_untouched(self):
        assert truncate_string("short", 10) == "short"

    def test_truncated_with_ellipsis(self):
        result = truncate_string("abcdefghijkl", 8)

        assert result == "abcde..."
        assert len(result) == 8
