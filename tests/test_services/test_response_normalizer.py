"""Tests for completion output normalization"""
import json

import pytest

from services.response_normalizer import (
    NO_RESPONSE_ERROR,
    ResultKind,
    classify,
    error_result,
    fallback_result,
    normalize,
)


class TestNormalize:
    """测试结果标准化"""

    def test_json_object_returned_verbatim(self):
        text = '{"ok":true,"taglines":["Fast","Fresh"]}'

        result = normalize(text)

        assert result == {"ok": True, "taglines": ["Fast", "Fresh"]}
        assert classify(result) == ResultKind.STRUCTURED

    def test_model_error_object_is_relayed(self):
        result = normalize('{"ok": false, "error": "not enough input"}')

        assert result == {"ok": False, "error": "not enough input"}

    def test_plain_text_becomes_fallback(self):
        text = "Here are some taglines: ..."

        result = normalize(text)

        assert result == {"ok": True, "raw": text}
        assert classify(result) == ResultKind.FALLBACK

    def test_fenced_json_is_not_unwrapped(self):
        text = '```json\n{"ok": true}\n```'

        assert normalize(text) == {"ok": True, "raw": text}

    @pytest.mark.parametrize("text", ["[1, 2, 3]", "42", '"just a string"', "null"])
    def test_non_object_json_becomes_fallback(self, text):
        assert normalize(text) == {"ok": True, "raw": text}

    @pytest.mark.parametrize("text", ['{"score": NaN}', '{"score": Infinity}', '{"score": -Infinity}'])
    def test_non_standard_constants_become_fallback(self, text):
        result = normalize(text)

        assert result == {"ok": True, "raw": text}
        assert classify(result) == ResultKind.FALLBACK

    def test_whitespace_only_becomes_fallback(self):
        assert normalize("   ") == {"ok": True, "raw": "   "}

    @pytest.mark.parametrize("text", [None, ""])
    def test_missing_text_is_error(self, text):
        result = normalize(text)

        assert result == {"ok": False, "error": NO_RESPONSE_ERROR}
        assert classify(result) == ResultKind.ERROR

    @pytest.mark.parametrize("text", ['{"a": {"b": [1, 2]}}', "hello", None])
    def test_stable_on_serialized_output(self, text):
        result = normalize(text)

        assert normalize(json.dumps(result)) == result


class TestClassify:
    """测试结果分类"""

    def test_helpers_match_classification(self):
        assert classify(error_result("boom")) == ResultKind.ERROR
        assert classify(fallback_result("text")) == ResultKind.FALLBACK

    def test_structured_object_with_extra_keys(self):
        assert classify({"ok": True, "raw": "x", "subject": "Hi"}) == ResultKind.STRUCTURED

    def test_error_with_provider_payload(self):
        assert classify(error_result({"error": {"message": "rate limited"}})) == ResultKind.ERROR
