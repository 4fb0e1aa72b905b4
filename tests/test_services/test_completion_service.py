"""Tests for the OpenRouter completion service"""
import asyncio

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from services.completion_service import (
    COMPLETION_MAX_TOKENS,
    COMPLETION_TEMPERATURE,
    SYSTEM_DIRECTIVE,
    CompletionService,
    build_messages,
    extract_text,
)

API_URL = "https://test.openrouter.ai/api/v1/chat/completions"


def chat_response(content):
    """模拟 chat/completions 响应对象"""
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    response.raise_for_status = MagicMock()
    return response


def status_error(status_code, body):
    request = httpx.Request("POST", API_URL)
    error_response = httpx.Response(status_code, json=body, request=request)
    response = MagicMock()
    response.status_code = status_code
    response.raise_for_status.side_effect = httpx.HTTPStatusError(
        f"HTTP {status_code}", request=request, response=error_response
    )
    return response


class TestHelpers:
    """测试请求构造与响应解析"""

    def test_build_messages(self):
        messages = build_messages("Generate 6 taglines", "Be brief")

        assert messages[0] == {"role": "system", "content": SYSTEM_DIRECTIVE}
        assert messages[1] == {"role": "user", "content": "Be brief\n\nGenerate 6 taglines"}

    def test_build_messages_without_instructions(self):
        assert build_messages("prompt")[1]["content"] == "\n\nprompt"

    def test_extract_text_legacy_field(self):
        assert extract_text({"choices": [{"text": "hello"}]}) == "hello"

    @pytest.mark.parametrize("data", [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": {"message": "x"}},
        {"choices": 5},
        {"choices": "text"},
        None,
        "oops",
    ])
    def test_extract_text_missing(self, data):
        assert extract_text(data) is None


class TestCompletionService:
    """测试补全服务"""

    @pytest.fixture
    def service(self):
        """创建测试服务实例"""
        return CompletionService(api_key="test_key", api_url=API_URL, model="test/model")

    @pytest.mark.asyncio
    async def test_structured_result(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.return_value = chat_response('{"ok":true,"taglines":["a","b"]}')

            result = await service.complete("Generate 2 taglines for brand: {}")

            assert result == {"ok": True, "taglines": ["a", "b"]}

            # 验证请求payload
            assert mock_post.call_args.args[0] == API_URL
            payload = mock_post.call_args.kwargs['json']
            assert payload['model'] == "test/model"
            assert payload['temperature'] == COMPLETION_TEMPERATURE
            assert payload['max_tokens'] == COMPLETION_MAX_TOKENS
            assert payload['messages'][0]['role'] == "system"
            assert payload['messages'][1]['content'].endswith("Generate 2 taglines for brand: {}")

    @pytest.mark.asyncio
    async def test_plain_text_fallback(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.return_value = chat_response("here are some taglines")

            result = await service.complete("taglines")

            assert result == {"ok": True, "raw": "here are some taglines"}

    @pytest.mark.asyncio
    async def test_empty_choices_is_error(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            response = chat_response(None)
            response.json.return_value = {"choices": []}
            mock_post.return_value = response

            result = await service.complete("x")

            assert result == {"ok": False, "error": "no response from model"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"choices": {"message": "x"}}, {"choices": 5}, ["not", "an", "object"]])
    async def test_malformed_body_is_error(self, service, body):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            response = chat_response(None)
            response.json.return_value = body
            mock_post.return_value = response

            result = await service.complete("x")

            assert result == {"ok": False, "error": "no response from model"}

    @pytest.mark.asyncio
    async def test_unexpected_client_error_is_contained(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = RuntimeError("Cannot send a request, as the client has been closed.")

            result = await service.complete("x")

            assert result == {"ok": False, "error": "Cannot send a request, as the client has been closed."}

    @pytest.mark.asyncio
    async def test_provider_error_payload_is_returned(self, service):
        body = {"error": {"message": "Rate limit exceeded", "code": 429}}
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.return_value = status_error(429, body)

            result = await service.complete("x")

            assert result == {"ok": False, "error": body}

    @pytest.mark.asyncio
    async def test_network_error_is_contained(self, service):
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("connection refused")

            result = await service.complete("x")

            assert result["ok"] is False
            assert "connection refused" in result["error"]

    @pytest.mark.asyncio
    async def test_unconfigured_makes_no_request(self):
        service = CompletionService(api_key="", api_url=API_URL)
        with patch.object(service.client, 'post', new_callable=AsyncMock) as mock_post:
            result = await service.complete("x")

            assert result["ok"] is False
            mock_post.assert_not_called()
        await service.close()

    @pytest.mark.asyncio
    async def test_concurrent_completions_are_independent(self, service):
        replies = {
            "first": '{"ok": true, "n": 1}',
            "second": "plain text",
        }

        async def fake_post(url, json=None):
            await asyncio.sleep(0)
            prompt = json['messages'][1]['content']
            key = "first" if prompt.endswith("first") else "second"
            return chat_response(replies[key])

        with patch.object(service.client, 'post', new=AsyncMock(side_effect=fake_post)):
            first, second = await asyncio.gather(service.complete("first"), service.complete("second"))

        assert first == {"ok": True, "n": 1}
        assert second == {"ok": True, "raw": "plain text"}

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self):
        async with CompletionService(api_key="k", api_url=API_URL) as service:
            client = service.client
        assert client.is_closed
