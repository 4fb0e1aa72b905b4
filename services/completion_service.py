"""Text-completion client with a single-JSON-object output contract

`complete` never raises: transport failures, empty answers and non-JSON
answers all come back as result dicts (see services.response_normalizer).
"""
import httpx
import logging
from typing import Any, Dict, List, Optional

from config.settings import Settings, settings as default_settings
from services.errors import CompletionTransportError, response_payload
from services.response_normalizer import classify, error_result, normalize

PROVIDER = "openrouter"

# Sampling parameters are fixed for every completion
COMPLETION_TEMPERATURE = 0.7
COMPLETION_MAX_TOKENS = 900

SYSTEM_DIRECTIVE = (
    "You are a backend assistant that transforms marketing form input into a structured JSON response. "
    "IMPORTANT: Return exactly one JSON object and nothing else (no backticks, no extra text). "
    "If asked to generate content, include fields described in the prompt. "
    "If no output is possible, return { \"ok\": false, \"error\": \"reason\" }."
)


def build_messages(user_prompt: str, instructions: str = "") -> List[Dict[str, str]]:
    """System directive plus one user message: instructions, blank line, prompt"""
    return [
        {"role": "system", "content": SYSTEM_DIRECTIVE},
        {"role": "user", "content": f"{instructions or ''}\n\n{user_prompt}"},
    ]


def extract_text(data: Any) -> Optional[str]:
    """First choice's message content, falling back to the legacy `text` field"""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None

    choice = choices[0]
    message = choice.get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if content is None:
        content = choice.get("text")
    return content if isinstance(content, str) else None


class CompletionService:
    """OpenRouter API服务封装 - 表单输入 -> 单个JSON对象"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        config: Optional[Settings] = None
    ):
        """
        初始化服务

        Args:
            api_key: API密钥
            api_url: Full chat/completions URL (OpenAI compatible)
            model: 模型名称
            config: Settings instance to read defaults from
        """
        config = config or default_settings
        self.api_key = api_key if api_key is not None else config.openrouter_api_key
        self.api_url = api_url or config.openrouter_api_url
        self.model = model or config.openrouter_model
        self.logger = logging.getLogger(__name__)

        # No timeout for LLM requests - callers impose their own
        self.client = httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            timeout=None
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def close(self):
        """关闭客户端"""
        await self.client.aclose()

    async def _post_chat(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        """One chat/completions round trip

        Raises:
            CompletionTransportError: network error, non-success status or a
                body that is not JSON
        """
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": COMPLETION_TEMPERATURE,
            "max_tokens": COMPLETION_MAX_TOKENS,
        }

        self.logger.debug(f"Calling LLM with model: {self.model}")

        try:
            response = await self.client.post(self.api_url, json=payload)
            self.logger.debug(f"Response status: {response.status_code}")
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = response_payload(e.response)
            raise CompletionTransportError(
                f"HTTP {e.response.status_code}",
                provider=PROVIDER,
                status_code=e.response.status_code,
                provider_response=body
            ) from e
        except httpx.HTTPError as e:
            raise CompletionTransportError(str(e) or type(e).__name__, provider=PROVIDER) from e

        try:
            return response.json()
        except ValueError as e:
            raise CompletionTransportError(
                "Invalid JSON response from completion provider",
                provider=PROVIDER,
                status_code=response.status_code,
                provider_response=response.text
            ) from e

    async def complete(self, user_prompt: str, instructions: str = "") -> Dict[str, Any]:
        """
        调用LLM并返回标准化结果

        Args:
            user_prompt: Prompt built from the form input
            instructions: Extra instructions placed before the prompt

        Returns:
            The model's JSON object, {"ok": True, "raw": text} when the model
            ignored the JSON contract, or {"ok": False, "error": reason}
        """
        if not self.is_configured:
            self.logger.warning("OPENROUTER_API_KEY is not configured")
            return error_result("OPENROUTER_API_KEY is not configured")

        messages = build_messages(user_prompt, instructions)

        try:
            data = await self._post_chat(messages)
            text = extract_text(data)
        except CompletionTransportError as e:
            diagnostic = e.provider_response or e.message
            self.logger.error(f"OpenRouter error: {diagnostic}")
            return error_result(diagnostic)
        except Exception as e:
            self.logger.exception(f"Unexpected completion failure: {e}")
            return error_result(str(e) or type(e).__name__)

        result = normalize(text)
        self.logger.info(f"LLM response normalized | kind={classify(result).value}")
        return result

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
