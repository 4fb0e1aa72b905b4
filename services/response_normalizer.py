"""Normalization of text-completion output into result objects

A completion result is always a JSON-serializable dict, and exactly one of
these shapes:

- structured: the JSON object the model returned, verbatim
- fallback:   {"ok": True, "raw": <text>} when the text is not a JSON object
- error:      {"ok": False, "error": <reason>}
"""
import json
from enum import Enum
from typing import Any, Dict, Optional

NO_RESPONSE_ERROR = "no response from model"


class ResultKind(str, Enum):
    """Which branch of a completion result is populated"""
    STRUCTURED = "structured"
    FALLBACK = "fallback"
    ERROR = "error"


def error_result(reason: Any) -> Dict[str, Any]:
    return {"ok": False, "error": reason}


def fallback_result(text: str) -> Dict[str, Any]:
    return {"ok": True, "raw": text}


def _reject_constant(token: str):
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"invalid JSON constant: {token}")


def normalize(raw_text: Optional[str]) -> Dict[str, Any]:
    """
    把模型返回的原始文本转换为结果对象

    Args:
        raw_text: Text content of the first completion choice, or None

    Returns:
        The parsed JSON object unchanged, a fallback object carrying the raw
        text, or an error object when there was no text at all. Never raises.
    """
    if not raw_text:
        return error_result(NO_RESPONSE_ERROR)

    try:
        parsed = json.loads(raw_text, parse_constant=_reject_constant)
    except (TypeError, ValueError):
        return fallback_result(raw_text)

    # Only a single JSON object counts as structured output
    if not isinstance(parsed, dict):
        return fallback_result(raw_text)

    return parsed


def classify(result: Dict[str, Any]) -> ResultKind:
    """Tell which branch a normalized result belongs to"""
    keys = set(result)
    if keys == {"ok", "raw"} and result["ok"] is True and isinstance(result["raw"], str):
        return ResultKind.FALLBACK
    if keys == {"ok", "error"} and result["ok"] is False:
        return ResultKind.ERROR
    return ResultKind.STRUCTURED
