"""Logging utilities for backend services

Request bodies carry inline images (data URLs) and long prompts; these
helpers keep them readable in the logs.
"""
from typing import Any

_BASE64_CHARS = set('ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/=')


def truncate_base64(data: str, max_length: int = 50) -> str:
    """
    Truncate base64, data URLs or other long string data for logging

    Args:
        data: String data to truncate
        max_length: Maximum length before truncation

    Returns:
        Truncated string with size info
    """
    if not isinstance(data, str):
        return str(data)

    data_len = len(data)

    if data_len <= max_length:
        return data

    if data.startswith("data:"):
        header = data.split(",", 1)[0]
        return f"<{header} data URL: {data_len} chars>"

    is_base64_like = data_len > 100 and all(c in _BASE64_CHARS for c in data[:100])

    if is_base64_like:
        return f"<base64 data: {data_len} chars, preview: {data[:30]}...>"
    return f"{data[:max_length]}... ({data_len} chars)"


def sanitize_for_log(data: Any, max_length: int = 200) -> Any:
    """
    Copy a JSON-like structure with every long string truncated

    Args:
        data: dict, list or scalar
        max_length: Maximum length for string values

    Returns:
        Sanitized copy
    """
    if isinstance(data, dict):
        return {key: sanitize_for_log(value, max_length) for key, value in data.items()}
    if isinstance(data, list):
        return [sanitize_for_log(item, max_length) for item in data]
    if isinstance(data, str):
        return truncate_base64(data, max_length)
    return data
