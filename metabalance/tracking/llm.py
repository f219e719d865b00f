"""OpenAI-compatible chat-completions client (x.ai Grok by default)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from metabalance.config import settings

logger = logging.getLogger(__name__)

EMPTY_REPLY = "I apologize, but I couldn't generate a response."


class LLMError(RuntimeError):
    """The model could not be reached or returned an error."""


def message(role: str, content: str) -> dict[str, str]:
    return {"role": role, "content": content}


async def chat_completion(
    messages: list[dict[str, str]],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Send ``messages`` and return the first choice's text.

    Raises LLMError when no key is configured or the call fails.
    """
    if not settings.llm_api_key:
        raise LLMError("LLM API key not configured")

    url = f"{settings.llm_base_url.rstrip('/')}/chat/completions"
    payload: dict[str, Any] = {
        "model": settings.llm_model,
        "messages": messages,
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
    }
    headers = {"Authorization": f"Bearer {settings.llm_api_key}"}

    try:
        async with httpx.AsyncClient(timeout=settings.llm_timeout_s, transport=transport) as client:
            resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("LLM request failed: %s", exc)
        raise LLMError("Failed to get response from AI") from exc

    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return EMPTY_REPLY
    msg = choices[0].get("message")
    content = msg.get("content") if isinstance(msg, dict) else None
    return content if isinstance(content, str) and content else EMPTY_REPLY
