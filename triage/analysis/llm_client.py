"""
LLM access via the official OpenAI-compatible client (Groq by default). English-only.
Strict JSON mode, JSON extraction from fenced or embedded output, pydantic validation.
"""

import os
import re
from typing import NamedTuple, TypeVar

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from triage.logging_structured import log_llm_parse_failed

_client: OpenAI | None = None

LLM_API_KEY = (os.getenv("LLM_API_KEY") or os.getenv("GROQ_API_KEY") or "").strip()
LLM_API_BASE_URL = (os.getenv("LLM_API_BASE_URL") or "https://api.groq.com/openai/v1").rstrip("/")
LLM_FAST_MODEL = os.getenv("LLM_FAST_MODEL", "llama-3.1-8b-instant")
LLM_STRONG_MODEL = os.getenv("LLM_STRONG_MODEL", "llama-3.3-70b-versatile")
LLM_TIMEOUT_SEC = float(os.getenv("LLM_TIMEOUT_SEC", "20"))
LLM_MAX_TOKENS = 800


def is_llm_configured() -> bool:
    return bool(LLM_API_KEY)


def _get_client() -> OpenAI:
    global _client
    if _client is None:
        if not LLM_API_KEY:
            raise ValueError("LLM_API_KEY (or GROQ_API_KEY) is required. Set it in the environment or .env.")
        _client = OpenAI(api_key=LLM_API_KEY, base_url=LLM_API_BASE_URL)
    return _client


class LlmReply(NamedTuple):
    text: str
    model: str
    tokens_used: int | None


def invoke_llm(
    messages: list[dict],
    system_prompt: str | None = None,
    *,
    model: str | None = None,
    temperature: float = 0.2,
    response_format: dict | None = None,
    timeout_sec: float | None = None,
) -> LlmReply:
    """
    Call the chat completions API. Returns the assistant text, the model used and total tokens.
    messages: list of {"role": "user"|"assistant", "content": "..."}
    """
    client = _get_client()
    full_messages: list[dict] = []
    if system_prompt:
        full_messages.append({"role": "system", "content": system_prompt})
    full_messages.extend({"role": m.get("role", "user"), "content": str(m.get("content", ""))} for m in messages)

    model = model or LLM_FAST_MODEL
    kwargs: dict = {
        "model": model,
        "messages": full_messages,
        "temperature": temperature,
        "max_tokens": LLM_MAX_TOKENS,
        "timeout": timeout_sec if timeout_sec is not None else LLM_TIMEOUT_SEC,
    }
    if response_format is not None:
        kwargs["response_format"] = response_format
    try:
        response = client.chat.completions.create(**kwargs)
    except Exception as e:
        # Retry without response_format when the provider rejects it (e.g. 400)
        if response_format is not None and "response_format" in str(e).lower():
            kwargs.pop("response_format", None)
            response = client.chat.completions.create(**kwargs)
        else:
            raise
    content = response.choices[0].message.content if response.choices else None
    tokens = response.usage.total_tokens if response.usage is not None else None
    return LlmReply((content or "").strip(), model, tokens)


def extract_json_from_text(text: str) -> str:
    """
    Extract a JSON string from model output: strip whitespace, strip code fences,
    or take substring from first "{" to last "}".
    """
    text = (text or "").strip()
    if not text:
        return ""

    code_block = re.search(r"```(?:json)?\s*\n?(.*?)```", text, re.DOTALL | re.IGNORECASE)
    if code_block:
        return code_block.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end >= start:
        return text[start : end + 1]

    return text


T = TypeVar("T", bound=BaseModel)


def parse_llm_json(text: str, response_model: type[T]) -> T:
    """Extract and validate. Raises ValueError when nothing usable is found."""
    cleaned = extract_json_from_text(text)
    if not cleaned:
        raise ValueError("No JSON extracted from response")
    try:
        return response_model.model_validate_json(cleaned)
    except ValidationError as e:
        log_llm_parse_failed(response_snippet=cleaned[:500])
        raise ValueError(f"LLM response did not match schema: {e}") from e
