"""
Shared LLM invocation utilities for text generation.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any, Optional, Sequence

from google import genai
from google.genai.types import Content, GenerateContentConfig, Part

from planflow.core.config import get_settings
from planflow.core.logger import logger
from planflow.interfaces.llm_provider import ILLMProvider
from planflow.models.project import ChatAttachment

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def _attachment_parts(attachments: Sequence[ChatAttachment]) -> list[Part]:
    parts: list[Part] = []
    for attachment in attachments:
        try:
            data = base64.b64decode(attachment.data, validate=True)
        except (binascii.Error, ValueError):
            logger.warning(f"Skipping undecodable attachment ({attachment.mime_type})")
            continue
        parts.append(Part.from_bytes(data=data, mime_type=attachment.mime_type))
    return parts


def generate_text(
    llm_provider: ILLMProvider,
    prompt: str | Sequence[str],
    temperature: float = 0.2,
    max_output_tokens: int = 2048,
    response_schema: Optional[dict] = None,
    response_mime_type: Optional[str] = None,
    system_instruction: Optional[str] = None,
    attachments: Sequence[ChatAttachment] = (),
) -> Optional[str]:
    """
    Generate text from the configured LLM provider.

    `prompt` may be a single string or several text parts sent in order
    (attachments go right before the last part).

    Returns None when the provider is unavailable or the call fails.
    """
    texts = [prompt] if isinstance(prompt, str) else list(prompt)
    if not any(texts):
        return None

    if not llm_provider.is_available():
        return None

    config_kwargs: dict = {
        "temperature": temperature,
        "max_output_tokens": max_output_tokens,
    }
    if response_schema:
        config_kwargs["response_schema"] = response_schema
    if response_mime_type:
        config_kwargs["response_mime_type"] = response_mime_type
    if system_instruction:
        config_kwargs["system_instruction"] = system_instruction

    parts = [Part(text=text) for text in texts[:-1]]
    parts.extend(_attachment_parts(attachments))
    parts.append(Part(text=texts[-1]))

    try:
        client = genai.Client(api_key=get_settings().GOOGLE_API_KEY)
        response = client.models.generate_content(
            model=llm_provider.get_model(),
            contents=[Content(role="user", parts=parts)],
            config=GenerateContentConfig(**config_kwargs),
        )
        text = (response.text or "").strip()
        return text or None
    except Exception as exc:
        logger.warning(f"GenAI request to {llm_provider.get_model_name()} failed: {exc}")
    return None


def extract_json_block(text: str) -> Optional[Any]:
    """
    Pull a JSON value out of model output.

    Prefers the first fenced code block; otherwise tries the span from the
    first "{" to the last "}". Returns None when nothing parses.
    """
    match = _FENCED_JSON.search(text)
    if match:
        try:
            return json.loads(match.group(1))
        except ValueError:
            logger.warning("Failed to parse fenced JSON from model output")
            return None

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start:end + 1])
        except ValueError:
            return None
    return None


def strip_json_blocks(text: str) -> str:
    """Remove fenced code blocks so raw JSON is not shown in chat."""
    return _FENCED_JSON.sub("", text).strip()


def parse_json(text: Optional[str], default: Any) -> Any:
    """json.loads with a fallback for empty or invalid output."""
    if not text:
        return default
    try:
        return json.loads(text)
    except ValueError:
        logger.warning("Model returned invalid JSON")
        return default
