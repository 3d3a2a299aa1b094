"""Thin wrapper around the Anthropic client: one prompt in, text or JSON out."""
from __future__ import annotations

import json
import logging
from typing import Optional

import anthropic

from server.config import ANTHROPIC_API_KEY, ANTHROPIC_MODEL, AI_MAX_TOKENS, AI_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class AIUnavailableError(RuntimeError):
    """No API key configured."""


class AIResponseError(RuntimeError):
    """The model answered with something we could not parse or validate."""


def get_client() -> anthropic.Anthropic:
    if not ANTHROPIC_API_KEY:
        raise AIUnavailableError("ANTHROPIC_API_KEY is not set")
    return anthropic.Anthropic(api_key=ANTHROPIC_API_KEY, timeout=AI_TIMEOUT_SECONDS)


def complete(prompt: str, *, system: Optional[str] = None, max_tokens: int = AI_MAX_TOKENS) -> str:
    """Send a single user message and return the stripped text of the reply."""
    client = get_client()
    kwargs = {
        "model": ANTHROPIC_MODEL,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }
    if system:
        kwargs["system"] = system

    logger.debug("calling %s, prompt length %d chars", ANTHROPIC_MODEL, len(prompt))
    message = client.messages.create(**kwargs)
    return message.content[0].text.strip()


def parse_json_response(raw: str, expect: str = "object"):
    """Strip markdown fences and preamble, then json-decode.

    `expect` is "object" or "array" and decides which brackets bound the
    payload. Raises AIResponseError if no valid JSON is left.
    """
    text = raw.strip()
    if text.startswith("```"):
        # Opening fence may carry a language tag (```json)
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        text = text.rsplit("```", 1)[0]

    opener, closer = ("{", "}") if expect == "object" else ("[", "]")
    first = text.find(opener)
    last = text.rfind(closer)
    if first == -1 or last <= first:
        raise AIResponseError(f"No JSON {expect} found in AI response")

    try:
        return json.loads(text[first: last + 1])
    except json.JSONDecodeError as exc:
        logger.warning("JSON parse failed: %s; raw: %s", exc, raw[:500])
        raise AIResponseError("AI returned malformed JSON") from exc
