# -*- coding: utf-8 -*-
"""Suggestions — Gemini text generation gateway.

The reply is advisory and untyped: a JSON object/array when the model
returns one (optionally inside a markdown code fence), otherwise the raw
text. Callers must not assume any particular JSON shape.

This module never touches the database; call it outside any transaction.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Union

import httpx

from ..config import settings
from ..errors import ValidationError
from .models import SuggestionKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeminiSettings:
    api_key: str | None
    base_url: str
    model: str
    timeout: float
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class Structured:
    data: Any


@dataclass(frozen=True)
class Raw:
    text: str


@dataclass(frozen=True)
class Failed:
    error: str


SuggestionResult = Union[Structured, Raw, Failed]


_ROLES = {
    SuggestionKind.food: (
        "You are a nutritionist. Review the user's recently logged food and suggest improvements, "
        "healthier alternatives, and what to eat next."
    ),
    SuggestionKind.exercise: (
        "You are a fitness trainer. Suggest the next exercises, a short workout plan, "
        "progress tips and recovery advice suited to the user's level and time."
    ),
    SuggestionKind.diet_plan: (
        "You are a nutrition expert. Create a personalized diet plan with daily meals, "
        "a shopping list and practical tips."
    ),
    SuggestionKind.products: (
        "You are a fitness and health product expert. Recommend products that fit the user's "
        "goals, activity and budget."
    ),
}


def resolve_gemini_settings() -> GeminiSettings:
    return GeminiSettings(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url.rstrip("/"),
        model=settings.gemini_model,
        timeout=settings.gemini_timeout,
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_tokens,
    )


def parse_kind(kind: str) -> SuggestionKind:
    try:
        return SuggestionKind((kind or "").strip())
    except ValueError as exc:
        raise ValidationError("Invalid suggestion type") from exc


def build_prompt(kind: SuggestionKind, context: Dict[str, Any], profile: Dict[str, Any]) -> str:
    return (
        f"{_ROLES[kind]}\n\n"
        f"User profile (JSON):\n{json.dumps(profile or {}, ensure_ascii=False, default=str)}\n\n"
        f"Context (JSON):\n{json.dumps(context or {}, ensure_ascii=False, default=str)}\n\n"
        "Respond with a single JSON object only. Be encouraging and specific."
    )


def strip_code_fence(text: str) -> str:
    cleaned = (text or "").strip()
    cleaned = re.sub(r"^```[a-zA-Z0-9_-]*\s*", "", cleaned)
    cleaned = re.sub(r"\s*```$", "", cleaned)
    return cleaned.strip()


def parse_reply(text: str) -> SuggestionResult:
    try:
        return Structured(json.loads(strip_code_fence(text)))
    except ValueError as exc:
        logger.warning("suggestion reply is not JSON, returning raw text: %s", exc)
        return Raw(text or "")


def _extract_text(data: object) -> str:
    """Concatenate text parts of the first Gemini candidate."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))


def generate_text(prompt: str, cfg: GeminiSettings | None = None) -> str:
    cfg = cfg or resolve_gemini_settings()
    if not cfg.api_key:
        raise RuntimeError("GEMINI_API_KEY not set")

    url = f"{cfg.base_url}/models/{cfg.model}:generateContent"
    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": cfg.temperature,
            "maxOutputTokens": cfg.max_tokens,
        },
    }
    with httpx.Client(timeout=cfg.timeout) as client:
        resp = client.post(url, params={"key": cfg.api_key}, json=payload)
        resp.raise_for_status()
        data = resp.json()

    text = _extract_text(data)
    if not text:
        raise RuntimeError("Gemini returned no text")
    return text


def request_suggestion(kind: str, context: Dict[str, Any], profile: Dict[str, Any]) -> SuggestionResult:
    parsed_kind = parse_kind(kind)
    prompt = build_prompt(parsed_kind, context, profile)
    try:
        text = generate_text(prompt)
    except (httpx.HTTPError, RuntimeError, ValueError) as exc:
        logger.error("suggestion request failed kind=%s: %s", parsed_kind.value, exc, exc_info=True)
        return Failed(str(exc))
    return parse_reply(text)
