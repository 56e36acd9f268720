"""Activity discovery: ask Gemini for concrete options for a generic activity type.

Models are tried in order until one answers. Every attempt, successful or not,
is staged as an ai_call_logs row on the caller's session. A reply that is not
JSON with an ``options`` list counts as a failure of the whole call.
"""
import asyncio
import json
import logging
import re
import time
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any

import google.generativeai as genai
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.config import settings
from socialiser.models.audit import AICallLog

logger = logging.getLogger(__name__)

CALL_TYPE = "activity_discovery"

# ─── Errors ───


class MissingAPIKeyError(RuntimeError):
    """Neither the user nor the server has a Google API key configured."""


class DiscoveryError(RuntimeError):
    """No model produced a usable answer."""

    def __init__(self, details: str):
        super().__init__("Failed to generate activity suggestions")
        self.details = details


# ─── Prompt ───

_PROMPT = """
You are a helpful activity planning assistant.
Current Date: {today}

Given a generic activity type: "{activity_name}", suggest 4-5 specific, realistic options that people could actually do.

Context:
{context}

Please suggest specific, actionable activity options.
Respond with raw JSON only. Use this exact format:
{{
  "options": [
    {{
      "name": "Specific activity name",
      "description": "Brief description",
      "suggestedLocation": "Specific location suggestion",
      "suggestedTime": "YYYY-MM-DD at HH:MM (e.g. 2025-12-31 at 19:00)",
      "estimatedDuration": "Duration estimate",
      "reasoning": "Why this fits",
      "url": "URL to event or Google Search"
    }}
  ]
}}
"""

_FENCE_RE = re.compile(r"```json\s*|\s*```")


@dataclass
class DiscoveryQuery:
    activity_name: str
    location: str | None = None
    preferences: str | None = None
    date_start: str | None = None
    date_end: str | None = None


@dataclass
class ModelOptions:
    """Per-call model tuning taken from the caller's (admin-managed) preferences."""

    preferred_model: str | None = None
    system_prompt: str | None = None
    enable_google_search: bool = False


def build_prompt(query: DiscoveryQuery, today: date | None = None) -> str:
    context = []
    if query.location:
        context.append(f"Location: {query.location}")
    if query.preferences:
        context.append(f"Preferences: {query.preferences}")
    if query.date_start and query.date_end:
        context.append(f"Date Range: {query.date_start} to {query.date_end}")
    return _PROMPT.format(
        today=(today or date.today()).strftime("%a %b %d %Y"),
        activity_name=query.activity_name,
        context="\n".join(context),
    )


def parse_options(text: str) -> list[dict[str, Any]]:
    """Strip markdown fences and return the ``options`` list.

    Raises:
        DiscoveryError: the text is not JSON or has no options list.
    """
    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("parse_options: unparseable AI response: %.200s", cleaned)
        raise DiscoveryError("Failed to parse AI response as JSON")
    if not isinstance(parsed, dict) or not isinstance(parsed.get("options"), list):
        raise DiscoveryError("Invalid response format from AI")
    return parsed["options"]


def models_to_try(options: ModelOptions) -> list[str]:
    models = list(settings.ai_discovery_models_list)
    if options.preferred_model:
        models = [options.preferred_model] + [m for m in models if m != options.preferred_model]
    return models


# ─── Gemini call ───

def _call_gemini(model_name: str, prompt: str, options: ModelOptions) -> tuple[str, int | None, int | None]:
    """Blocking Gemini request. Returns (text, prompt_tokens, completion_tokens)."""
    kwargs: dict[str, Any] = {}
    if options.system_prompt:
        kwargs["system_instruction"] = options.system_prompt
    if options.enable_google_search:
        kwargs["tools"] = "google_search_retrieval"
    model = genai.GenerativeModel(model_name, **kwargs)
    response = model.generate_content(prompt)
    usage = getattr(response, "usage_metadata", None)
    return (
        response.text,
        getattr(usage, "prompt_token_count", None),
        getattr(usage, "candidates_token_count", None),
    )


def _log_ai_call(
    db: AsyncSession,
    user_id: uuid.UUID | None,
    model: str,
    latency_ms: int,
    status: str,
    prompt: str,
    response_text: str | None = None,
    error_message: str | None = None,
    prompt_tokens: int | None = None,
    completion_tokens: int | None = None,
) -> None:
    db.add(
        AICallLog(
            user_id=user_id,
            call_type=CALL_TYPE,
            model=model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency_ms,
            status=status,
            error_message=error_message,
            request_json=prompt[:500],
            response_json=response_text[:1000] if response_text else None,
        )
    )


# ─── Public API ───

async def discover_activities(
    db: AsyncSession,
    query: DiscoveryQuery,
    api_key: str,
    user_id: uuid.UUID | None = None,
    options: ModelOptions | None = None,
) -> list[dict[str, Any]]:
    """Return the options proposed by the first model that answers.

    Raises:
        MissingAPIKeyError: api_key is empty.
        DiscoveryError: every model failed, or the answer was not usable.
    """
    if not api_key:
        raise MissingAPIKeyError("Google API key is not configured")
    options = options or ModelOptions()

    # genai keeps the key in module state; set it for this call.
    genai.configure(api_key=api_key)
    prompt = build_prompt(query)

    text: str | None = None
    last_error = "All AI models failed"
    for model_name in models_to_try(options):
        start = time.monotonic()
        try:
            text, p_tokens, c_tokens = await asyncio.to_thread(_call_gemini, model_name, prompt, options)
        except Exception as exc:
            latency_ms = int((time.monotonic() - start) * 1000)
            logger.warning("discover_activities: model %s failed: %s", model_name, exc)
            _log_ai_call(db, user_id, model_name, latency_ms, "error", prompt, error_message=str(exc)[:1000])
            last_error = str(exc)
            continue

        latency_ms = int((time.monotonic() - start) * 1000)
        _log_ai_call(
            db, user_id, model_name, latency_ms, "success", prompt,
            response_text=text, prompt_tokens=p_tokens, completion_tokens=c_tokens,
        )
        logger.info("discover_activities: model=%s latency_ms=%d", model_name, latency_ms)
        break

    if text is None:
        raise DiscoveryError(last_error)
    return parse_options(text)
