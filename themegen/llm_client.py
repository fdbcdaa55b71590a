from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import requests

from themegen.errors import CompletionError

log = logging.getLogger(__name__)

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "").strip()
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip()
GEMINI_ENDPOINT_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

# OpenAI-compatible provider, used when no Gemini key is set
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "").strip()
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "google/gemini-2.5-flash").strip()
OPENROUTER_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"

try:
    LLM_TIMEOUT_SECS = int(os.getenv("LLM_TIMEOUT_SECS", "60"))
except ValueError:
    LLM_TIMEOUT_SECS = 60
try:
    TEMPERATURE = float(os.getenv("TEMPERATURE", "1.0"))
except ValueError:
    TEMPERATURE = 1.0


def status() -> Dict[str, Any]:
    if GEMINI_API_KEY:
        return {"provider": "gemini", "model": GEMINI_MODEL, "has_token": True}
    if OPENROUTER_API_KEY:
        return {"provider": "openrouter", "model": OPENROUTER_MODEL, "has_token": True}
    return {"provider": None, "model": None, "has_token": False}


def _provider() -> Optional[str]:
    if GEMINI_API_KEY:
        return "gemini"
    if OPENROUTER_API_KEY:
        return "openrouter"
    return None


def complete(system_prompt: str, user_prompt: str) -> str:
    """Send one prompt pair to the configured provider and return its raw text.

    Exactly one outbound request per call. Failures raise CompletionError;
    retrying is up to the caller.
    """
    provider = _provider()
    if provider is None:
        raise CompletionError("Missing LLM credentials")
    log.debug("llm provider=%s", provider)
    if provider == "gemini":
        text = _call_gemini(system_prompt, user_prompt)
    else:
        text = _call_openrouter(system_prompt, user_prompt)
    if not text:
        raise CompletionError("Completion service returned no usable response")
    log.info("llm provider=%s chars=%d", provider, len(text))
    return text


def _extract_gemini_text(payload: Dict[str, Any]) -> Optional[str]:
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts = [p.get("text") for p in parts if isinstance(p, dict) and p.get("text")]
    if not texts:
        return None
    return "\n".join(texts)


def _call_gemini(system_prompt: str, user_prompt: str) -> Optional[str]:
    body = {
        "contents": [{"parts": [{"text": user_prompt}]}],
        "systemInstruction": {"parts": [{"text": system_prompt}]},
        "generationConfig": {
            "temperature": TEMPERATURE,
            "responseMimeType": "application/json",
        },
    }
    try:
        resp = requests.post(
            GEMINI_ENDPOINT_TEMPLATE.format(model=GEMINI_MODEL),
            params={"key": GEMINI_API_KEY},
            json=body,
            timeout=LLM_TIMEOUT_SECS,
        )
    except requests.RequestException as exc:
        log.warning("Gemini request error: %r", exc)
        return None
    if resp.status_code != 200:
        log.warning("Gemini HTTP %s: %s", resp.status_code, (resp.text or "")[:400])
        return None
    try:
        payload = resp.json()
    except ValueError:
        log.warning("Gemini: non-JSON body")
        return None
    text = _extract_gemini_text(payload) if isinstance(payload, dict) else None
    if not text:
        log.warning("Gemini: empty response text")
    return text


def _call_openrouter(system_prompt: str, user_prompt: str) -> Optional[str]:
    headers = {
        "Authorization": f"Bearer {OPENROUTER_API_KEY}",
        "Content-Type": "application/json",
        "X-Title": "theme-generator",
    }
    body: Dict[str, Any] = {
        "model": OPENROUTER_MODEL,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": TEMPERATURE,
        "response_format": {"type": "json_object"},
    }
    try:
        resp = requests.post(OPENROUTER_ENDPOINT, headers=headers, json=body, timeout=LLM_TIMEOUT_SECS)
    except requests.RequestException as exc:
        log.warning("OpenRouter request error: %r", exc)
        return None
    if resp.status_code != 200:
        log.warning("OpenRouter HTTP %s: %s", resp.status_code, (resp.text or "")[:400])
        return None
    try:
        data = resp.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError):
        log.warning("OpenRouter: unexpected response shape")
        return None
    if not isinstance(content, str) or not content.strip():
        log.warning("OpenRouter: empty response text")
        return None
    return content
