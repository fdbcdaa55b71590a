from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from themegen.colors import is_dark_background
from themegen.errors import ParseError, ValidationError

# Optional language tag right after the opening fence, e.g. ```json
_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*\s*([\s\S]*?)```")

BACKGROUND_ROLES = ("canvasBackground", "background")


def extract_json_object(text: Any) -> Dict[str, Any]:
    """Pull the JSON object out of a completion, tolerating fences and prose.

    Strategy:
    - If a ``` fence (optionally language-tagged) is present, only its interior is considered.
    - Take the span from the first '{' to the last '}' of that candidate.
    - json.loads the span. No further repair: a syntax error inside the span is a real failure.
    """
    if not isinstance(text, str):
        raise ParseError("no text to parse")
    m = _FENCE_RE.search(text)
    candidate = m.group(1) if m else text
    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ParseError("no JSON object found")
    try:
        doc = json.loads(candidate[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise ParseError("no JSON object found")
    return doc


def _background_of(theme: Dict[str, Any]) -> Optional[Any]:
    colors = theme.get("colors")
    if isinstance(colors, dict):
        for role in BACKGROUND_ROLES:
            if colors.get(role) is not None:
                return colors[role]
    return theme.get("background")


def normalize_theme(theme: Any) -> Dict[str, Any]:
    """Guarantee a boolean `isDark` and a usable background; mutates and returns `theme`.

    An explicit boolean `isDark` wins. Anything else (missing, null, "yes", 1)
    is re-derived from the background luminance, defaulting to light.
    """
    if not isinstance(theme, dict):
        raise ValidationError("theme must be a JSON object")
    colors = theme.get("colors")
    if not isinstance(colors, dict) or not colors:
        raise ValidationError("missing colors")
    if not any(colors.get(role) for role in BACKGROUND_ROLES):
        raise ValidationError("missing colors.canvasBackground")

    is_dark = theme.get("isDark")
    if isinstance(is_dark, bool):
        theme["isDark"] = bool(is_dark)
    else:
        bg = _background_of(theme)
        theme["isDark"] = is_dark_background(bg) if bg is not None else False
    return theme
