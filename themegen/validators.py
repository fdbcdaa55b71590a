from __future__ import annotations

from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from themegen.llm_prompts import ROLE_NAMES

_COLOR_PATTERN = (
    r"^(#[0-9A-Fa-f]{6}"
    r"|rgba\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*(0|1|0?\.\d+|1\.0+)\s*\))$"
)

THEME_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["themeName", "colors"],
    "properties": {
        "id": {"type": "string"},
        "groupId": {"type": "string"},
        "themeName": {"type": "string", "minLength": 1, "pattern": r"\S"},
        "advice": {"type": "string"},
        "isDark": {"type": "boolean"},
        "colors": {
            "type": "object",
            "required": ["canvasBackground"],
            "properties": {name: {"type": "string", "pattern": _COLOR_PATTERN} for name in ROLE_NAMES},
            "additionalProperties": {"type": "string", "pattern": _COLOR_PATTERN},
        },
    },
}

_validator = Draft202012Validator(THEME_SCHEMA)


def collect_errors(theme: Any) -> List[Dict[str, str]]:
    """
    Return a list of {"path": "...", "message": "..."} error dicts, empty when
    `theme` matches the theme schema.
    """
    errors: List[Dict[str, str]] = []
    for err in sorted(_validator.iter_errors(theme), key=lambda e: ".".join(str(p) for p in e.path)):
        loc = ".".join(str(p) for p in err.path) or "(root)"
        errors.append({"path": loc, "message": err.message})
    return errors
