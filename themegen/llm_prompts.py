from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

COLOR_ROLES: Tuple[Tuple[str, str], ...] = (
    ("primaryHeader", "Main background for key sections such as the hero banner; clearly distinct from canvasBackground and surfaceBackground."),
    ("secondaryHeader", "Secondary header colour for gradients or accents; must blend nicely with primaryHeader."),
    ("headerText", "Main text colour on top of the headers."),
    ("subHeaderText", "Less prominent text on headers, for subtitles."),
    ("canvasBackground", "Base background colour for the whole application."),
    ("surfaceBackground", "Background for elements that sit on the canvas, like cards or panels."),
    ("primaryText", "Main text colour on canvas and surface backgrounds."),
    ("secondaryText", "Less prominent text for details or captions."),
    ("accent", "Vibrant attention colour for links or highlights."),
    ("outlineSeparators", "Borders, outlines and dividing lines."),
    ("primaryInteractive", "Background of main call-to-action buttons (e.g. \"Submit\")."),
    ("primaryInteractiveText", "Text on top of a primary interactive element."),
    ("secondaryInteractive", "Background of secondary buttons (e.g. \"Cancel\")."),
    ("secondaryInteractiveText", "Text on top of a secondary interactive element."),
)

ROLE_NAMES: List[str] = [name for name, _ in COLOR_ROLES]

# (foreground, background, minimum ratio)
CONTRAST_TARGETS: Tuple[Tuple[str, str, float], ...] = (
    ("headerText", "primaryHeader", 4.5),
    ("primaryText", "surfaceBackground", 4.5),
    ("primaryInteractiveText", "primaryInteractive", 4.5),
    ("subHeaderText", "primaryHeader", 3.0),
    ("secondaryText", "surfaceBackground", 3.0),
    ("secondaryInteractiveText", "secondaryInteractive", 3.0),
)

INVALID_INPUT_THEME: Dict[str, Any] = {
    "themeName": "Invalid Input \U0001F6AB",
    "advice": "The provided input was inappropriate or offensive. Please provide a respectful and valid request for a color theme.",
    "isDark": True,
    "colors": {
        "primaryHeader": "#200000",
        "secondaryHeader": "#300000",
        "headerText": "#FFFFFF",
        "subHeaderText": "#FFCC00",
        "canvasBackground": "#220000",
        "surfaceBackground": "#2A0000",
        "primaryText": "#E0E0E0",
        "secondaryText": "#B0B0B0",
        "accent": "#CC0000",
        "outlineSeparators": "#500000",
        "primaryInteractive": "#CC0000",
        "primaryInteractiveText": "#000000",
        "secondaryInteractive": "#660000",
        "secondaryInteractiveText": "#FFDD00",
    },
}

ILLEGIBLE_THEME: Dict[str, Any] = {
    "themeName": "Illegible Theme \U0001F32B️",
    "advice": "A fallback theme generated because the input was unclear. Muted, low-energy colours that meet accessibility targets but feel deliberately indistinct. Try again with a clear, descriptive prompt like 'a vibrant retro arcade' or 'a calm, snowy morning'.",
    "colors": {
        "primaryHeader": "#BCC6CC",
        "secondaryHeader": "#C5D1D9",
        "headerText": "#2F4F4F",
        "subHeaderText": "#708090",
        "canvasBackground": "#F0F0F0",
        "surfaceBackground": "#F5F5F5",
        "primaryText": "#696969",
        "secondaryText": "#808080",
        "accent": "#5F9EA0",
        "outlineSeparators": "#DCDCDC",
        "primaryInteractive": "#5F9EA0",
        "primaryInteractiveText": "#FFFFFF",
        "secondaryInteractive": "#DCDCDC",
        "secondaryInteractiveText": "#2F4F4F",
    },
}


def _shape_section() -> str:
    keys = ", ".join(f'"{name}"' for name in ROLE_NAMES)
    roles = "\n".join(f"- {name}: {desc}" for name, desc in COLOR_ROLES)
    contrast = "\n".join(
        f"- {fg} on {bg}: ratio >= {ratio:g}:1" for fg, bg, ratio in CONTRAST_TARGETS
    )
    return (
        "REQUIREMENTS:\n"
        '- The root object must contain the keys "themeName", "advice", "isDark" and "colors".\n'
        f"- \"colors\" must contain EXACTLY these {len(ROLE_NAMES)} keys, in this order: {keys}.\n"
        "- Every colour is a #RRGGBB hex string.\n"
        "- \"isDark\" is true when canvasBackground is dark, false otherwise.\n\n"
        "THEME NAME:\n"
        "- Be creative; emojis, emoticons and special characters are allowed.\n"
        "- Shorter than 30 characters. Never use the grave accent character.\n\n"
        f"COLOR ROLES:\n{roles}\n\n"
        "ACCESSIBILITY (WCAG):\n"
        f"{contrast}\n"
        "- If a chosen colour fails, adjust the text colour (prefer #FFFFFF or #000000) until it passes.\n"
    )


def build_generation_prompt() -> str:
    return (
        "You are a creative assistant for a design application that generates colour themes. "
        "Respond with a single, clean JSON object.\n\n"
        f"{_shape_section()}\n"
        "ADVICE:\n"
        "- One paragraph (250-500 characters, never above 800) on where the theme fits best, "
        "the mood it conveys and its notable design choices. It must match the colours.\n\n"
        "INTERPRETATION (apply in order, stop at the first that applies):\n"
        "1. A direct description of a scene, mood or aesthetic: build the theme from it.\n"
        "2. Inappropriate or offensive input: return exactly this object:\n"
        f"{json.dumps(INVALID_INPUT_THEME, ensure_ascii=False, indent=2)}\n"
        "3. A person, title, fictional concept or abstract idea: interpret its public "
        "aesthetic, mood and signature colours.\n"
        "4. Only if nothing above applies (keyboard smash, random digits): return exactly this object:\n"
        f"{json.dumps(ILLEGIBLE_THEME, ensure_ascii=False, indent=2)}\n\n"
        "REMINDER: Only return the raw JSON object. Do not use markdown fences."
    )


def target_mode_label(target_is_dark: bool) -> str:
    return "Dark (Night)" if target_is_dark else "Light (Day)"


def build_inversion_prompt(target_is_dark: bool) -> str:
    mode = target_mode_label(target_is_dark)
    return (
        "You are a theme inverter for a design application. You will be given the JSON of an "
        f"existing colour theme. Generate the **{mode}** version of it.\n\n"
        "- Keep the mood, style and core colour identity: if the accent was green, the new accent "
        f"is a green that suits {mode} mode.\n"
        "- Do not return the same theme; craft a new palette.\n"
        "- For the name, prefer an opposite word of the old name; otherwise append "
        "(Light) / (Dark) or (Day) / (Night).\n\n"
        f"{_shape_section()}\n"
        "REMINDER: Only return the raw JSON object. Do not use markdown fences."
    )


def _serializable(theme: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in theme.items() if k not in {"id", "_id"}}


def build_inversion_request(theme: Dict[str, Any]) -> str:
    return "Here is the theme to invert: " + json.dumps(_serializable(theme), ensure_ascii=False, indent=2)


def build_revision_request(theme: Dict[str, Any], instruction: str) -> str:
    return (
        f'Based on the previously generated theme named "{theme.get("themeName", "")}", '
        f"which has this JSON data: {json.dumps(_serializable(theme), ensure_ascii=False)}, "
        f'please revise and improve it with this new instruction: "{instruction}"'
    )
