from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from themegen.colors import is_css_color

_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
    autoescape=select_autoescape(["html", "xml"]),
    enable_async=False,
)

# colour role -> CSS custom property read by the front end
CSS_VARIABLES: Tuple[Tuple[str, str], ...] = (
    ("primaryHeader", "--header-bg"),
    ("secondaryHeader", "--secondary-header-bg"),
    ("headerText", "--header-text"),
    ("subHeaderText", "--sub-header-text"),
    ("canvasBackground", "--main-bg"),
    ("surfaceBackground", "--container-bg"),
    ("primaryText", "--primary-text"),
    ("secondaryText", "--secondary-text"),
    ("accent", "--accent"),
    ("outlineSeparators", "--border-color"),
    ("primaryInteractive", "--btn-bg"),
    ("primaryInteractiveText", "--btn-text"),
    ("secondaryInteractive", "--secondary-interactive-bg"),
    ("secondaryInteractiveText", "--secondary-interactive-text"),
)

_COMMENT_UNSAFE_RE = re.compile(r"\*/|[\r\n]")


def css_variables(theme: Dict[str, Any]) -> List[Tuple[str, str]]:
    colors = theme.get("colors") or {}
    out: List[Tuple[str, str]] = []
    for role, variable in CSS_VARIABLES:
        value = colors.get(role)
        if is_css_color(value):
            out.append((variable, value))
    return out


def render_theme_css(theme: Dict[str, Any]) -> str:
    """
    Given a normalized theme, build a `:root { ... }` stylesheet with one
    custom property per colour role.
    """
    tpl = _env.get_template("theme.css")
    name = _COMMENT_UNSAFE_RE.sub(" ", str(theme.get("themeName") or "theme"))
    return tpl.render(
        theme_name=name,
        variables=css_variables(theme),
        is_dark=bool(theme.get("isDark")),
    )
