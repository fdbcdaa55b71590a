from __future__ import annotations

import colorsys
import re
from typing import Any, Dict, Optional

# Both patterns are applied with fullmatch: no surrounding whitespace or newline
_HEX6_RE = re.compile(r"#?([0-9a-fA-F]{6})")
_RGBA_RE = re.compile(
    r"rgba\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*(?:0|1|0?\.\d+|1\.0+)\s*\)",
    re.IGNORECASE,
)

DARK_LUMINANCE_THRESHOLD = 0.5


def _hex_channels(value: Any) -> Optional[tuple]:
    if not isinstance(value, str):
        return None
    m = _HEX6_RE.fullmatch(value)
    if not m:
        return None
    h = m.group(1)
    return tuple(int(h[i : i + 2], 16) / 255 for i in (0, 2, 4))


def is_css_color(value: Any) -> bool:
    """True for a `#RRGGBB` or `rgba(r,g,b,a)` string."""
    if not isinstance(value, str):
        return False
    return (value.startswith("#") and _HEX6_RE.fullmatch(value) is not None) or _RGBA_RE.fullmatch(value) is not None


def hex_to_luminance(value: Any) -> Optional[float]:
    """WCAG relative luminance of a 6-digit hex colour, None for anything else."""
    channels = _hex_channels(value)
    if channels is None:
        return None

    def linear(v: float) -> float:
        return v / 12.92 if v <= 0.03928 else ((v + 0.055) / 1.055) ** 2.4

    r, g, b = (linear(c) for c in channels)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(fg: Any, bg: Any) -> Optional[float]:
    l1 = hex_to_luminance(fg)
    l2 = hex_to_luminance(bg)
    if l1 is None or l2 is None:
        return None
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def hex_to_hsl(value: str) -> Dict[str, float]:
    channels = _hex_channels(value)
    if channels is None:
        raise ValueError(f"not a 6-digit hex colour: {value!r}")
    # colorsys orders the result h, l, s
    h, l, s = colorsys.rgb_to_hls(*channels)
    return {"h": h, "s": s, "l": l}


def hsl_to_hex(h: float, s: float, l: float) -> str:
    r, g, b = colorsys.hls_to_rgb(h, l, s)

    def to_byte(v: float) -> int:
        return max(0, min(255, int(round(v * 255))))

    return "#{:02X}{:02X}{:02X}".format(to_byte(r), to_byte(g), to_byte(b))


def is_dark_background(value: Any, default: bool = False) -> bool:
    """Classify a background colour; `default` applies when luminance is not computable."""
    lum = hex_to_luminance(value)
    if lum is None:
        return default
    return lum < DARK_LUMINANCE_THRESHOLD
