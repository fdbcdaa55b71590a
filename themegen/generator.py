from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from themegen import llm_client, llm_prompts
from themegen.colors import contrast_ratio
from themegen.errors import GenerationError, ParseError, ValidationError
from themegen.llm_parsing import extract_json_object, normalize_theme

log = logging.getLogger(__name__)

CompleteFn = Callable[[str, str], str]


def _complete_fn(complete: Optional[CompleteFn]) -> CompleteFn:
    return complete or llm_client.complete


def _parse(raw_text: str, label: str, adjust: Optional[Callable[[Dict[str, Any]], None]] = None) -> Dict[str, Any]:
    try:
        theme = extract_json_object(raw_text)
        if adjust is not None:
            adjust(theme)
        theme = normalize_theme(theme)
    except (ParseError, ValidationError) as exc:
        log.warning("%s: bad model output (%s) snippet=%r", label, exc.message, (raw_text or "")[:200])
        raise GenerationError("Bad AI response", raw_text) from exc
    # advisory only; the theme is returned as generated
    for fg, bg, ratio in contrast_shortfalls(theme):
        log.info("%s: %s on %s contrast %.2f:1 is below target", label, fg, bg, ratio)
    return theme


def contrast_shortfalls(theme: Dict[str, Any]) -> List[Tuple[str, str, float]]:
    """(foreground, background, ratio) for each contrast target the theme misses.

    Pairs whose colours are missing or not hex are skipped.
    """
    colors = theme.get("colors") or {}
    out: List[Tuple[str, str, float]] = []
    for fg, bg, target in llm_prompts.CONTRAST_TARGETS:
        ratio = contrast_ratio(colors.get(fg), colors.get(bg))
        if ratio is not None and ratio < target:
            out.append((fg, bg, ratio))
    return out


def generate_theme(prompt: str, complete: Optional[CompleteFn] = None) -> Dict[str, Any]:
    raw = _complete_fn(complete)(llm_prompts.build_generation_prompt(), prompt)
    return _parse(raw, "generate_theme")


def invert_theme(existing: Dict[str, Any], complete: Optional[CompleteFn] = None) -> Dict[str, Any]:
    """Ask for the opposite-mode counterpart of `existing`.

    The returned `isDark` is the negation of the input's flag and `groupId`
    is copied from the input, whatever the model claims. The input is
    normalized first, so a non-boolean `isDark` is re-derived from its
    background before being negated.
    """
    existing = normalize_theme(dict(existing))
    new_is_dark = not existing["isDark"]
    group_id = existing.get("groupId")

    def _force_pairing(theme: Dict[str, Any]) -> None:
        theme.pop("id", None)
        theme.pop("_id", None)
        theme["isDark"] = new_is_dark
        if group_id is None:
            theme.pop("groupId", None)
        else:
            theme["groupId"] = group_id

    raw = _complete_fn(complete)(
        llm_prompts.build_inversion_prompt(new_is_dark),
        llm_prompts.build_inversion_request(existing),
    )
    return _parse(raw, "invert_theme", _force_pairing)


def revise_theme(existing: Dict[str, Any], instruction: str, complete: Optional[CompleteFn] = None) -> Dict[str, Any]:
    group_id = existing.get("groupId")

    def _keep_group(theme: Dict[str, Any]) -> None:
        theme.pop("id", None)
        theme.pop("_id", None)
        if group_id is not None:
            theme["groupId"] = group_id

    raw = _complete_fn(complete)(
        llm_prompts.build_generation_prompt(),
        llm_prompts.build_revision_request(existing, instruction),
    )
    return _parse(raw, "revise_theme", _keep_group)
