from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

from themegen.errors import DuplicateNameError, NotFoundError, ValidationError
from themegen.llm_parsing import normalize_theme
from themegen.store import is_valid_id, new_id

log = logging.getLogger(__name__)

POLICY_REJECT = "reject"
POLICY_RENAME = "rename"
DUPLICATE_NAME_POLICY = os.getenv("DUPLICATE_NAME_POLICY", POLICY_REJECT).strip().lower()

_MODE_SUFFIX_RE = re.compile(r"\s+\((Day|Dark|Night)\)\s*$", re.IGNORECASE)
_NON_ALPHA_RE = re.compile(r"[^A-Za-z]")


def tidy_theme_name(name: Any) -> str:
    """'Dusk   (Night) ' -> 'Dusk (Night)'. Raises ValidationError when nothing is left."""
    if not isinstance(name, str):
        raise ValidationError("themeName is required")
    name = _MODE_SUFFIX_RE.sub(lambda m: f" ({m.group(1)})", name).strip()
    if not name:
        raise ValidationError("themeName is required")
    return name


def sort_key(theme_name: str) -> Tuple[bool, str, str]:
    # Names with no letters at all (pure emoji/punctuation) go last
    normalized = _NON_ALPHA_RE.sub("", theme_name or "").lower()
    return (normalized == "", normalized, theme_name or "")


def _strip_client_ids(theme: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in theme.items() if k not in {"id", "_id"}}


class ThemeResolver:
    def __init__(self, store, policy: Optional[str] = None) -> None:
        policy = (policy or DUPLICATE_NAME_POLICY).strip().lower()
        if policy not in {POLICY_REJECT, POLICY_RENAME}:
            raise ValueError(f"unknown duplicate name policy: {policy!r}")
        self.store = store
        self.policy = policy

    def _prepare(self, theme: Any) -> Dict[str, Any]:
        if not isinstance(theme, dict):
            raise ValidationError("theme must be a JSON object")
        doc = _strip_client_ids(theme)
        doc["themeName"] = tidy_theme_name(doc.get("themeName"))
        return normalize_theme(doc)

    def save(self, theme: Dict[str, Any]) -> Dict[str, Any]:
        doc = self._prepare(theme)
        if not doc.get("groupId"):
            # First of a new light/dark pair
            doc["groupId"] = new_id()
        if self.policy == POLICY_REJECT:
            stored = self.store.insert(doc)
            log.info("theme.save: id=%s name=%r", stored["id"], stored["themeName"])
            return stored

        base = doc["themeName"]
        suffix = 2
        while True:
            try:
                stored = self.store.insert(doc)
            except DuplicateNameError:
                doc["themeName"] = f"{base} ({suffix})"
                log.info("theme.save: name taken, retrying as %r", doc["themeName"])
                suffix += 1
                continue
            log.info("theme.save: id=%s name=%r", stored["id"], stored["themeName"])
            return stored

    def overwrite(self, theme_id: str, theme: Dict[str, Any]) -> Dict[str, Any]:
        if not is_valid_id(theme_id):
            raise NotFoundError(theme_id)
        doc = self._prepare(theme)
        if not doc.get("groupId"):
            current = self.store.get(theme_id)
            if current is None:
                raise NotFoundError(theme_id)
            if current.get("groupId"):
                doc["groupId"] = current["groupId"]
        stored = self.store.replace(theme_id, doc)
        if stored is None:
            raise NotFoundError(theme_id)
        log.info("theme.overwrite: id=%s name=%r", theme_id, stored["themeName"])
        return stored

    def rename(self, theme_id: str, new_name: Any) -> Dict[str, Any]:
        current = self.get(theme_id)
        current["themeName"] = tidy_theme_name(new_name)
        stored = self.store.replace(theme_id, _strip_client_ids(current))
        if stored is None:
            raise NotFoundError(theme_id)
        return stored

    def get(self, theme_id: str) -> Dict[str, Any]:
        if not is_valid_id(theme_id):
            raise NotFoundError(theme_id)
        doc = self.store.get(theme_id)
        if doc is None:
            raise NotFoundError(theme_id)
        return doc

    def delete(self, theme_id: str) -> None:
        if not is_valid_id(theme_id) or not self.store.delete(theme_id):
            raise NotFoundError(theme_id)
        log.info("theme.delete: id=%s", theme_id)

    def list_all(self) -> List[Dict[str, Any]]:
        return sorted(self.store.find_all(), key=lambda t: sort_key(t.get("themeName", "")))
