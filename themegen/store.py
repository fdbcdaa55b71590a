from __future__ import annotations

import json
import logging
import os
import re
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import redis

from themegen.errors import DuplicateNameError

log = logging.getLogger(__name__)

THEME_STORE_FILE = Path(os.getenv("THEME_STORE_FILE", "cache/themes.json"))
REDIS_URL = os.getenv("REDIS_URL", "").strip()

_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    return uuid.uuid4().hex


def is_valid_id(theme_id: Any) -> bool:
    return isinstance(theme_id, str) and bool(_ID_RE.match(theme_id))


class FileThemeStore:
    """All themes in one JSON file, keyed by id. Writes go through a temp file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path or THEME_STORE_FILE)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"theme store {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, separators=(",", ":")), encoding="utf-8")
        tmp.replace(self.path)

    @staticmethod
    def _name_taken(data: Dict[str, Dict[str, Any]], name: str, exclude_id: Optional[str] = None) -> bool:
        return any(doc.get("themeName") == name and tid != exclude_id for tid, doc in data.items())

    def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            data = self._read()
            name = doc.get("themeName")
            if self._name_taken(data, name):
                raise DuplicateNameError(name)
            stored = dict(doc)
            stored["id"] = new_id()
            data[stored["id"]] = stored
            self._write(data)
            return dict(stored)

    def replace(self, theme_id: str, doc: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._read()
            if theme_id not in data:
                return None
            name = doc.get("themeName")
            if self._name_taken(data, name, exclude_id=theme_id):
                raise DuplicateNameError(name)
            stored = dict(doc)
            stored["id"] = theme_id
            data[theme_id] = stored
            self._write(data)
            return dict(stored)

    def delete(self, theme_id: str) -> bool:
        with self._lock:
            data = self._read()
            if data.pop(theme_id, None) is None:
                return False
            self._write(data)
            return True

    def get(self, theme_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._read().get(theme_id)
        return dict(doc) if doc is not None else None

    def find_all(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(doc) for doc in self._read().values()]


class RedisThemeStore:
    """Themes in a Redis hash; a second hash maps name -> id and enforces uniqueness via HSETNX."""

    DOCS_KEY = "themes:docs"
    NAMES_KEY = "themes:names"

    def __init__(self, client: Any = None, url: Optional[str] = None) -> None:
        if client is None:
            client = redis.from_url(url or REDIS_URL, decode_responses=True)
        self._redis = client

    def _claim_name(self, name: str, theme_id: str) -> None:
        if self._redis.hsetnx(self.NAMES_KEY, name, theme_id):
            return
        if self._redis.hget(self.NAMES_KEY, name) != theme_id:
            raise DuplicateNameError(name)

    def _release_name(self, name: str, theme_id: str) -> None:
        if self._redis.hget(self.NAMES_KEY, name) == theme_id:
            self._redis.hdel(self.NAMES_KEY, name)

    def _write_doc(self, stored: Dict[str, Any], claimed_name: Optional[str]) -> None:
        # A claimed name must not outlive a failed document write
        try:
            self._redis.hset(self.DOCS_KEY, stored["id"], json.dumps(stored, ensure_ascii=False))
        except Exception:
            if claimed_name is not None:
                log.warning("theme store: releasing name %r after failed write", claimed_name)
                self._release_name(claimed_name, stored["id"])
            raise

    def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(doc)
        stored["id"] = new_id()
        self._claim_name(stored.get("themeName"), stored["id"])
        self._write_doc(stored, stored.get("themeName"))
        return stored

    def replace(self, theme_id: str, doc: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        current = self.get(theme_id)
        if current is None:
            return None
        stored = dict(doc)
        stored["id"] = theme_id
        new_name = stored.get("themeName")
        old_name = current.get("themeName")
        if new_name == old_name:
            self._write_doc(stored, None)
            return stored
        self._claim_name(new_name, theme_id)
        self._write_doc(stored, new_name)
        self._release_name(old_name, theme_id)
        return stored

    def delete(self, theme_id: str) -> bool:
        current = self.get(theme_id)
        if current is None:
            return False
        self._redis.hdel(self.DOCS_KEY, theme_id)
        self._release_name(current.get("themeName"), theme_id)
        return True

    def get(self, theme_id: str) -> Optional[Dict[str, Any]]:
        raw = self._redis.hget(self.DOCS_KEY, theme_id)
        return json.loads(raw) if raw else None

    def find_all(self) -> List[Dict[str, Any]]:
        return [json.loads(raw) for raw in self._redis.hgetall(self.DOCS_KEY).values()]


def get_store():
    if REDIS_URL:
        log.info("theme store: redis")
        return RedisThemeStore(url=REDIS_URL)
    log.info("theme store: file %s", THEME_STORE_FILE)
    return FileThemeStore(THEME_STORE_FILE)
