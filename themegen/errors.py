from __future__ import annotations

from typing import Any, Dict, Optional

SNIPPET_MAX_CHARS = 500


class ThemeError(Exception):
    """Base for every error the theme core raises on purpose.

    `code` is stable and machine-readable; `status_code` is what the HTTP
    layer answers with.
    """

    code = "THEME_ERROR"
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ParseError(ThemeError):
    code = "PARSE_ERROR"
    status_code = 502


class ValidationError(ThemeError):
    code = "VALIDATION_ERROR"
    status_code = 422


class DuplicateNameError(ThemeError):
    code = "DUPLICATE_NAME"
    status_code = 409

    def __init__(self, theme_name: str) -> None:
        super().__init__("Theme name already exists")
        self.theme_name = theme_name

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["themeName"] = self.theme_name
        return out


class NotFoundError(ThemeError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, theme_id: Any) -> None:
        super().__init__("Theme not found")
        self.theme_id = theme_id


class CompletionError(ThemeError):
    """The completion service could not be reached or gave no usable answer."""

    code = "COMPLETION_FAILED"
    status_code = 502


class GenerationError(ThemeError):
    code = "GENERATION_FAILED"
    status_code = 502

    def __init__(self, message: str, raw_text: Optional[str] = None) -> None:
        super().__init__(message)
        self.snippet = (raw_text or "")[:SNIPPET_MAX_CHARS]

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        cause = self.__cause__
        if isinstance(cause, ThemeError):
            out["detail"] = cause.message
        return out
