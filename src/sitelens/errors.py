"""Error taxonomy: typed exceptions plus structured error/success envelopes."""

from __future__ import annotations

from typing import Any


class SiteLensError(Exception):
    """Base for every error that crosses a tool boundary as a stable code."""

    code = "E_INTERNAL"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AccessDenied(SiteLensError):
    code = "E_ACCESS_DENIED"


class NotFound(SiteLensError):
    code = "E_NOT_FOUND"


class NoRootsConfigured(SiteLensError):
    code = "E_NO_ROOTS"

    def __init__(self, message: str = "No allowed roots configured.") -> None:
        super().__init__(message)


class ParseError(SiteLensError):
    code = "E_PARSE_ERROR"


class InvalidArgument(SiteLensError):
    code = "E_INVALID_ARGUMENT"


def err(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    next_steps: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a structured error envelope."""
    return {
        "ok": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "nextSteps": next_steps or [],
        },
    }


def ok(result: Any) -> dict[str, Any]:
    """Build a structured success envelope."""
    return {"ok": True, "result": result}


def from_exception(exc: SiteLensError) -> dict[str, Any]:
    """Convert a typed error into its envelope, attaching remediation hints."""
    next_steps: list[dict[str, Any]] = []
    if isinstance(exc, NoRootsConfigured):
        next_steps.append({
            "action": "CONFIGURE_ROOTS",
            "hint": "Start the server with --roots \"DIR1;DIR2\" or set SITELENS_ROOTS.",
        })
    elif isinstance(exc, AccessDenied):
        next_steps.append({"action": "LIST_ROOTS", "tool": "roots-list", "args": {}})
    return err(exc.code, exc.message, exc.details, next_steps)
