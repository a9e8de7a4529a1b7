"""SiteLens MCP server: stdio JSON-RPC 2.0 loop."""

from __future__ import annotations

import argparse
import copy
import json
import logging
import sys
from typing import Any, Callable

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from sitelens.config import SERVER_NAME, SERVER_VERSION, load_roots, log_level
from sitelens.errors import InvalidArgument, err, from_exception
from sitelens.store import ResultCache
from sitelens.tools import (
    handle_asset_budget,
    handle_link_check,
    handle_report,
    handle_roots_list,
    handle_scan_accessibility,
    handle_server_info,
    handle_sitemap,
)

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

# --- MCP tools/list schema ---

TOOLS_LIST: list[dict[str, Any]] = [
    {
        "name": "roots-list",
        "description": "List the allowed root directories, in declaration order.",
        "inputSchema": {"type": "object", "properties": {}, "additionalProperties": False},
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "sitemap",
        "description": "Recursive file/dir tree rooted at a path inside the allowed roots.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "includeHtmlOnly": {"type": "boolean"},
                "maxDepth": {"type": "integer", "minimum": 0, "maximum": 20},
            },
            "required": ["path"],
            "additionalProperties": False,
        },
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "link-check",
        "description": (
            "Check href/src targets of HTML files under path. External URLs are "
            "skipped, never fetched. Results are cached for report."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "entry": {"type": "string"},
                "extensions": _STRING_LIST,
            },
            "required": ["path"],
            "additionalProperties": False,
        },
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "asset-budget",
        "description": (
            "Size static assets under path: totals by type, 20 heaviest files, "
            "files over budgetKB (default 200). Results are cached for report."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "patterns": _STRING_LIST,
                "budgetKB": {"type": "number", "minimum": 0},
            },
            "required": ["path"],
            "additionalProperties": False,
        },
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "scan-accessibility",
        "description": (
            "Static accessibility checks (alt text, form labels, landmarks, heading "
            "order, inline contrast) for HTML under path. Results are cached for report."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "include": _STRING_LIST,
                "exclude": _STRING_LIST,
            },
            "required": ["path"],
            "additionalProperties": False,
        },
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "report",
        "description": (
            "Ranked per-file scores and quick wins from the cached scans of the "
            "same path. Missing scans count as empty."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "weights": {
                    "type": "object",
                    "properties": {
                        "a11y": {"type": "number"},
                        "links": {"type": "number"},
                        "performance": {"type": "number"},
                    },
                },
                "top": {"type": "integer", "minimum": 1, "maximum": 100},
            },
            "required": ["path"],
            "additionalProperties": False,
        },
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "server-info",
        "description": "Server metadata: version, roots, cached targets, containment policy.",
        "inputSchema": {"type": "object", "properties": {}, "additionalProperties": False},
        "annotations": {"readOnlyHint": True},
    },
]

SCHEMAS: dict[str, dict[str, Any]] = {t["name"]: t["inputSchema"] for t in TOOLS_LIST}

_NUMERIC_TYPES = ("integer", "number")
_NUMERIC_KEYWORDS = ("type", "minimum", "maximum")


def _coercible(schema: dict[str, Any]) -> dict[str, Any]:
    """Copy of a tool schema with numeric keywords removed.

    Numeric knobs are coerced or clamped by the handlers, so only their
    presence is validated here.
    """
    out = copy.deepcopy(schema)
    stack = [out]
    while stack:
        node = stack.pop()
        for prop in node.get("properties", {}).values():
            if prop.get("type") in _NUMERIC_TYPES:
                for key in _NUMERIC_KEYWORDS:
                    prop.pop(key, None)
            stack.append(prop)
    return out


VALIDATORS: dict[str, Draft202012Validator] = {
    name: Draft202012Validator(_coercible(schema)) for name, schema in SCHEMAS.items()
}


def validate_arguments(validator: Draft202012Validator, args: Any) -> dict[str, Any]:
    """Check args against a tool's validator; raises InvalidArgument."""
    error = best_match(validator.iter_errors(args))
    if error is not None:
        location = [str(p) for p in error.absolute_path]
        raise InvalidArgument(
            f"Invalid arguments: {error.message}",
            {"location": location, "validator": error.validator},
        )
    return args


class SiteLensServer:
    """MCP server with a static tool routing table over stdio JSON-RPC."""

    def __init__(self, roots: tuple[str, ...], cache: ResultCache) -> None:
        self.roots = roots
        self.cache = cache
        self.routes: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            "roots-list": lambda a: handle_roots_list(a, self.roots),
            "sitemap": lambda a: handle_sitemap(a, self.roots),
            "link-check": lambda a: handle_link_check(a, self.roots, self.cache),
            "asset-budget": lambda a: handle_asset_budget(a, self.roots, self.cache),
            "scan-accessibility": lambda a: handle_scan_accessibility(a, self.roots, self.cache),
            "report": lambda a: handle_report(a, self.roots, self.cache),
            "server-info": lambda a: handle_server_info(a, self.roots, self.cache, list(SCHEMAS)),
        }

    def call_tool(self, name: str, args: Any) -> dict[str, Any] | None:
        """Validate and run one tool; returns an envelope, or None if unknown."""
        handler = self.routes.get(name)
        if handler is None:
            return None
        try:
            validated = validate_arguments(VALIDATORS[name], args if args is not None else {})
        except InvalidArgument as exc:
            return from_exception(exc)
        logger.debug("tool %s args=%s", name, validated)
        try:
            return handler(validated)
        except Exception as e:
            logger.exception("unhandled error in tool %s", name)
            return err("E_INTERNAL", "Unhandled server error.", {"exception": str(e)})

    def handle_rpc(self, req: dict[str, Any]) -> dict[str, Any] | None:
        """Route a single JSON-RPC request; notifications get no response."""
        if "id" not in req:
            return None
        rpc_id = req.get("id")
        method = req.get("method", "")
        if not isinstance(method, str):
            return self._rpc_error(rpc_id, -32600, "Invalid Request")
        params = req.get("params") or {}
        if method in ("initialize", "tools/call") and not isinstance(params, dict):
            return self._rpc_error(rpc_id, -32602, "Invalid params")

        if method == "initialize":
            return self._rpc_ok(rpc_id, {
                "protocolVersion": params.get("protocolVersion", PROTOCOL_VERSION),
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            })

        if method == "tools/list":
            return self._rpc_ok(rpc_id, {"tools": TOOLS_LIST})

        if method == "tools/call":
            name = params.get("name", "")
            if not isinstance(name, str):
                return self._rpc_error(rpc_id, -32602, "Tool name must be a string")
            envelope = self.call_tool(name, params.get("arguments"))
            if envelope is None:
                return self._rpc_error(rpc_id, -32602, f"Unknown tool: {name}")
            return self._rpc_ok(rpc_id, {
                "content": [{"type": "text", "text": json.dumps(envelope)}],
                "structuredContent": envelope,
                "isError": not envelope["ok"],
            })

        envelope = self.call_tool(method, params)
        if envelope is None:
            return self._rpc_error(rpc_id, -32601, f"Method not found: {method}")
        return self._rpc_ok(rpc_id, envelope)

    def _rpc_ok(self, rpc_id: Any, result: Any) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": rpc_id, "result": result}

    def _rpc_error(self, rpc_id: Any, code: int, message: str) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


def _write(resp: dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(resp) + "\n")
    sys.stdout.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sitelens", description="SiteLens static site audit server (stdio).")
    parser.add_argument(
        "--roots",
        help="Allowed root directories separated by ';' (falls back to SITELENS_ROOTS).",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: SITELENS_LOG_LEVEL or INFO).")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point: parse options, load roots, run stdio JSON-RPC loop."""
    args = build_parser().parse_args(argv)

    # stdout carries the protocol; logs go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=(args.log_level or log_level()).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    roots = load_roots(args.roots)
    cache = ResultCache()
    server = SiteLensServer(roots, cache)
    logger.info("%s started with %d root(s).", SERVER_NAME, len(roots))
    if not roots:
        logger.warning("no allowed roots configured; path tools will fail with E_NO_ROOTS")

    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        try:
            req = json.loads(line)
        except json.JSONDecodeError:
            _write({
                "jsonrpc": "2.0",
                "id": None,
                "error": {"code": -32700, "message": "Parse error"},
            })
            continue
        if not isinstance(req, dict):
            _write({
                "jsonrpc": "2.0",
                "id": None,
                "error": {"code": -32600, "message": "Invalid Request"},
            })
            continue

        try:
            resp = server.handle_rpc(req)
        except Exception:
            logger.exception("unhandled error while routing request")
            resp = {
                "jsonrpc": "2.0",
                "id": req.get("id"),
                "error": {"code": -32603, "message": "Internal error"},
            }
        if resp is not None:
            _write(resp)

    cache.clear()


if __name__ == "__main__":
    main()
