"""Tests for JSON-RPC routing, argument validation and the stdio loop."""

from __future__ import annotations

import io
import json
import sys

import pytest

from sitelens.errors import InvalidArgument
from sitelens.server import TOOLS_LIST, VALIDATORS, SiteLensServer, main, validate_arguments


@pytest.fixture
def server(site, cache) -> SiteLensServer:
    _, roots = site
    return SiteLensServer(roots, cache)


def _call(server: SiteLensServer, method: str, params=None, rpc_id=1):
    return server.handle_rpc({"jsonrpc": "2.0", "id": rpc_id, "method": method, "params": params})


def test_tools_list_matches_routes(server):
    resp = _call(server, "tools/list")
    names = [t["name"] for t in resp["result"]["tools"]]
    assert names == [
        "roots-list", "sitemap", "link-check", "asset-budget",
        "scan-accessibility", "report", "server-info",
    ]
    assert set(names) == set(server.routes)


def test_initialize(server):
    resp = _call(server, "initialize", {"protocolVersion": "2025-03-26"})
    assert resp["result"]["protocolVersion"] == "2025-03-26"
    assert resp["result"]["serverInfo"]["name"] == "SiteLens"


def test_direct_method_returns_envelope(server, site):
    root, _ = site
    resp = _call(server, "roots-list", {})
    assert resp["result"] == {
        "ok": True,
        "result": {"roots": [{"rootId": "root_0", "displayName": "site", "path": root}]},
    }


def test_tools_call_wraps_envelope(server, site):
    root, _ = site
    resp = _call(server, "tools/call", {"name": "report", "arguments": {"path": root}})
    result = resp["result"]
    assert result["isError"] is False
    assert result["structuredContent"]["ok"] is True
    assert json.loads(result["content"][0]["text"]) == result["structuredContent"]


def test_tools_call_reports_errors(server):
    resp = _call(server, "tools/call", {"name": "report", "arguments": {}})
    result = resp["result"]
    assert result["isError"] is True
    assert result["structuredContent"]["error"]["code"] == "E_INVALID_ARGUMENT"


def test_unknown_tool_and_method(server):
    assert _call(server, "tools/call", {"name": "nope"})["error"]["code"] == -32602
    assert _call(server, "nope")["error"]["code"] == -32601


def test_notifications_get_no_response(server):
    assert server.handle_rpc({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


def test_unhandled_exception_becomes_internal_error(server):
    def explode(_args):
        raise ZeroDivisionError("bad")

    server.routes["sitemap"] = explode
    resp = _call(server, "sitemap", {"path": "."})
    assert resp["result"]["error"]["code"] == "E_INTERNAL"


def test_server_info_lists_cached_targets(server, site, make_file):
    root, _ = site
    make_file(root, "index.html", "<main></main>")
    _call(server, "scan-accessibility", {"path": root})
    info = _call(server, "server-info", {})["result"]["result"]
    assert len(info["cachedTargets"]) == 1
    assert info["tools"] == [t["name"] for t in TOOLS_LIST]


def test_no_roots_server(cache, tmp_path):
    server = SiteLensServer((), cache)
    resp = _call(server, "report", {"path": str(tmp_path)})
    assert resp["result"]["error"]["code"] == "E_NO_ROOTS"
    assert _call(server, "roots-list", {})["result"]["result"] == {"roots": []}


@pytest.mark.parametrize("args", [
    None,
    [],
    {},
    {"path": 5},
    {"path": "x", "bogus": 1},
    {"path": "x", "include": "blog"},
    {"path": "x", "include": ["ok", 3]},
])
def test_validation_rejects(args):
    with pytest.raises(InvalidArgument):
        validate_arguments(VALIDATORS["scan-accessibility"], args)


def test_validation_leaves_numeric_knobs_to_coercion():
    args = {"path": "x", "top": "lots", "weights": {"a11y": "heavy"}}
    assert validate_arguments(VALIDATORS["report"], args) is args


def test_validation_rejects_non_object_weights():
    with pytest.raises(InvalidArgument):
        validate_arguments(VALIDATORS["report"], {"path": "x", "weights": [1, 2]})


def test_stdio_loop(site, monkeypatch, capsys):
    root, _ = site
    lines = "\n".join([
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/list"}),
        "not json",
        json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
        "",
        json.dumps({"jsonrpc": "2.0", "id": 2, "method": "roots-list", "params": {}}),
    ]) + "\n"
    monkeypatch.setattr(sys, "stdin", io.StringIO(lines))
    monkeypatch.delenv("SITELENS_ROOTS", raising=False)

    main(["--roots", root])

    out = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [r["id"] for r in out] == [1, None, 2]
    assert out[1]["error"]["code"] == -32700
    assert out[2]["result"]["result"]["roots"][0]["path"] == root


def test_validation_error_names_the_argument():
    with pytest.raises(InvalidArgument) as excinfo:
        validate_arguments(VALIDATORS["scan-accessibility"], {"path": "x", "include": ["ok", 3]})
    assert excinfo.value.details["location"] == ["include", "1"]


def test_non_string_method_and_tool_name(server):
    resp = server.handle_rpc({"jsonrpc": "2.0", "id": 7, "method": ["x"]})
    assert resp["error"]["code"] == -32600
    resp = _call(server, "tools/call", {"name": {"a": 1}})
    assert resp["error"]["code"] == -32602


def test_stdio_loop_survives_bad_requests(site, monkeypatch, capsys):
    root, _ = site
    original = SiteLensServer.handle_rpc

    def flaky(self, req):
        if req.get("method") == "tools/list" and req.get("id") == 2:
            raise RuntimeError("routing failed")
        return original(self, req)

    monkeypatch.setattr(SiteLensServer, "handle_rpc", flaky)
    lines = "\n".join([
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": ["x"]}),
        json.dumps({"jsonrpc": "2.0", "id": 2, "method": "tools/list"}),
        json.dumps({"jsonrpc": "2.0", "id": 3, "method": "tools/list"}),
    ]) + "\n"
    monkeypatch.setattr(sys, "stdin", io.StringIO(lines))

    main(["--roots", root])

    out = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [r["id"] for r in out] == [1, 2, 3]
    assert out[0]["error"]["code"] == -32600
    assert out[1]["error"]["code"] == -32603
    assert "tools" in out[2]["result"]
