import io
import json

import httpx
import pytest

from kuberlogic_cli.client import ApiClient, ApiError, CommandContext


def _transport(code, body, seen):
    def handler(request):
        seen.append(request)
        return httpx.Response(code, content=json.dumps(body).encode())

    return httpx.MockTransport(handler)


def test_list_sends_token_and_returns_payload():
    seen = []
    payload = [{"id": "test-1"}]
    api = ApiClient("localhost", "http", "token", _transport(200, payload, seen))
    assert api.service_list() == payload
    assert seen[0].headers["X-Token"] == "token"
    assert seen[0].method == "GET"


def test_error_message_from_payload():
    api = ApiClient("localhost", "http", "token",
                    _transport(404, {"message": "kuberlogic backup not found: test"}, []))
    with pytest.raises(ApiError) as info:
        api.backup_delete("test")
    assert str(info.value) == "kuberlogic backup not found: test"
    assert info.value.status == 404


def test_error_without_message_has_status():
    api = ApiClient("localhost", "http", "token", _transport(500, {}, []))
    with pytest.raises(ApiError) as info:
        api.service_get("x")
    assert info.value.status == 500


def test_post_body_and_filter_param():
    seen = []
    api = ApiClient("localhost", "http", "token", _transport(201, {"id": "b"}, seen))
    assert api.backup_add({"service_id": "s"}) == {"id": "b"}
    assert json.loads(seen[0].content) == {"service_id": "s"}
    api.restore_list("s")
    assert seen[1].url.params["service_id"] == "s"


def test_empty_body_returns_none():
    def handler(request):
        return httpx.Response(200)

    api = ApiClient("localhost", "http", "token", httpx.MockTransport(handler))
    assert api.service_archive("x") is None


def test_context_debug_log():
    err = io.StringIO()
    ctx = CommandContext(hostname="h:1", debug=True, err=err)
    ctx.client().close()
    assert "h:1" in err.getvalue()
    quiet = io.StringIO()
    CommandContext(err=quiet).debug_log("hidden")
    assert quiet.getvalue() == ""