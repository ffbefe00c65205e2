# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import httpx

from scriptcheck.config import ScriptCheckSettings
from scriptcheck.http import HttpRequest, HttpxClient, StubHttpClient, create_default_http_client


def _client(handler, **settings):
    transport = httpx.MockTransport(handler)
    return HttpxClient(ScriptCheckSettings(**settings), client=httpx.Client(transport=transport))


def test_httpx_client_fetches_body_and_sends_user_agent():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers.get("user-agent")
        return httpx.Response(200, text="log.info('remote')")

    client = _client(handler, user_agent="Probe/1.0")
    response = client.request(HttpRequest(url="https://scripts.example.com/check.py"))
    client.close()

    assert response.ok
    assert response.is_success
    assert response.text == "log.info('remote')"
    assert response.url == "https://scripts.example.com/check.py"
    assert response.meta == {"body_truncated": False, "body_bytes_read": len("log.info('remote')")}
    assert seen["ua"] == "Probe/1.0"


def test_httpx_client_truncates_large_bodies():
    client = _client(lambda request: httpx.Response(200, content=b"x" * 64), max_body_bytes=10)
    response = client.request(HttpRequest(url="https://scripts.example.com/big.py"))

    assert response.text == "x" * 10
    assert response.meta["body_truncated"] is True
    assert response.meta["body_bytes_read"] == 10


def test_httpx_client_reports_non_success_status():
    client = _client(lambda request: httpx.Response(404, text="nope"))
    response = client.request(HttpRequest(url="https://scripts.example.com/gone.py"))
    assert response.ok
    assert response.status_code == 404
    assert not response.is_success


def test_httpx_client_transport_error_is_not_ok():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    response = _client(handler).request(HttpRequest(url="https://scripts.example.com/check.py"))
    assert response.ok is False
    assert response.error_type == "ConnectError"
    assert "connection refused" in response.error_message


def test_default_client_factory_uses_settings():
    client = create_default_http_client(ScriptCheckSettings(user_agent="Probe/9"))
    try:
        assert isinstance(client, HttpxClient)
        assert client.settings.user_agent == "Probe/9"
    finally:
        client.close()


def test_stub_client_records_requests():
    stub = StubHttpClient()
    response = stub.request(HttpRequest(url="https://example.com/x"))
    assert response.ok is False
    assert [r.url for r in stub.requests] == ["https://example.com/x"]
