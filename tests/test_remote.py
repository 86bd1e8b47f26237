import json

import httpx

from models import AppState, Settings
from utils.remote import RemoteClient, resolve_remote_url


def _client(handler) -> RemoteClient:
    return RemoteClient("https://script.example/exec", timeout=5, transport=httpx.MockTransport(handler))


def test_load_posts_text_plain_json():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "success", "data": None})

    client = _client(handler)
    assert client.load() == {"status": "success", "data": None}
    client.close()
    assert seen["content_type"].startswith("text/plain")
    assert seen["body"] == {"action": "load"}


def test_http_error_becomes_error_response():
    client = _client(lambda request: httpx.Response(503, text="unavailable"))
    response = client.load()
    assert response["status"] == "error"
    assert response["data"] is None


def test_non_json_reply_becomes_error_response():
    client = _client(lambda request: httpx.Response(200, text="<html>login</html>"))
    response = client.save(AppState())
    assert response == {"status": "error", "message": "Remote reply is not JSON", "data": None}


def test_connection_failure_becomes_error_response():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    assert _client(handler).load()["status"] == "error"


def test_stored_url_wins_over_config():
    state = AppState(settings=Settings(gas_url="https://stored.example/exec"))
    assert resolve_remote_url(state) == "https://stored.example/exec"
