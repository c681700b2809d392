"""
测试 UptimeRobot 代理 API

覆盖：
- 非 POST 返回 405
- 未配置服务端 key 返回 500
- api_key 被强制覆盖，上游状态码 / 响应体 / content-type 原样返回
"""

import asyncio
from urllib.parse import parse_qsl

import httpx
import pytest
from fastapi.testclient import TestClient

from uptime_status.api.app import create_app
from uptime_status.api.dependencies import get_app_config
from uptime_status.api.routers import proxy as proxy_router
from uptime_status.config import AppConfig


@pytest.fixture
def config():
    config = AppConfig()
    config.uptimerobot.proxy_api_key = "server-secret"
    config.frontend.enabled = False
    return config


@pytest.fixture
def client(config):
    app = create_app()

    async def _override_config():
        return config

    app.dependency_overrides[get_app_config] = _override_config
    return TestClient(app)


@pytest.fixture
def upstream(monkeypatch):
    """替换上游请求，记录转发的表单"""
    calls = []
    reply = {"response": httpx.Response(
        200,
        content=b'{"stat":"ok","monitors":[]}',
        headers={"content-type": "application/json; charset=utf-8"},
    )}

    async def _forward(url, form, timeout):
        calls.append({"url": url, "form": dict(form)})
        return reply["response"]

    monkeypatch.setattr(proxy_router, "forward_to_upstream", _forward)
    return {"calls": calls, "reply": reply}


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"])
def test_non_post_rejected(client: TestClient, upstream, method):
    resp = client.request(method, "/api/uptimerobot")

    assert resp.status_code == 405
    assert resp.text == "Method Not Allowed"
    assert resp.headers["content-type"].startswith("text/plain")
    assert upstream["calls"] == []


def test_head_rejected(client: TestClient, upstream):
    resp = client.head("/api/uptimerobot")

    assert resp.status_code == 405
    assert resp.headers["content-type"].startswith("text/plain")
    assert upstream["calls"] == []


def test_missing_server_key(client: TestClient, config: AppConfig, upstream):
    config.uptimerobot.proxy_api_key = None

    resp = client.post("/api/uptimerobot", data={"format": "json"})

    assert resp.status_code == 500
    assert resp.text == "Missing UPTIMEROBOT_API_KEY"
    assert upstream["calls"] == []


def test_client_key_overridden(client: TestClient, upstream):
    resp = client.post(
        "/api/uptimerobot",
        data={"api_key": "client-key", "format": "json", "logs": "1", "custom_uptime_ranges": "1_2-3_4"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"stat": "ok", "monitors": []}
    assert resp.headers["cache-control"] == "no-store"
    assert resp.headers["content-type"].startswith("application/json")

    forwarded = upstream["calls"][0]
    assert forwarded["url"] == "https://api.uptimerobot.com/v2/getMonitors"
    assert forwarded["form"]["api_key"] == "server-secret"
    assert forwarded["form"]["custom_uptime_ranges"] == "1_2-3_4"
    assert forwarded["form"]["logs"] == "1"


def test_key_injected_when_absent(client: TestClient, upstream):
    client.post("/api/uptimerobot", content=b"format=json", headers={"Content-Type": "application/x-www-form-urlencoded"})

    assert upstream["calls"][0]["form"] == {"format": "json", "api_key": "server-secret"}


def test_upstream_status_relayed(client: TestClient, upstream):
    upstream["reply"]["response"] = httpx.Response(429, content=b"Too Many Requests", headers={"content-type": "text/plain"})

    resp = client.post("/api/uptimerobot", data={"format": "json"})

    assert resp.status_code == 429
    assert resp.text == "Too Many Requests"
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.headers["cache-control"] == "no-store"


def test_default_content_type(client: TestClient, upstream):
    upstream["reply"]["response"] = httpx.Response(200, content=b'{"stat":"ok"}')

    resp = client.post("/api/uptimerobot", data={"format": "json"})

    assert resp.headers["content-type"].startswith("application/json")


def test_upstream_unreachable(client: TestClient, monkeypatch):
    async def _forward(url, form, timeout):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(proxy_router, "forward_to_upstream", _forward)

    resp = client.post("/api/uptimerobot", data={"format": "json"})

    assert resp.status_code == 502


def test_forward_posts_form(monkeypatch):
    """forward_to_upstream 以表单方式 POST"""
    seen = {}

    def handler(request: httpx.Request):
        seen["method"] = request.method
        seen["form"] = dict(parse_qsl(request.content.decode()))
        return httpx.Response(200, json={"stat": "ok"})

    real_client = httpx.AsyncClient

    def _client(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(proxy_router.httpx, "AsyncClient", _client)

    resp = asyncio.run(proxy_router.forward_to_upstream(
        "https://api.uptimerobot.com/v2/getMonitors", [("format", "json"), ("api_key", "k")], 5.0
    ))

    assert resp.status_code == 200
    assert seen == {"method": "POST", "form": {"format": "json", "api_key": "k"}}
