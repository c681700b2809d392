"""
UptimeRobot 代理 API

前端只拿到同源地址，真实的 API key 由服务端注入。
"""

import logging
from typing import List, Tuple
from urllib.parse import parse_qsl

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from ...config import AppConfig
from ...fetcher import FORM_HEADERS
from ..dependencies import get_app_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


async def forward_to_upstream(url: str, form: List[Tuple[str, str]], timeout: float) -> httpx.Response:
    """把表单原样转发给上游"""
    async with httpx.AsyncClient(timeout=timeout) as client:
        return await client.post(url, data=dict(form), headers=FORM_HEADERS)


@router.api_route("/uptimerobot", methods=ALL_METHODS)
async def proxy_get_monitors(request: Request, config: AppConfig = Depends(get_app_config)):
    """
    转发 getMonitors 请求

    - 仅允许 POST
    - 无论客户端传什么，api_key 一律替换为服务端 key
    - 原样返回上游状态码和响应体，禁止缓存
    """
    if request.method != "POST":
        return PlainTextResponse("Method Not Allowed", status_code=405)

    api_key = config.uptimerobot.proxy_api_key
    if not api_key:
        return PlainTextResponse("Missing UPTIMEROBOT_API_KEY", status_code=500)

    body = (await request.body()).decode("utf-8", errors="replace")
    form = [(k, v) for k, v in parse_qsl(body, keep_blank_values=True) if k != "api_key"]
    form.append(("api_key", api_key))

    try:
        upstream = await forward_to_upstream(
            config.uptimerobot.upstream_url, form, config.uptimerobot.timeout
        )
    except httpx.RequestError as e:
        logger.error(f"Proxy request to {config.uptimerobot.upstream_url} failed: {e!r}")
        return PlainTextResponse("Upstream request failed", status_code=502)

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers={
            "Content-Type": upstream.headers.get("content-type") or "application/json",
            "Cache-Control": "no-store",
        },
    )
