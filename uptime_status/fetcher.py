"""
UptimeRobot 数据拉取

构造最近 N 天的日期范围与自定义可用率区间，POST 到 getMonitors 接口。
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class UptimeRobotAPIError(Exception):
    """上游返回 stat=fail"""

    def __init__(self, message: str, error: Optional[Dict[str, Any]] = None):
        super().__init__(f"API Error: {message}")
        self.error = error or {}


def local_midnight_ts(day: date) -> int:
    """本地时区当日零点的 unix 时间戳"""
    return int(datetime.combine(day, time.min).timestamp())


def build_date_range(days: int, today: Optional[date] = None) -> List[date]:
    """
    生成最近 days 天的日期（本地时间，今天在前）

    Args:
        days: 天数
        today: 基准日期，默认为今天
    """
    if days < 1:
        raise ValueError("days must be >= 1")
    if today is None:
        today = date.today()
    return [today - timedelta(days=d) for d in range(days)]


def build_custom_ranges(dates: List[date]) -> List[str]:
    """
    每天一个 start_end 区间，末尾追加一个覆盖全部日期的汇总区间
    """
    ranges = [
        f"{local_midnight_ts(d)}_{local_midnight_ts(d + timedelta(days=1))}"
        for d in dates
    ]
    start = local_midnight_ts(min(dates))
    end = local_midnight_ts(max(dates) + timedelta(days=1))
    ranges.append(f"{start}_{end}")
    return ranges


def build_post_data(api_key: str, dates: List[date]) -> Dict[str, Any]:
    """构造 getMonitors 请求参数"""
    return {
        "api_key": api_key,
        "format": "json",
        "logs": 1,
        "log_types": "1-2",
        "logs_start_date": local_midnight_ts(min(dates)),
        "logs_end_date": local_midnight_ts(max(dates) + timedelta(days=1)),
        "custom_uptime_ranges": "-".join(build_custom_ranges(dates)),
    }


async def fetch_monitors(
    post_data: Dict[str, Any],
    api_url: str,
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """
    拉取监控数据

    Args:
        post_data: 表单参数
        api_url: 接口地址（UptimeRobot 或本服务代理）
        timeout: 超时时间（秒）
        transport: 自定义 transport（测试用）

    Returns:
        解析后的 JSON 响应

    Raises:
        httpx.HTTPStatusError: 非 2xx 响应
        httpx.RequestError: 网络错误（无响应）
        ValueError: 响应体不是合法 JSON
        UptimeRobotAPIError: 上游返回 stat=fail
    """
    logger.debug(f"API request: {api_url}")

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(
                api_url,
                data={k: str(v) for k, v in post_data.items()},
                headers=FORM_HEADERS,
            )
            logger.debug(f"Response status: {response.status_code}")
            response.raise_for_status()
            body = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(
            f"Failed to fetch monitor data: HTTP {e.response.status_code} "
            f"from {e.request.url}: {e.response.text[:200]}"
        )
        raise
    except httpx.RequestError as e:
        logger.error(f"Failed to fetch monitor data: no response from {api_url}: {e!r}")
        raise
    except ValueError as e:
        logger.error(f"Failed to fetch monitor data: invalid JSON from {api_url}: {e}")
        raise

    if body and body.get("stat") == "fail":
        error = body.get("error") or {}
        message = error.get("message") or "Unknown error"
        logger.error(f"UptimeRobot API error: {error}")
        raise UptimeRobotAPIError(message, error)

    return body
