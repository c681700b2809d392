"""
站点数据入口

缓存未过期时直接使用缓存（附带随机延迟），否则拉取 UptimeRobot 数据，
聚合后更新站点状态。
"""

import asyncio
import logging
import random
from datetime import date
from typing import List, Optional

from .aggregator import process_monitors
from .config import AppConfig, get_config
from .fetcher import build_date_range, build_post_data, fetch_monitors
from .models import AggregatedSite, MemoryCache, RawMonitor, SiteState, StatusStore
from .presenter import change_site

logger = logging.getLogger(__name__)


def request_dates(days: int, oldest_first: bool = False, today: Optional[date] = None) -> List[date]:
    """请求的日期列表，决定 daily 的顺序"""
    dates = build_date_range(days, today)
    if oldest_first:
        dates.reverse()
    return dates


def cache_hit_delay_seconds(config: AppConfig) -> float:
    """缓存命中时的随机延迟（秒）"""
    low = config.cache.hit_delay_min_ms
    high = max(config.cache.hit_delay_max_ms, low)
    return random.randint(low, high) / 1000


async def get_site_data(
    api_key: str,
    days: int,
    cache: MemoryCache,
    status: StatusStore,
    config: Optional[AppConfig] = None,
    today: Optional[date] = None,
) -> List[AggregatedSite]:
    """
    获取站点数据

    Args:
        api_key: UptimeRobot API key（经代理时会被服务端 key 覆盖）
        days: 天数
        cache: 站点数据缓存
        status: 站点状态
        config: 配置，默认为全局配置
        today: 基准日期（测试用）

    Returns:
        聚合后的站点列表

    Raises:
        拉取失败时状态置为 wrong 并重新抛出
    """
    if config is None:
        config = get_config()

    try:
        status.change_site_state(SiteState.LOADING)

        dates = request_dates(days, config.sites.oldest_first, today)

        cached = await cache.get_fresh(config.cache.ttl_seconds, dates)
        if cached is not None:
            delay = cache_hit_delay_seconds(config)
            if delay > 0:
                await asyncio.sleep(delay)
            logger.info("Serving monitors from cache")
            sites = process_monitors(cached, dates, config.sites.sort)
            change_site(sites, status)
            return sites

        body = await fetch_monitors(
            build_post_data(api_key, dates),
            api_url=config.uptimerobot.api_url,
            timeout=config.uptimerobot.timeout,
        )

        monitors = [RawMonitor(**m) for m in body.get("monitors") or []]
        if body.get("monitors") is not None:
            await cache.set_site_data(monitors, dates)

        sites = process_monitors(monitors, dates, config.sites.sort)
        change_site(sites, status)
        logger.info(f"Fetched {len(sites)} monitors for the last {days} days")
        return sites
    except Exception as e:
        status.change_site_state(SiteState.WRONG)
        logger.error(f"Failed to get monitor data: {e}")
        raise
