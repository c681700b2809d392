"""
站点状态汇总与展示数据

根据聚合结果更新全局站点状态、状态总览和 favicon，
并生成前端时间线和站点卡片需要的文案。
"""

import logging
from typing import List, Tuple

from .models import (
    AggregatedSite, DailyBucket, DayTile, SiteOverview, SiteState, SiteTile, StatusStore
)

logger = logging.getLogger(__name__)

FAVICON_OK = "./images/favicon.ico"
FAVICON_DOWN = "./images/favicon-down.ico"

STATUS_TEXT = {
    "ok": "Operational",
    "unknown": "Unknown",
    "down": "Down",
}


def rollup_state(sites: List[AggregatedSite]) -> SiteState:
    """全部正常为 ok，部分正常为 degraded，全部异常为 critical"""
    statuses = [site.status for site in sites]
    if all(s == "ok" for s in statuses):
        return SiteState.OK
    if any(s == "ok" for s in statuses):
        return SiteState.DEGRADED
    return SiteState.CRITICAL


def count_statuses(sites: List[AggregatedSite]) -> SiteOverview:
    """按状态计数"""
    return SiteOverview(
        count=len(sites),
        ok_count=sum(1 for s in sites if s.status == "ok"),
        down_count=sum(1 for s in sites if s.status == "down"),
        unknown_count=sum(1 for s in sites if s.status == "unknown"),
    )


def change_site(sites: List[AggregatedSite], status: StatusStore):
    """
    更新站点状态

    任何异常只记录日志并把状态降级为 error，不向上抛出。
    """
    try:
        state = rollup_state(sites)
        status.change_favicon(FAVICON_OK if state == SiteState.OK else FAVICON_DOWN)
        status.change_site_state(state)
        status.change_site_overview(count_statuses(sites))
    except Exception as e:
        logger.error(f"Failed to update site status: {e}", exc_info=True)
        status.change_site_state(SiteState.ERROR)


def format_duration(seconds: int) -> str:
    """秒数转为可读时长，如 1d 2h 3m"""
    seconds = max(int(seconds or 0), 0)
    if seconds < 60:
        return f"{seconds}s"

    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs and not days:
        parts.append(f"{secs}s")
    return " ".join(parts)


def describe_day(bucket: DailyBucket) -> Tuple[str, str]:
    """单日方块的状态和提示文案"""
    if bucket.uptime >= 100:
        return "normal", f"Uptime {bucket.uptime}%"
    if bucket.uptime <= 0 and bucket.down.times == 0:
        return "none", "No data"
    return "error", (
        f"Downtime: {bucket.down.times} times, total {format_duration(bucket.down.duration)}, "
        f"uptime {bucket.uptime}%"
    )


def describe_site(site: AggregatedSite, days: int) -> str:
    """站点卡片底部的汇总文案"""
    if site.total.times:
        return (
            f"In the last {days} days: {site.total.times} downtime events, "
            f"total {format_duration(site.total.duration)}, average uptime {site.average}%"
        )
    return f"Average uptime {site.average}% in the last {days} days"


def build_tiles(sites: List[AggregatedSite], days: int, show_links: bool = False) -> List[SiteTile]:
    """生成站点卡片（show_links 关闭时不返回站点链接）"""
    tiles = []
    for site in sites:
        daily = []
        for bucket in site.daily:
            state, text = describe_day(bucket)
            daily.append(DayTile(
                date=bucket.date,
                state=state,
                text=text,
                uptime=bucket.uptime,
                down=bucket.down,
            ))
        tiles.append(SiteTile(
            id=site.id,
            name=site.name,
            url=site.url if show_links else None,
            status=site.status,
            status_text=STATUS_TEXT.get(site.status, "Down"),
            average=site.average,
            note=describe_site(site, days),
            total=site.total,
            daily=daily,
        ))
    return tiles
