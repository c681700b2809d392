"""
站点数据聚合

把 getMonitors 的原始监控项整理成按天分桶的可用率时间线。
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, Dict, List, Optional

from .models import AggregatedSite, DailyBucket, Downtime, RawMonitor

logger = logging.getLogger(__name__)

LOG_TYPE_DOWN = 1

STATUS_CODES = {
    2: "ok",
    9: "down",
}


def format_number(value: Any) -> float:
    """可用率保留一位小数（截断，避免 99.96 显示为 100）"""
    try:
        number = Decimal(str(value).strip())
        if not number.is_finite():
            return 0.0
        return float(number.quantize(Decimal("0.1"), rounding=ROUND_DOWN))
    except (InvalidOperation, ValueError):
        return 0.0


def classify_status(code: int) -> str:
    """监控状态码映射：2=ok，9=down，其余 unknown"""
    return STATUS_CODES.get(code, "unknown")


def log_day(timestamp: int) -> date:
    """日志开始时间对应的本地日期"""
    return datetime.fromtimestamp(timestamp).date()


def sort_monitors(monitors: List[RawMonitor], site_sort: Optional[List[str]]) -> List[RawMonitor]:
    """
    按配置的站点优先级排序

    名称在列表中越靠前优先级越高，未匹配的站点优先级为 0，
    排在已匹配站点之后并保持原有顺序。排序失败时保持原顺序。
    """
    if not site_sort:
        return monitors

    try:
        names = [name.strip() for name in site_sort]
        priority = {}
        for index, name in enumerate(names):
            priority.setdefault(name, len(names) - index)
        return sorted(
            monitors,
            key=lambda m: priority.get(m.friendly_name.strip(), 0),
            reverse=True,
        )
    except Exception as e:
        logger.error(f"Failed to sort monitors by site priority: {e}", exc_info=True)
        return monitors


def aggregate_monitor(monitor: RawMonitor, dates: List[date]) -> AggregatedSite:
    """
    聚合单个监控项

    custom_uptime_ranges 的最后一项是汇总可用率，其余按位置对应 dates。
    只统计 type=1（down）的日志，按本地日期落到对应的日桶。
    """
    ranges = monitor.custom_uptime_ranges.split("-")
    average = format_number(ranges.pop())

    daily: List[DailyBucket] = []
    index_by_day: Dict[date, int] = {}
    for index, day in enumerate(dates):
        index_by_day[day] = index
        daily.append(DailyBucket(
            date=day,
            uptime=format_number(ranges[index]) if index < len(ranges) else 0.0,
        ))

    total = Downtime()
    for log in monitor.logs:
        if log.type != LOG_TYPE_DOWN:
            continue
        index = index_by_day.get(log_day(log.datetime))
        if index is None:
            logger.debug(f"Monitor {monitor.id}: log at {log.datetime} outside requested days, skipped")
            continue
        bucket = daily[index].down
        bucket.times += 1
        bucket.duration += log.duration
        total.times += 1
        total.duration += log.duration

    return AggregatedSite(
        id=monitor.id,
        name=monitor.friendly_name,
        url=monitor.url,
        average=average,
        daily=daily,
        total=total,
        status=classify_status(monitor.status),
    )


def process_monitors(
    monitors: List[RawMonitor],
    dates: List[date],
    site_sort: Optional[List[str]] = None,
) -> List[AggregatedSite]:
    """
    聚合全部监控项

    Args:
        monitors: 原始监控列表
        dates: 请求的日期列表（与 custom_uptime_ranges 顺序一致）
        site_sort: 站点优先级列表（可选）
    """
    ordered = sort_monitors(list(monitors), site_sort)
    return [aggregate_monitor(monitor, dates) for monitor in ordered]
