"""
数据模型定义

包括：
- UptimeRobot 原始数据模型
- 聚合后的站点模型和 API 响应模型
- 内存缓存与站点状态（全局状态）
"""

import asyncio
import time
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# UptimeRobot 原始数据
# =============================================================================

class LogEntry(BaseModel):
    """监控日志（type: 1=down, 2=up）"""
    type: int
    datetime: int
    duration: int = 0


class RawMonitor(BaseModel):
    """getMonitors 返回的单个监控项"""
    id: int
    friendly_name: str
    url: Optional[str] = None
    status: int
    custom_uptime_ranges: str = ""
    logs: List[LogEntry] = Field(default_factory=list)


# =============================================================================
# 聚合结果
# =============================================================================

class Downtime(BaseModel):
    """故障统计"""
    times: int = 0
    duration: int = 0


class DailyBucket(BaseModel):
    """单日可用率"""
    date: date
    uptime: float
    down: Downtime = Field(default_factory=Downtime)


class AggregatedSite(BaseModel):
    """站点聚合结果"""
    id: int
    name: str
    url: Optional[str] = None
    average: float
    daily: List[DailyBucket] = Field(default_factory=list)
    total: Downtime = Field(default_factory=Downtime)
    status: str = "unknown"  # ok|down|unknown


# =============================================================================
# API 响应模型
# =============================================================================

class SiteState(str, Enum):
    """全局站点状态"""
    LOADING = "loading"
    OK = "ok"
    DEGRADED = "degraded"
    CRITICAL = "critical"
    ERROR = "error"
    WRONG = "wrong"


class SiteOverview(BaseModel):
    """状态总览"""
    count: int = 0
    ok_count: int = 0
    down_count: int = 0
    unknown_count: int = 0


class DayTile(BaseModel):
    """时间线上的单日方块"""
    date: date
    state: str  # normal|none|error
    text: str
    uptime: float
    down: Downtime


class SiteTile(BaseModel):
    """站点卡片"""
    id: int
    name: str
    url: Optional[str] = None
    status: str
    status_text: str
    average: float
    note: str
    total: Downtime
    daily: List[DayTile] = Field(default_factory=list)


class StatusResponse(BaseModel):
    """GET /api/status 响应"""
    state: SiteState
    overview: SiteOverview
    favicon: str


class SitesResponse(StatusResponse):
    """GET /api/sites 响应"""
    days: int
    sites: List[SiteTile] = Field(default_factory=list)


# =============================================================================
# 内存缓存（全局状态）
# =============================================================================

class CacheEntry(BaseModel):
    """缓存条目：原始监控列表 + 请求的日期列表 + 采集时间戳（秒）"""
    data: List[RawMonitor]
    dates: List[date] = Field(default_factory=list)
    timestamp: float


class MemoryCache:
    """
    站点数据缓存

    只有一个全局槽位，成功拉取后整体覆盖，后写者胜。
    """

    def __init__(self):
        self._site_data: Optional[CacheEntry] = None
        self._lock = asyncio.Lock()

    async def get_site_data(self) -> Optional[CacheEntry]:
        """获取缓存条目"""
        async with self._lock:
            return self._site_data

    async def get_fresh(
        self,
        ttl_seconds: float,
        dates: Optional[List[date]] = None,
        now: Optional[float] = None,
    ) -> Optional[List[RawMonitor]]:
        """
        缓存未过期且日期列表一致时返回数据，否则返回 None

        custom_uptime_ranges 按请求的日期逐位排列，日期列表不同的缓存不能复用。
        """
        if now is None:
            now = time.time()
        async with self._lock:
            entry = self._site_data
        if entry is None:
            return None
        if dates is not None and entry.dates != list(dates):
            return None
        if now - entry.timestamp < ttl_seconds:
            return entry.data
        return None

    async def set_site_data(
        self,
        data: List[RawMonitor],
        dates: Optional[List[date]] = None,
        timestamp: Optional[float] = None,
    ):
        """写入缓存（整体替换）"""
        entry = CacheEntry(
            data=data,
            dates=list(dates or []),
            timestamp=time.time() if timestamp is None else timestamp,
        )
        async with self._lock:
            self._site_data = entry

    async def clear(self):
        async with self._lock:
            self._site_data = None


class StatusStore:
    """站点状态（供前端展示状态总览和 favicon）"""

    def __init__(self):
        self.site_state: SiteState = SiteState.LOADING
        self.overview = SiteOverview()
        self.favicon: str = "./images/favicon.ico"

    def change_site_state(self, state: SiteState):
        self.site_state = state

    def change_site_overview(self, overview: SiteOverview):
        self.overview = overview

    def change_favicon(self, href: str):
        self.favicon = href

    def snapshot(self) -> StatusResponse:
        return StatusResponse(state=self.site_state, overview=self.overview, favicon=self.favicon)


# 全局实例
cache = MemoryCache()
status = StatusStore()
