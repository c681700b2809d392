"""
站点状态 API

提供聚合后的站点时间线和全局状态。
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status as http_status

from ...config import AppConfig
from ...models import MemoryCache, SitesResponse, StatusResponse, StatusStore
from ...presenter import build_tiles
from ...service import get_site_data
from ..dependencies import get_app_config, get_cache, get_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sites"])

WRONG_MESSAGE = "Rate limit exceeded or request error. Please refresh and try again."


@router.get("/sites", response_model=SitesResponse)
async def list_sites(
    days: Optional[int] = Query(None, ge=1, le=90, description="天数，默认取配置"),
    config: AppConfig = Depends(get_app_config),
    cache: MemoryCache = Depends(get_cache),
    status: StatusStore = Depends(get_status),
):
    """
    获取站点时间线

    缓存 60s 内直接返回缓存结果，否则拉取 UptimeRobot。
    """
    if days is None:
        days = config.uptimerobot.days

    try:
        sites = await get_site_data(config.uptimerobot.api_key, days, cache, status, config=config)
    except Exception as e:
        raise HTTPException(
            status_code=http_status.HTTP_502_BAD_GATEWAY,
            detail=WRONG_MESSAGE
        ) from e

    return SitesResponse(
        state=status.site_state,
        overview=status.overview,
        favicon=status.favicon,
        days=days,
        sites=build_tiles(sites, days, show_links=config.sites.show_links),
    )


@router.get("/status", response_model=StatusResponse)
async def get_site_status(status: StatusStore = Depends(get_status)):
    """获取当前全局状态"""
    return status.snapshot()
