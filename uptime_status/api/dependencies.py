"""
依赖注入模块

提供 FastAPI 依赖项。
"""

from ..config import AppConfig, get_config
from ..models import MemoryCache, StatusStore, cache, status


async def get_app_config() -> AppConfig:
    """获取配置实例"""
    return get_config()


async def get_cache() -> MemoryCache:
    """获取站点数据缓存"""
    return cache


async def get_status() -> StatusStore:
    """获取站点状态"""
    return status
