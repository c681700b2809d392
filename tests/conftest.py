"""Pytest configuration and shared fixtures"""
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# 添加项目路径到 sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from uptime_status.config import AppConfig, CacheConfig, reset_config
from uptime_status.fetcher import local_midnight_ts
from uptime_status.models import MemoryCache, StatusStore


ENV_VARS = ["UPTIMEROBOT_API_KEY", "UPTIMEROBOT_READ_KEY", "GLOBAL_API", "SITE_SORT", "SHOW_LINKS"]

TODAY = date(2024, 5, 10)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """隔离环境变量和全局配置"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("UPTIME_STATUS_CONFIG", str(tmp_path / "missing.yaml"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """无缓存延迟的配置"""
    return AppConfig(cache=CacheConfig(hit_delay_min_ms=0, hit_delay_max_ms=0))


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def status():
    return StatusStore()


@pytest.fixture
def dates():
    """TODAY 起倒序 3 天"""
    return [TODAY - timedelta(days=d) for d in range(3)]


def make_monitor(monitor_id=1, name="Blog", status=2, ranges="100.000-99.500-98.250-99.250", logs=None, url=None):
    """构造 getMonitors 返回的单个监控项"""
    return {
        "id": monitor_id,
        "friendly_name": name,
        "url": url or f"https://{name.lower()}.example.com",
        "status": status,
        "custom_uptime_ranges": ranges,
        "logs": logs or [],
    }


def down_log(day, offset=3600, duration=300):
    """指定日期的 down 日志"""
    return {"type": 1, "datetime": local_midnight_ts(day) + offset, "duration": duration}
