"""
配置加载模块

从 config.yaml 加载配置，支持 Pydantic 验证和环境变量覆盖。
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_URL = "https://api.uptimerobot.com/v2/getMonitors"


class UptimeRobotConfig(BaseModel):
    """UptimeRobot 接口配置"""
    api_url: str = DEFAULT_API_URL  # 站点数据拉取地址（可指向本服务的代理）
    upstream_url: str = DEFAULT_API_URL  # 代理转发的真实上游地址
    api_key: str = ""  # 直连时使用的只读 key
    proxy_api_key: Optional[str] = None  # 代理注入的服务端 key
    timeout: float = 10.0
    days: int = 60


class CacheConfig(BaseModel):
    """缓存配置"""
    ttl_seconds: int = 60
    hit_delay_min_ms: int = 500
    hit_delay_max_ms: int = 1200


class SitesConfig(BaseModel):
    """站点展示配置"""
    sort: List[str] = Field(default_factory=list)
    show_links: bool = False
    oldest_first: bool = False


class APIConfig(BaseModel):
    """API 服务配置"""
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: List[str] = ["http://localhost:8080", "http://127.0.0.1:8080"]


class FrontendConfig(BaseModel):
    """前端配置"""
    path: str = "frontend"
    enabled: bool = True


class LoggingConfig(BaseModel):
    """日志配置"""
    level: str = "INFO"
    file: Optional[str] = None


class AppConfig(BaseModel):
    """应用配置（完整配置）"""
    uptimerobot: UptimeRobotConfig = Field(default_factory=UptimeRobotConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    sites: SitesConfig = Field(default_factory=SitesConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    frontend: FrontendConfig = Field(default_factory=FrontendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class EnvOverrides(BaseSettings):
    """环境变量覆盖项（未设置的保持 None，不覆盖 YAML）"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    uptimerobot_api_key: Optional[str] = None
    uptimerobot_read_key: Optional[str] = None
    global_api: Optional[str] = None
    site_sort: Optional[str] = None
    show_links: Optional[bool] = None


def parse_site_sort(value: Optional[str]) -> List[str]:
    """解析逗号分隔的站点优先级列表"""
    if not value:
        return []
    return [name.strip() for name in value.split(",")]


def apply_env_overrides(config: AppConfig, env: EnvOverrides) -> AppConfig:
    """用环境变量覆盖配置"""
    if env.uptimerobot_api_key:
        config.uptimerobot.proxy_api_key = env.uptimerobot_api_key
    if env.uptimerobot_read_key:
        config.uptimerobot.api_key = env.uptimerobot_read_key
    if env.global_api:
        config.uptimerobot.api_url = env.global_api
    if env.site_sort is not None:
        config.sites.sort = parse_site_sort(env.site_sort)
    if env.show_links is not None:
        config.sites.show_links = env.show_links
    return config


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    加载配置文件

    优先级：
    1. 参数指定的路径
    2. 环境变量 UPTIME_STATUS_CONFIG
    3. 默认路径 config.yaml

    文件不存在时使用默认配置，最后叠加环境变量覆盖。
    """
    if config_path is None:
        config_path = os.environ.get("UPTIME_STATUS_CONFIG", "config.yaml")

    config = AppConfig()

    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
            if raw_config:
                config = AppConfig(**raw_config)

    return apply_env_overrides(config, EnvOverrides())


# 全局配置实例（延迟加载）
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """获取全局配置实例（单例模式）"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config():
    """重置配置（主要用于测试）"""
    global _config
    _config = None
