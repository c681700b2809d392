"""
FastAPI 应用配置

配置 CORS、静态文件托管、路由注册。
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..config import get_config
from .routers import proxy, sites

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    创建 FastAPI 应用实例

    配置：
    - CORS 中间件
    - API 路由
    - 静态文件托管（前端）
    """
    config = get_config()

    app = FastAPI(
        title="Uptime Status",
        description="UptimeRobot 站点状态聚合服务",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(proxy.router)
    app.include_router(sites.router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "uptime-status"}

    # 静态文件托管（前端），必须在 API 路由之后挂载
    if config.frontend.enabled:
        frontend_path = Path(config.frontend.path)
        if frontend_path.exists():
            app.mount("/", StaticFiles(directory=str(frontend_path), html=True), name="frontend")
            logger.info(f"Serving frontend from {frontend_path}")
        else:
            logger.warning(f"Frontend path not found: {frontend_path}")

    return app


# 默认应用实例（uvicorn uptime_status.api.app:app）
app = create_app()
