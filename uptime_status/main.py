"""
主程序入口

加载配置、初始化日志并启动 REST API 服务。
"""

import logging
import sys
from pathlib import Path

import uvicorn

from . import __version__
from .config import get_config


def setup_logging():
    """配置日志"""
    config = get_config()

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    level = getattr(logging, config.logging.level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if config.logging.file:
        log_path = Path(config.logging.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(log_format))
        logging.getLogger().addHandler(file_handler)

    # 降低第三方库日志级别
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def main():
    """启动 API 服务"""
    from .api.app import create_app

    logger = logging.getLogger(__name__)

    setup_logging()
    config = get_config()
    logger.info(f"Uptime Status v{__version__}")
    logger.info(f"API={config.api.host}:{config.api.port}, upstream={config.uptimerobot.api_url}")
    if not config.uptimerobot.proxy_api_key:
        logger.warning("UPTIMEROBOT_API_KEY not set, /api/uptimerobot will answer 500")

    uvicorn.run(
        create_app(),
        host=config.api.host,
        port=config.api.port,
        log_level="info",
        access_log=False
    )


def cli():
    """命令行入口"""
    try:
        main()
    except KeyboardInterrupt:
        print("\nShutdown requested, exiting...")
        sys.exit(0)


if __name__ == "__main__":
    cli()
