"""启动脚本"""

import uvicorn
from finchat.core.config import settings
from finchat.utils.logger import log


if __name__ == "__main__":
    log.info("="*60)
    log.info("FinChat Charts - 启动中")
    log.info("="*60)
    log.info(f"服务地址: http://{settings.api_host}:{settings.api_port}")
    log.info(f"API 文档: http://{settings.api_host}:{settings.api_port}/docs")
    log.info(f"调试模式: {settings.debug}")
    log.info(f"去除图表引导语: {settings.strip_chart_filler}")
    log.info("="*60)

    uvicorn.run(
        "finchat.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info"
    )
