"""系统配置管理"""

from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """系统配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # 消息解析配置
    strip_chart_filler: bool = False
    max_message_chars: int = 100_000
    fenced_block_tags: List[str] = ["json", "json5", "chart"]

    # 图表渲染配置
    default_chart_height: int = 400

    # 限流配置
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60

    # 服务器配置
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = True

    # 日志配置
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # 确保日志目录存在
        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)


# 全局配置实例
settings = Settings()
