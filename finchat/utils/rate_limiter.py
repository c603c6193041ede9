"""速率限制器"""

import time
from collections import defaultdict
from typing import Dict, List

from finchat.core.config import settings
from finchat.utils.logger import log


class RateLimiter:
    """滑动窗口速率限制器"""

    def __init__(self, max_requests: int = 100, time_window: int = 60):
        """
        初始化速率限制器

        Args:
            max_requests: 时间窗口内最大请求数
            time_window: 时间窗口（秒）
        """
        self.max_requests = max_requests
        self.time_window = time_window
        self.requests: Dict[str, List[float]] = defaultdict(list)

    def _prune(self, key: str, now: float) -> None:
        self.requests[key] = [
            ts for ts in self.requests[key]
            if now - ts < self.time_window
        ]

    def is_allowed(self, key: str) -> bool:
        """
        检查是否允许请求，允许时记录本次请求

        Args:
            key: 限流键（如客户端 IP）
        """
        now = time.time()
        self._prune(key, now)

        if len(self.requests[key]) >= self.max_requests:
            log.warning(f"速率限制触发: {key}")
            return False

        self.requests[key].append(now)
        return True

    def get_remaining(self, key: str) -> int:
        """获取剩余请求数"""
        self._prune(key, time.time())
        return max(0, self.max_requests - len(self.requests[key]))

    def reset(self) -> None:
        """清空所有记录"""
        self.requests.clear()


# 全局限流器
_rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_requests,
    time_window=settings.rate_limit_window_seconds
)


def get_rate_limiter() -> RateLimiter:
    """获取全局限流器"""
    return _rate_limiter
