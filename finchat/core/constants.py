"""系统常量定义"""

from typing import Dict, List, Tuple

# 图表类型
CHART_KINDS: Tuple[str, ...] = ("pie", "donut", "bar", "line", "area", "scatter")

# 默认配色
DEFAULT_COLORS: List[str] = [
    "#6366f1",
    "#f43f5e",
    "#8b5cf6",
    "#ec4899",
    "#3b82f6",
    "#14b8a6",
    "#f59e0b",
    "#84cc16",
    "#06b6d4",
    "#a855f7",
]

# 默认边距
DEFAULT_MARGIN: Dict[str, int] = {"top": 40, "right": 30, "bottom": 60, "left": 60}

# 环形图内径占外径比例
DONUT_INNER_RATIO = 0.6

# 柱状图 Y 轴留白
BAR_HEADROOM = 1.1

# 图表引导语开头
FILLER_LEADS: Tuple[str, ...] = (
    "here's",
    "heres",
    "here is",
    "here are",
    "below is",
    "below are",
    "this shows",
    "this chart",
    "the chart",
    "showing",
    "displaying",
    "would you like",
)

# 图表相关词
FILLER_KEYWORDS: Tuple[str, ...] = (
    "chart",
    "graph",
    "visual",
    "plot",
    "breakdown",
    "diagram",
)
