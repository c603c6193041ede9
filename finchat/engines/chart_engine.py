"""Chart Engine - 图表渲染引擎"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from finchat.core.config import settings
from finchat.core.constants import BAR_HEADROOM, DEFAULT_COLORS, DEFAULT_MARGIN, DONUT_INNER_RATIO
from finchat.models.chart import ChartDescriptor, ChartOutput, DataPoint, RenderOptions
from finchat.models.message import RenderedMessage
from finchat.parsers.message_parser import parse_message_content
from finchat.utils.logger import log

PIE_OUTER_RADIUS = 70


class ChartEngine:
    """图表渲染引擎，将 ChartDescriptor 转为 ECharts option"""

    def render(self, descriptor: ChartDescriptor) -> ChartOutput:
        """
        渲染图表

        Args:
            descriptor: 已校验的图表描述

        Returns:
            ChartOutput: 图表输出
        """
        log.info(f"渲染图表: type={descriptor.kind}, points={len(descriptor.points)}")

        options = descriptor.options
        colors = options.colors or DEFAULT_COLORS

        if descriptor.kind in ("pie", "donut"):
            option = self._generate_pie_chart(descriptor, colors)
        elif descriptor.kind == "bar":
            option = self._generate_bar_chart(descriptor)
        elif descriptor.kind == "line":
            option = self._generate_line_chart(descriptor)
        elif descriptor.kind == "area":
            option = self._generate_area_chart(descriptor, colors)
        elif descriptor.kind == "scatter":
            option = self._generate_scatter_chart(descriptor, colors)
        else:
            raise ValueError(f"不支持的图表类型: {descriptor.kind}")

        option["color"] = list(colors)
        if options.title:
            option["title"] = {"text": options.title, "left": "center"}

        return ChartOutput(
            type=descriptor.kind,
            title=options.title,
            option=option,
            width=options.width,
            height=options.height or settings.default_chart_height
        )

    def _parse_date(self, value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        # 统一为 naive UTC，避免带时区与不带时区的日期无法比较
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    def _dated_points(self, points: List[DataPoint]) -> Optional[List[DataPoint]]:
        """所有点都有合法日期时返回按日期排序的副本，否则返回 None"""
        keyed: List[Tuple[datetime, DataPoint]] = []
        for point in points:
            parsed = self._parse_date(point.date)
            if parsed is None:
                return None
            keyed.append((parsed, point))
        keyed.sort(key=lambda item: item[0])
        return [point for _, point in keyed]

    def _grid(self, options: RenderOptions) -> Dict[str, Any]:
        margin = options.margin.model_dump() if options.margin else DEFAULT_MARGIN
        return {**margin, "containLabel": True}

    def _axes(
        self,
        descriptor: ChartDescriptor,
        dated: Optional[List[DataPoint]]
    ) -> Tuple[Dict[str, Any], Dict[str, Any], List[DataPoint]]:
        """构建 X/Y 轴，有日期时使用时间轴"""
        options = descriptor.options
        if dated is not None:
            x_axis = {"type": "time", "name": options.x_axis}
            ordered = dated
        else:
            x_axis = {
                "type": "category",
                "data": [p.label for p in descriptor.points],
                "name": options.x_axis
            }
            ordered = list(descriptor.points)
        y_axis = {"type": "value", "name": options.y_axis}
        return x_axis, y_axis, ordered

    def _series_values(self, ordered: List[DataPoint], dated: bool) -> List[Any]:
        if dated:
            return [[p.date, p.value] for p in ordered]
        return [p.value for p in ordered]

    def _generate_pie_chart(self, descriptor: ChartDescriptor, colors: List[str]) -> Dict[str, Any]:
        """生成饼图 / 环形图"""
        # 排序副本，保留原始提取顺序
        slices = sorted(descriptor.points, key=lambda p: p.value, reverse=True)

        if descriptor.kind == "donut":
            inner = round(PIE_OUTER_RADIUS * DONUT_INNER_RATIO)
            radius: Any = [f"{inner}%", f"{PIE_OUTER_RADIUS}%"]
        else:
            radius = f"{PIE_OUTER_RADIUS}%"

        pie_data = [{"name": p.label, "value": p.value} for p in slices]

        return {
            "tooltip": {"trigger": "item", "formatter": "{b}: ${c} ({d}%)"},
            "legend": {"orient": "vertical", "left": "left"},
            "series": [
                {
                    "type": "pie",
                    "radius": radius,
                    "padAngle": 2,
                    "itemStyle": {"borderRadius": 4, "borderColor": "#fff", "borderWidth": 2},
                    "label": {"formatter": "{b} (${c})\n{d}%"},
                    "data": pie_data,
                    "emphasis": {
                        "itemStyle": {
                            "shadowBlur": 10,
                            "shadowOffsetX": 0,
                            "shadowColor": "rgba(0, 0, 0, 0.5)"
                        }
                    }
                }
            ]
        }

    def _generate_bar_chart(self, descriptor: ChartDescriptor) -> Dict[str, Any]:
        """生成柱状图"""
        options = descriptor.options
        values = [p.value for p in descriptor.points]

        y_axis: Dict[str, Any] = {"type": "value", "name": options.y_axis}
        top = max(values)
        # 有负数时交给 ECharts 自动计算范围
        if min(values) >= 0 and top > 0:
            y_axis["min"] = 0
            y_axis["max"] = round(top * BAR_HEADROOM, 2)

        return {
            "tooltip": {"trigger": "axis"},
            "grid": self._grid(options),
            "xAxis": {
                "type": "category",
                "data": [p.label for p in descriptor.points],
                "name": options.x_axis,
                "axisLabel": {"rotate": 45}
            },
            "yAxis": y_axis,
            "series": [
                {
                    "type": "bar",
                    "data": values
                }
            ]
        }

    def _generate_line_chart(self, descriptor: ChartDescriptor) -> Dict[str, Any]:
        """生成折线图"""
        dated = self._dated_points(descriptor.points)
        x_axis, y_axis, ordered = self._axes(descriptor, dated)

        return {
            "tooltip": {"trigger": "axis"},
            "grid": self._grid(descriptor.options),
            "xAxis": x_axis,
            "yAxis": y_axis,
            "series": [
                {
                    "type": "line",
                    "data": self._series_values(ordered, dated is not None),
                    "smooth": True,
                    "symbolSize": 8
                }
            ]
        }

    def _generate_area_chart(self, descriptor: ChartDescriptor, colors: List[str]) -> Dict[str, Any]:
        """生成面积图"""
        option = self._generate_line_chart(descriptor)
        for series in option["series"]:
            series["areaStyle"] = {
                "color": {
                    "type": "linear",
                    "x": 0,
                    "y": 0,
                    "x2": 0,
                    "y2": 1,
                    "colorStops": [
                        {"offset": 0, "color": colors[0]},
                        {"offset": 1, "color": "transparent"}
                    ]
                },
                "opacity": 0.4
            }
        return option

    def _generate_scatter_chart(self, descriptor: ChartDescriptor, colors: List[str]) -> Dict[str, Any]:
        """生成散点图，每个点按配色轮换着色"""
        dated = self._dated_points(descriptor.points)
        x_axis, y_axis, ordered = self._axes(descriptor, dated)
        values = self._series_values(ordered, dated is not None)

        scatter_data = [
            {"value": value, "itemStyle": {"color": colors[i % len(colors)]}}
            for i, value in enumerate(values)
        ]

        return {
            "tooltip": {"trigger": "item"},
            "grid": self._grid(descriptor.options),
            "xAxis": x_axis,
            "yAxis": y_axis,
            "series": [
                {
                    "type": "scatter",
                    "symbolSize": 10,
                    "data": scatter_data
                }
            ]
        }


# 全局单例
_chart_engine = None


def get_chart_engine() -> ChartEngine:
    """获取 ChartEngine 单例"""
    global _chart_engine
    if _chart_engine is None:
        _chart_engine = ChartEngine()
    return _chart_engine


def render_message(text: str, strip_filler: Optional[bool] = None) -> RenderedMessage:
    """解析消息并渲染其中的图表"""
    parsed = parse_message_content(text, strip_filler=strip_filler)
    rendered = None
    if parsed.chart is not None:
        rendered = get_chart_engine().render(parsed.chart)
    return RenderedMessage(prose=parsed.prose, chart=parsed.chart, rendered=rendered)
