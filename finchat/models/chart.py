"""图表相关模型"""

import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from finchat.utils.logger import log

ChartKind = Literal["pie", "donut", "bar", "line", "area", "scatter"]


class DataPoint(BaseModel):
    """单个数据点，允许携带额外字段（不参与渲染）"""
    model_config = ConfigDict(extra="allow")

    label: str = Field(..., description="类别 / X 轴标识")
    value: float = Field(..., description="数值，必须为有限数")
    category: Optional[str] = Field(None, description="分组标签")
    date: Optional[str] = Field(None, description="ISO-8601 日期，时间序列图表使用")

    @field_validator("label", mode="before")
    @classmethod
    def validate_label(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("label 必须为非空字符串")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: Any) -> float:
        # bool 是 int 的子类，需要单独排除；数字字符串不做转换
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"value 必须为数字: {v!r}")
        # 超出 float 范围的整数会在 isfinite 中抛出 OverflowError
        try:
            finite = math.isfinite(v)
        except OverflowError:
            finite = False
        if not finite:
            raise ValueError(f"value 必须为有限数: {v!r}")
        return v


class ChartMargin(BaseModel):
    """图表边距"""
    top: float = Field(..., ge=0, strict=True)
    right: float = Field(..., ge=0, strict=True)
    bottom: float = Field(..., ge=0, strict=True)
    left: float = Field(..., ge=0, strict=True)


class RenderOptions(BaseModel):
    """渲染选项，全部可选，缺省时使用渲染器默认值；给出的字段不做类型转换"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = Field(None, strict=True, description="图表标题")
    x_axis: Optional[str] = Field(None, alias="xAxis", strict=True, description="X 轴名称")
    y_axis: Optional[str] = Field(None, alias="yAxis", strict=True, description="Y 轴名称")
    colors: Optional[List[str]] = Field(None, strict=True, description="配色")
    height: Optional[float] = Field(None, gt=0, strict=True, description="高度（像素）")
    width: Optional[float] = Field(None, gt=0, strict=True, description="宽度（像素）")
    margin: Optional[ChartMargin] = Field(None, description="边距")


class ChartDescriptor(BaseModel):
    """
    从消息文本中提取的图表描述

    线上格式为 {"type": ..., "data": [...], "options": {...}}，
    要么整体合法，要么整体拒绝。
    """
    kind: ChartKind = Field(
        ...,
        validation_alias=AliasChoices("type", "kind"),
        serialization_alias="type",
        description="图表类型: pie, donut, bar, line, area, scatter"
    )
    points: List[DataPoint] = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("data", "points"),
        serialization_alias="data",
        description="数据点（保持提取顺序）"
    )
    render_options: Optional[RenderOptions] = Field(
        None,
        validation_alias=AliasChoices("options", "renderOptions", "render_options"),
        serialization_alias="options",
        description="渲染选项"
    )

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ChartDescriptor"]:
        """严格解码，任何校验错误都返回 None"""
        if not isinstance(payload, dict):
            return None
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            log.debug(f"图表数据校验失败: {e.error_count()} 个错误")
            return None

    def to_payload(self) -> Dict[str, Any]:
        """转为线上格式"""
        return self.model_dump(by_alias=True, exclude_none=True)

    @property
    def options(self) -> RenderOptions:
        return self.render_options or RenderOptions()


class ChartOutput(BaseModel):
    """图表输出"""
    type: str = Field(..., description="图表类型")
    title: Optional[str] = Field(None, description="图表标题")
    option: Dict[str, Any] = Field(..., description="ECharts option JSON")
    width: Optional[float] = Field(None, description="宽度（像素），为空时自适应容器")
    height: float = Field(..., description="高度（像素）")
