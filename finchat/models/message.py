"""消息解析相关模型"""

from typing import Optional
from pydantic import BaseModel, Field
from finchat.models.chart import ChartDescriptor, ChartOutput


class ParseResult(BaseModel):
    """消息解析结果"""
    prose: str = Field(..., description="去除图表片段后的正文")
    chart: Optional[ChartDescriptor] = Field(None, description="图表描述（仅当提取且校验通过时存在）")
    matched_by: Optional[str] = Field(None, description="命中的提取策略")


class RenderedMessage(BaseModel):
    """解析并渲染后的消息"""
    prose: str = Field(..., description="正文")
    chart: Optional[ChartDescriptor] = Field(None, description="图表描述")
    rendered: Optional[ChartOutput] = Field(None, description="图表输出")
