"""API 请求 / 响应模型"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from finchat.models.chart import ChartOutput


class MessageRequest(BaseModel):
    """单条消息解析请求"""
    content: str = Field(..., description="助手回复原文")
    strip_filler: Optional[bool] = Field(None, description="是否去除图表引导语，为空时使用配置")


class BatchMessageRequest(BaseModel):
    """批量消息解析请求"""
    messages: List[str] = Field(..., description="助手回复原文列表")
    strip_filler: Optional[bool] = Field(None, description="是否去除图表引导语，为空时使用配置")


class ParseResponse(BaseModel):
    """消息解析响应"""
    prose: str = Field(..., description="正文")
    chart: Optional[Dict[str, Any]] = Field(None, description="图表数据（线上格式）")
    matched_by: Optional[str] = Field(None, description="命中的提取策略")


class RenderResponse(BaseModel):
    """消息渲染响应"""
    prose: str = Field(..., description="正文")
    chart: Optional[Dict[str, Any]] = Field(None, description="图表数据（线上格式）")
    rendered: Optional[ChartOutput] = Field(None, description="图表输出")


class PromptResponse(BaseModel):
    """提示词响应"""
    system_prompt: str = Field(..., description="系统提示词")
    initial_prompt: str = Field(..., description="开场白")
