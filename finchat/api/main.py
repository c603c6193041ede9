"""FastAPI 主应用"""

from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from finchat.core.config import settings
from finchat.core.prompts import INITIAL_PROMPT, SYSTEM_PROMPT
from finchat.engines.chart_engine import get_chart_engine, render_message
from finchat.models.chart import ChartDescriptor, ChartOutput
from finchat.models.message import ParseResult
from finchat.models.response import (
    BatchMessageRequest,
    MessageRequest,
    ParseResponse,
    PromptResponse,
    RenderResponse
)
from finchat.parsers.message_parser import parse_message_content
from finchat.utils.logger import log
from finchat.utils.rate_limiter import get_rate_limiter


# 创建应用
app = FastAPI(
    title="FinChat Charts",
    description="助手回复解析与图表渲染服务",
    version="0.1.0",
    debug=settings.debug
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _check_rate_limit(req: Request) -> None:
    rate_limiter = get_rate_limiter()
    client_ip = req.client.host if req.client else "unknown"
    if not rate_limiter.is_allowed(client_ip):
        raise HTTPException(
            status_code=429,
            detail=f"请求过于频繁，请稍后再试。剩余配额: {rate_limiter.get_remaining(client_ip)}"
        )


def _to_parse_response(result: ParseResult) -> ParseResponse:
    return ParseResponse(
        prose=result.prose,
        chart=result.chart.to_payload() if result.chart else None,
        matched_by=result.matched_by
    )


@app.get("/")
async def root():
    """根路径"""
    return {
        "name": "FinChat Charts",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "healthy"}


@app.get("/prompts/system", response_model=PromptResponse)
async def get_prompts():
    """获取助手提示词"""
    return PromptResponse(system_prompt=SYSTEM_PROMPT, initial_prompt=INITIAL_PROMPT)


@app.post("/messages/parse", response_model=ParseResponse)
async def parse_message(request: MessageRequest, req: Request):
    """解析单条助手回复，分离正文与图表数据"""
    _check_rate_limit(req)
    result = parse_message_content(request.content, strip_filler=request.strip_filler)
    return _to_parse_response(result)


@app.post("/messages/parse/batch", response_model=List[ParseResponse])
async def parse_messages(request: BatchMessageRequest, req: Request):
    """批量解析助手回复，保持原有顺序"""
    _check_rate_limit(req)
    log.info(f"批量解析消息: {len(request.messages)} 条")
    return [
        _to_parse_response(parse_message_content(content, strip_filler=request.strip_filler))
        for content in request.messages
    ]


@app.post("/messages/render", response_model=RenderResponse)
async def render_chat_message(request: MessageRequest, req: Request):
    """解析助手回复并渲染其中的图表"""
    _check_rate_limit(req)
    try:
        rendered = render_message(request.content, strip_filler=request.strip_filler)
    except Exception as e:
        log.error(f"消息渲染失败: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return RenderResponse(
        prose=rendered.prose,
        chart=rendered.chart.to_payload() if rendered.chart else None,
        rendered=rendered.rendered
    )


@app.post("/charts/render", response_model=ChartOutput)
async def render_chart(payload: Dict[str, Any]):
    """直接渲染图表数据（线上格式）"""
    descriptor = ChartDescriptor.from_payload(payload)
    if descriptor is None:
        raise HTTPException(status_code=422, detail="图表数据不合法")

    try:
        return get_chart_engine().render(descriptor)
    except ValueError as e:
        log.error(f"图表渲染失败: {e}")
        raise HTTPException(status_code=422, detail=str(e))


if __name__ == "__main__":
    import uvicorn

    log.info(f"启动服务: {settings.api_host}:{settings.api_port}")

    uvicorn.run(
        "finchat.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
