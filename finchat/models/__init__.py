"""数据模型包"""

from finchat.models.chart import (
    ChartKind,
    DataPoint,
    ChartMargin,
    RenderOptions,
    ChartDescriptor,
    ChartOutput
)
from finchat.models.message import (
    ParseResult,
    RenderedMessage
)
from finchat.models.response import (
    MessageRequest,
    BatchMessageRequest,
    ParseResponse,
    RenderResponse,
    PromptResponse
)

__all__ = [
    # Chart
    "ChartKind",
    "DataPoint",
    "ChartMargin",
    "RenderOptions",
    "ChartDescriptor",
    "ChartOutput",
    # Message
    "ParseResult",
    "RenderedMessage",
    # Response
    "MessageRequest",
    "BatchMessageRequest",
    "ParseResponse",
    "RenderResponse",
    "PromptResponse",
]
