"""消息解析"""

from finchat.parsers.message_parser import (
    EXTRACTION_STRATEGIES,
    Candidate,
    decode_fragment,
    extract_chart,
    find_fenced_blocks,
    find_kind_fragments,
    find_widest_braces,
    looks_like_chart_data,
    normalize_fragment,
    parse_message_content,
    strip_filler_lines
)

__all__ = [
    "EXTRACTION_STRATEGIES",
    "Candidate",
    "decode_fragment",
    "extract_chart",
    "find_fenced_blocks",
    "find_kind_fragments",
    "find_widest_braces",
    "looks_like_chart_data",
    "normalize_fragment",
    "parse_message_content",
    "strip_filler_lines",
]
