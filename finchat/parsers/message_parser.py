"""
Message Parser - 从助手回复中分离正文与图表数据

助手输出的格式没有强约束，图表 JSON 可能出现在 ```json 代码块中，
也可能直接嵌在正文里。按由严到宽的顺序依次尝试各提取策略，
第一个通过校验的候选片段胜出；全部失败时整段文本作为正文返回。
"""

import json
import re
from typing import Any, Callable, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

from finchat.core.config import settings
from finchat.core.constants import CHART_KINDS, FILLER_KEYWORDS, FILLER_LEADS
from finchat.models.chart import ChartDescriptor
from finchat.models.message import ParseResult
from finchat.utils.logger import log


class Candidate(NamedTuple):
    """候选片段及其在原文中的位置"""
    fragment: str
    start: int
    end: int


_KIND_ALTERNATION = "|".join(CHART_KINDS)

# "type": "pie" / "kind": "bar"
_KIND_KEY_RE = re.compile(rf'"(?:type|kind)"\s*:\s*"(?:{_KIND_ALTERNATION})"')

# 字符串字面量 | 闭合符前的多余逗号 | 结构符号两侧的空白
_TOKEN_RE = re.compile(r'("(?:\\.|[^"\\])*")|(\s*,\s*(?=[}\]]))|\s*([{}\[\],:])\s*')

_SMART_QUOTES = str.maketrans({
    "\u201c": '"',
    "\u201d": '"',
    "\u201e": '"',
    "\u2018": "'",
    "\u2019": "'",
})

_EXTRA_BLANK_LINES_RE = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")
_NOISE_LINE_RE = re.compile(r'^[\s{}\[\]"\',\d:]+$')

_INLINE_CHART_RE = re.compile(rf'\{{\s*"type"\s*:\s*"(?:{_KIND_ALTERNATION})"')
_TYPED_OBJECT_RE = re.compile(r'\{.*?"type".*?"data".*?\}', re.DOTALL)
_CHART_REQUEST_PHRASES = ("give me a", "create a", "here's a", "here is a")
_CHART_REQUEST_WORDS = ("chart", "graph", "visualization")


# ---------------------------------------------------------------------------
# 提取策略
# ---------------------------------------------------------------------------

def _fence_pattern(tags: Sequence[str]) -> "re.Pattern[str]":
    tag_alternation = "|".join(re.escape(tag) for tag in tags)
    return re.compile(
        rf"```[ \t]*(?:{tag_alternation})\b[ \t]*\r?\n?(.*?)```",
        re.DOTALL | re.IGNORECASE
    )


def find_fenced_blocks(text: str, tags: Optional[Sequence[str]] = None) -> Iterator[Candidate]:
    """查找标记为结构化数据的代码块，候选范围包含整个代码块"""
    pattern = _fence_pattern(tags or settings.fenced_block_tags)
    for match in pattern.finditer(text):
        yield Candidate(match.group(1).strip(), match.start(), match.end())


def _enclosing_open_brace(text: str, pos: int) -> int:
    """从头扫描到 pos，返回包住 pos 的左花括号位置（忽略字符串内的括号）"""
    open_positions: List[int] = []
    in_string = False
    escaped = False
    for i in range(pos):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"' or ch == "\n":
                # JSON 字符串不会跨行，正文中落单的引号不影响后续行
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            open_positions.append(i)
        elif ch == "}" and open_positions:
            open_positions.pop()
    return open_positions[-1] if open_positions else -1


def _balanced_end(text: str, start: int) -> int:
    """从 start 处的左花括号开始，返回配对右花括号之后的位置（忽略字符串内的括号）"""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def find_kind_fragments(text: str) -> Iterator[Candidate]:
    """查找包含合法图表类型字段的对象片段，按出现顺序逐个返回"""
    seen: Set[Tuple[int, int]] = set()
    for match in _KIND_KEY_RE.finditer(text):
        start = _enclosing_open_brace(text, match.start())
        if start == -1:
            continue
        end = _balanced_end(text, start)
        if end == -1 or (start, end) in seen:
            continue
        seen.add((start, end))
        yield Candidate(text[start:end], start, end)


def find_widest_braces(text: str) -> Iterator[Candidate]:
    """最后手段：第一个左花括号到最后一个右花括号"""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        yield Candidate(text[start:end + 1], start, end + 1)


ExtractionStrategy = Tuple[str, Callable[[str], Iterator[Candidate]]]

# 按优先级排列，越靠前越严格
EXTRACTION_STRATEGIES: List[ExtractionStrategy] = [
    ("fenced", find_fenced_blocks),
    ("kind_fragment", find_kind_fragments),
    ("widest_braces", find_widest_braces),
]


# ---------------------------------------------------------------------------
# 片段解码
# ---------------------------------------------------------------------------

def normalize_fragment(fragment: str) -> str:
    """
    整理不规范的 JSON 片段

    换行替换为空格、弯引号替换为直引号、去掉闭合符前的多余逗号、
    去掉结构符号两侧的空白；字符串字面量内部保持原样。
    """
    s = fragment.replace("\r", " ").replace("\n", " ").translate(_SMART_QUOTES)

    def _repl(match: "re.Match[str]") -> str:
        literal, trailing_comma, punct = match.groups()
        if literal is not None:
            return literal
        if trailing_comma is not None:
            return ""
        return punct

    return _TOKEN_RE.sub(_repl, s).strip()


def _decode_attempts(fragment: str) -> Iterator[str]:
    yield fragment
    normalized = normalize_fragment(fragment)
    if normalized != fragment:
        yield normalized
    # 整段被二次转义的情况: {\"type\": \"pie\", ...}
    if '\\"' in fragment:
        yield normalize_fragment(fragment.replace('\\"', '"'))


def decode_fragment(fragment: str) -> Optional[Any]:
    """依次尝试原样解析和整理后解析，全部失败返回 None"""
    for attempt in _decode_attempts(fragment):
        try:
            return json.loads(attempt)
        except (ValueError, RecursionError):
            continue
    return None


# ---------------------------------------------------------------------------
# 正文处理
# ---------------------------------------------------------------------------

def _collapse_blank_lines(text: str) -> str:
    return _EXTRA_BLANK_LINES_RE.sub("\n\n", text).strip()


def _is_filler_line(line: str) -> bool:
    lowered = line.strip().lower().replace("\u2019", "'").lstrip("*_#>- ")
    if not lowered.startswith(FILLER_LEADS):
        return False
    return any(word in lowered for word in FILLER_KEYWORDS)


def strip_filler_lines(prose: str) -> str:
    """去掉纯标点残留行以及 "here's a chart..." 之类的图表引导语"""
    kept = []
    for line in prose.split("\n"):
        if line.strip() and (_NOISE_LINE_RE.match(line) or _is_filler_line(line)):
            continue
        kept.append(line)
    return _collapse_blank_lines("\n".join(kept))


def looks_like_chart_data(text: str) -> bool:
    """粗略判断文本是否携带图表数据（不做校验）"""
    lowered = text.strip().lower()

    if any(p in lowered for p in _CHART_REQUEST_PHRASES) and any(
        w in lowered for w in _CHART_REQUEST_WORDS
    ):
        return bool(_TYPED_OBJECT_RE.search(lowered))

    return bool(_INLINE_CHART_RE.search(lowered))


# ---------------------------------------------------------------------------
# 入口
# ---------------------------------------------------------------------------

def extract_chart(text: str) -> Optional[Tuple[str, Candidate, ChartDescriptor]]:
    """
    按策略顺序提取图表

    Returns:
        (策略名, 候选片段, 图表描述)，没有合法图表时返回 None
    """
    tried: Set[str] = set()
    for name, finder in EXTRACTION_STRATEGIES:
        for candidate in finder(text):
            if candidate.fragment in tried:
                continue
            tried.add(candidate.fragment)

            payload = decode_fragment(candidate.fragment)
            if payload is None:
                log.debug(f"候选片段无法解析为 JSON: strategy={name}, pos={candidate.start}")
                continue

            chart = ChartDescriptor.from_payload(payload)
            if chart is None:
                log.debug(f"候选片段未通过校验: strategy={name}, pos={candidate.start}")
                continue

            return name, candidate, chart
    return None


def parse_message_content(text: str, strip_filler: Optional[bool] = None) -> ParseResult:
    """
    解析助手回复

    Args:
        text: 助手回复原文
        strip_filler: 是否同时去掉图表引导语，为空时使用配置

    Returns:
        ParseResult: 正文与可选的图表描述；任何失败都只返回正文，不抛异常
    """
    if not text:
        return ParseResult(prose="")

    if strip_filler is None:
        strip_filler = settings.strip_chart_filler

    try:
        if len(text) > settings.max_message_chars:
            log.warning(f"消息过长，跳过图表提取: {len(text)} > {settings.max_message_chars}")
            return ParseResult(prose=text.strip())

        match = extract_chart(text)
        if match is None:
            if looks_like_chart_data(text):
                log.warning("消息疑似包含图表数据，但没有片段通过校验")
            return ParseResult(prose=text.strip())

        name, candidate, chart = match
        prose = _collapse_blank_lines(text[:candidate.start] + text[candidate.end:])
        if strip_filler:
            prose = strip_filler_lines(prose)

        log.info(f"提取到图表: type={chart.kind}, points={len(chart.points)}, strategy={name}")
        return ParseResult(prose=prose, chart=chart, matched_by=name)

    except Exception as e:
        log.error(f"消息解析失败: {e}")
        return ParseResult(prose=text.strip())
