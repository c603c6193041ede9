"""消息解析测试"""

import json

import pytest

from finchat.core.config import settings
from finchat.parsers import message_parser
from finchat.parsers.message_parser import (
    decode_fragment,
    find_fenced_blocks,
    find_kind_fragments,
    find_widest_braces,
    looks_like_chart_data,
    normalize_fragment,
    parse_message_content,
    strip_filler_lines
)


PIE_MESSAGE = (
    "Here's your spending:\n"
    "```json\n"
    '{"type":"pie","data":[{"label":"Rent","value":1200}]}\n'
    "```"
)

PRETTY_MESSAGE = """Here's a chart of your monthly expenses:

```json
{
  "type": "donut",
  "data": [
    { "label": "Rent", "value": 1200, "category": "Housing" },
    { "label": "Utilities", "value": 200, "category": "Housing" },
    { "label": "Groceries", "value": 400, "category": "Food" }
  ],
  "options": {
    "title": "Monthly Expenses by Category"
  }
}
```

Rent is your biggest expense this month."""


def test_fenced_block_scenario():
    """代码块中的图表数据被提取，正文不含代码块"""
    result = parse_message_content(PIE_MESSAGE)
    assert result.chart is not None
    assert result.chart.kind == "pie"
    assert len(result.chart.points) == 1
    assert result.chart.points[0].label == "Rent"
    assert result.chart.points[0].value == 1200
    assert result.prose == "Here's your spending:"
    assert result.matched_by == "fenced"


def test_plain_text_scenario():
    text = "Your balance is $500 this month."
    result = parse_message_content(text)
    assert result.chart is None
    assert result.prose == text
    assert result.matched_by is None


@pytest.mark.parametrize("text", [
    "  Your balance is $500 this month.  \n",
    "Spending went up 12% (mostly groceries).\n\nWould you like a breakdown?",
    "",
])
def test_no_braces_keeps_text(text):
    """没有花括号的文本只做首尾空白处理"""
    result = parse_message_content(text)
    assert result.chart is None
    assert result.prose == text.strip()


def test_pretty_printed_block():
    result = parse_message_content(PRETTY_MESSAGE)
    assert result.chart is not None
    assert result.chart.kind == "donut"
    assert [p.label for p in result.chart.points] == ["Rent", "Utilities", "Groceries"]
    assert result.chart.options.title == "Monthly Expenses by Category"
    assert "```" not in result.prose
    assert result.prose == (
        "Here's a chart of your monthly expenses:\n\n"
        "Rent is your biggest expense this month."
    )


def test_trailing_comma_scenario():
    """多余逗号在整理后可以解析"""
    text = (
        'Quarterly totals: {"type": "bar", "data": ['
        '{"label": "Q1", "value": 10,}, {"label": "Q2", "value": 20},], } as requested.'
    )
    result = parse_message_content(text)
    assert result.chart is not None
    assert result.chart.kind == "bar"
    assert [p.value for p in result.chart.points] == [10, 20]
    assert result.prose == "Quarterly totals:  as requested."


def test_second_fragment_scenario():
    """第一个片段不是图表时继续查找第二个"""
    text = (
        'Summary {"type": "summary", "total": 3} and chart '
        '{"type": "bar", "data": [{"label": "Jan", "value": 10}]} done.'
    )
    result = parse_message_content(text)
    assert result.chart is not None
    assert result.chart.kind == "bar"
    assert len(result.chart.points) == 1
    assert result.matched_by == "kind_fragment"
    assert '"summary"' in result.prose
    assert '"bar"' not in result.prose


def test_oversized_value_falls_through_to_next_fragment():
    """超出 float 范围的数值只拒绝当前片段，继续尝试后面的片段"""
    huge = "1" + "0" * 400
    text = (
        'First {"type": "pie", "data": [{"label": "A", "value": ' + huge + '}]} '
        'then {"type": "bar", "data": [{"label": "B", "value": 2}]}'
    )
    result = parse_message_content(text)
    assert result.chart is not None
    assert result.chart.kind == "bar"
    assert result.chart.points[0].label == "B"
    assert result.matched_by == "kind_fragment"


def test_closing_brace_inside_label_before_kind_key():
    """类型字段之前的字符串里含有右花括号时仍能找到外层对象"""
    text = 'Note {"type": "summary"} and {"data": [{"label": "a}b", "value": 1}], "type": "bar"} ok'
    result = parse_message_content(text)
    assert result.chart is not None
    assert result.chart.kind == "bar"
    assert result.chart.points[0].label == "a}b"
    assert result.prose == 'Note {"type": "summary"} and  ok'


def test_invalid_fenced_block_falls_back_to_inline_fragment():
    text = (
        "```json\n{not valid json at all}\n```\n"
        'Chart: {"type": "line", "data": [{"label": "Jan", "value": 1}]}'
    )
    result = parse_message_content(text)
    assert result.chart is not None
    assert result.chart.kind == "line"
    assert result.matched_by == "kind_fragment"
    assert result.prose.startswith("```json")


def test_missing_value_rejects_whole_chart():
    """任一数据点缺少 value 时整个图表被拒绝"""
    text = (
        "Breakdown:\n```json\n"
        '{"type": "pie", "data": [{"label": "Rent", "value": 1200}, {"label": "Food"}]}\n'
        "```"
    )
    result = parse_message_content(text)
    assert result.chart is None
    assert result.prose == text


def test_non_numeric_value_rejects_whole_chart():
    text = '{"type": "bar", "data": [{"label": "A", "value": 1}, {"label": "B", "value": "2"}]}'
    assert parse_message_content(text).chart is None


def test_unknown_kind_rejected():
    text = '```json\n{"type": "radar", "data": [{"label": "A", "value": 1}]}\n```'
    result = parse_message_content(text)
    assert result.chart is None
    assert result.prose == text


def test_reparse_prose_has_no_chart():
    """正文再次解析不会得到图表"""
    for text in (PIE_MESSAGE, PRETTY_MESSAGE):
        first = parse_message_content(text)
        assert first.chart is not None
        assert parse_message_content(first.prose).chart is None


def test_extracted_order_is_preserved():
    text = '{"type": "pie", "data": [{"label": "A", "value": 1}, {"label": "B", "value": 3}, {"label": "C", "value": 2}]}'
    result = parse_message_content(text)
    assert [p.label for p in result.chart.points] == ["A", "B", "C"]


def test_double_escaped_payload():
    text = 'Chart: {\\"type\\": \\"bar\\", \\"data\\": [{\\"label\\": \\"A\\", \\"value\\": 5}]}'
    result = parse_message_content(text)
    assert result.chart is not None
    assert result.chart.kind == "bar"
    assert result.matched_by == "widest_braces"
    assert result.prose == "Chart:"


def test_strip_filler():
    """开启后去除图表引导语"""
    result = parse_message_content(PRETTY_MESSAGE, strip_filler=True)
    assert result.chart is not None
    assert result.prose == "Rent is your biggest expense this month."


def test_strip_filler_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "strip_chart_filler", True)
    result = parse_message_content(PRETTY_MESSAGE)
    assert result.prose == "Rent is your biggest expense this month."


def test_strip_filler_lines():
    prose = "Here is the breakdown chart:\n],\n\"\nYou spent less than last month.\nThis shows nothing special"
    assert strip_filler_lines(prose) == "You spent less than last month.\nThis shows nothing special"


def test_long_message_is_not_scanned(monkeypatch):
    monkeypatch.setattr(settings, "max_message_chars", 10)
    result = parse_message_content(PIE_MESSAGE)
    assert result.chart is None
    assert result.prose == PIE_MESSAGE.strip()


def test_none_input():
    assert parse_message_content(None).prose == ""


def test_unexpected_error_returns_trimmed_text(monkeypatch):
    """内部异常不会抛给调用方"""
    def boom(text):
        raise RuntimeError("boom")

    monkeypatch.setattr(message_parser, "extract_chart", boom)
    result = parse_message_content("\n  " + PIE_MESSAGE + "  \n")
    assert result.chart is None
    assert result.prose == PIE_MESSAGE


def test_find_fenced_blocks():
    text = 'a\n```JSON\n{"a": 1}\n```\nb\n```python\nprint(1)\n```\n```chart {"b": 2}```'
    candidates = list(find_fenced_blocks(text))
    assert [c.fragment for c in candidates] == ['{"a": 1}', '{"b": 2}']
    first = candidates[0]
    assert text[first.start:first.end] == '```JSON\n{"a": 1}\n```'


def test_find_fenced_blocks_custom_tags():
    text = '```json\n{"a": 1}\n```'
    assert list(find_fenced_blocks(text, tags=["chart"])) == []


def test_find_kind_fragments():
    text = (
        'x {"type": "pie", "data": [{"label": "{tricky}", "value": 1}]} '
        'y {"kind": "area", "points": []} z {"type": "radar"}'
    )
    fragments = [c.fragment for c in find_kind_fragments(text)]
    assert fragments == [
        '{"type": "pie", "data": [{"label": "{tricky}", "value": 1}]}',
        '{"kind": "area", "points": []}',
    ]


def test_find_kind_fragments_ignores_braces_in_strings():
    text = '{"note": "}}"} {"data": [{"label": "x}", "value": 1}], "kind": "line"}'
    fragments = [c.fragment for c in find_kind_fragments(text)]
    assert fragments == ['{"data": [{"label": "x}", "value": 1}], "kind": "line"}']


def test_find_widest_braces():
    assert [c.fragment for c in find_widest_braces("a {x} b {y} c")] == ["{x} b {y}"]
    assert list(find_widest_braces("no braces here")) == []
    assert list(find_widest_braces("} backwards {")) == []


def test_normalize_fragment():
    fragment = '{\n  "label": "Rent, utilities",\n  "value": 5,\n}'
    assert normalize_fragment(fragment) == '{"label":"Rent, utilities","value":5}'
    assert normalize_fragment("{“type”: “bar”}") == '{"type":"bar"}'


def test_decode_fragment():
    assert decode_fragment('{"a": [1, 2,],}') == {"a": [1, 2]}
    assert decode_fragment("not json") is None


def test_looks_like_chart_data():
    assert looks_like_chart_data('{"type": "pie", "data": []}')
    assert looks_like_chart_data('Here\'s a chart: {"type": "custom", "data": [1]}')
    assert not looks_like_chart_data("Your balance is $500 this month.")


def test_parse_result_is_serializable():
    result = parse_message_content(PIE_MESSAGE)
    dumped = json.loads(result.model_dump_json())
    assert dumped["chart"]["kind"] == "pie"
    assert dumped["prose"] == "Here's your spending:"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
