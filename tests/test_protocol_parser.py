from agentic_chat_lib.agent_core.protocol import parse_agentic_response
from agentic_chat_lib.agent_core.protocol.parser import detect_tool_calls_in_text


def test_plain_text_has_no_directives() -> None:
    parsed = parse_agentic_response("The capital of France is Paris.")

    assert parsed.should_continue is False
    assert parsed.reasoning is None
    assert parsed.tool_calls == []
    assert parsed.clean_text == "The capital of France is Paris."


def test_continue_marker_with_tool_call() -> None:
    text = 'CONTINUE_THINKING: need time\nTOOL_CALL: {"name": "get_current_time", "arguments": {}}'

    parsed = parse_agentic_response(text)

    assert parsed.should_continue is True
    assert parsed.reasoning == "need time"
    assert len(parsed.tool_calls) == 1
    assert parsed.tool_calls[0].name == "get_current_time"
    assert parsed.tool_calls[0].arguments == {}
    assert parsed.clean_text == ""


def test_reasoning_stops_at_blank_line() -> None:
    text = "CONTINUE_THINKING: compare both sources\n\nLet me look that up."

    parsed = parse_agentic_response(text)

    assert parsed.reasoning == "compare both sources"
    assert parsed.clean_text == "Let me look that up."


def test_multiple_tool_calls_keep_their_order() -> None:
    text = (
        "Let me check two things.\n"
        'TOOL_CALL: {"name": "search", "arguments": {"query": "bhakti"}}\n'
        'TOOL_CALL: {"name": "search", "arguments": {"query": "dharma"}}'
    )

    parsed = parse_agentic_response(text)

    assert [c.arguments["query"] for c in parsed.tool_calls] == ["bhakti", "dharma"]
    assert parsed.tool_calls[0].id != parsed.tool_calls[1].id
    assert parsed.clean_text == "Let me check two things."
    assert parsed.should_continue is False


def test_nested_arguments_and_braces_in_strings() -> None:
    text = (
        'TOOL_CALL: {"name": "create", "arguments": '
        '{"user": {"name": "Ada", "tags": ["a", "b"]}, "note": "curly } brace { inside"}}\nDone.'
    )

    parsed = parse_agentic_response(text)

    assert len(parsed.tool_calls) == 1
    assert parsed.tool_calls[0].arguments == {
        "user": {"name": "Ada", "tags": ["a", "b"]},
        "note": "curly } brace { inside",
    }
    assert parsed.clean_text == "Done."


def test_malformed_block_is_dropped_and_removed() -> None:
    text = 'Before\nTOOL_CALL: {"name": "search", "arguments": {query: oops}}\nAfter'

    parsed = parse_agentic_response(text)

    assert parsed.tool_calls == []
    assert "TOOL_CALL" not in parsed.clean_text
    assert "oops" not in parsed.clean_text
    assert parsed.clean_text == "Before\n\nAfter"


def test_block_without_name_is_ignored() -> None:
    parsed = parse_agentic_response('TOOL_CALL: {"arguments": {"q": 1}}\nHello')

    assert parsed.tool_calls == []
    assert parsed.clean_text == "Hello"


def test_non_object_arguments_become_empty() -> None:
    parsed = parse_agentic_response('TOOL_CALL: {"name": "get_current_time", "arguments": "now"}')

    assert parsed.tool_calls[0].arguments == {}


def test_truncated_block_leaves_no_marker() -> None:
    parsed = parse_agentic_response('Working on it.\nTOOL_CALL: {"name": "search", "arguments": {"q"')

    assert parsed.tool_calls == []
    assert "TOOL_CALL:" not in parsed.clean_text
    assert parsed.clean_text.startswith("Working on it.")


def test_stray_markers_are_stripped() -> None:
    text = "Answer first.\n\nCONTINUE_THINKING: one\n\nMiddle\n\nCONTINUE_THINKING: two\n\nTOOL_CALL: nothing here"

    parsed = parse_agentic_response(text)

    assert parsed.reasoning == "one"
    assert "CONTINUE_THINKING:" not in parsed.clean_text
    assert "TOOL_CALL:" not in parsed.clean_text


def test_excess_blank_lines_are_collapsed() -> None:
    text = 'First\n\n\n\nTOOL_CALL: {"name": "a", "arguments": {}}\n\n\n\nSecond'

    parsed = parse_agentic_response(text)

    assert parsed.clean_text == "First\n\nSecond"


def test_parsing_clean_text_is_idempotent() -> None:
    text = (
        "CONTINUE_THINKING: look it up\n"
        'TOOL_CALL: {"name": "search", "arguments": {"query": "x"}}\n\n'
        "Partial answer here.\n\n\n\nMore."
    )

    first = parse_agentic_response(text)
    second = parse_agentic_response(first.clean_text)

    assert second.clean_text == first.clean_text
    assert second.tool_calls == []
    assert second.should_continue is False


def test_detect_tool_calls_in_text() -> None:
    detection = detect_tool_calls_in_text('x TOOL_CALL: {"name": "t", "arguments": {"n": 1}} y')

    assert [(c.name, c.arguments) for c in detection.tool_calls] == [("t", {"n": 1})]
    assert detection.clean_text == "x  y"


def test_two_searches_with_reasoning() -> None:
    text = (
        "CONTINUE_THINKING: need two searches\n\n"
        'TOOL_CALL: {"name": "search_scripture", "arguments": {"query": "bhakti"}}\n'
        'TOOL_CALL: {"name": "search_scripture", "arguments": {"query": "dharma"}}'
    )

    parsed = parse_agentic_response(text)

    assert parsed.should_continue is True
    assert parsed.reasoning == "need two searches"
    assert [(c.name, c.arguments) for c in parsed.tool_calls] == [
        ("search_scripture", {"query": "bhakti"}),
        ("search_scripture", {"query": "dharma"}),
    ]
    assert parsed.clean_text == ""


def test_empty_reasoning_keeps_the_tool_call() -> None:
    text = 'CONTINUE_THINKING:\nTOOL_CALL: {"name": "get_current_time", "arguments": {}}'

    parsed = parse_agentic_response(text)

    assert parsed.should_continue is True
    assert parsed.reasoning is None
    assert [c.name for c in parsed.tool_calls] == ["get_current_time"]
    assert parsed.clean_text == ""


def test_marker_formed_by_stripping_is_removed() -> None:
    first = parse_agentic_response("TOOL_CTOOL_CALL:ALL: hi")
    second = parse_agentic_response(first.clean_text)

    assert first.clean_text == "hi"
    assert second.clean_text == first.clean_text
