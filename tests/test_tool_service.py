import pytest

from textkit.services.tool_service import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    Tool,
    ToolError,
    ToolService,
)


def test_list_tools(tool_service):
    tools = tool_service.list_tools()
    assert [t["name"] for t in tools] == ["analyze_language"]
    schema = tools[0]["inputSchema"]
    assert schema["required"] == ["text"]
    assert schema["properties"]["text"]["type"] == "string"


def test_call_analyze_language(tool_service):
    result = tool_service.call_tool("analyze_language", {"text": "Hello World"})
    assert result["total_characters"] == 11
    assert result["languages"]["english"] == {"count": 10, "percentage": 90.91}
    assert result["categories"]["whitespace"] == {"count": 1, "percentage": 9.09}
    assert result["encoding"] == "UTF-16 (default)"


def test_call_with_empty_text_omits_encoding(tool_service):
    result = tool_service.call_tool("analyze_language", {"text": ""})
    assert result["total_characters"] == 0
    assert "encoding" not in result


def test_unknown_tool(tool_service):
    with pytest.raises(ToolError) as exc_info:
        tool_service.call_tool("hash_string", {"input": "x"})
    assert exc_info.value.code == METHOD_NOT_FOUND


@pytest.mark.parametrize("arguments", [
    {},
    {"text": 42},
    {"text": None},
    {"text": ["a", "b"]},
    "just a string",
    None,
])
def test_invalid_arguments(tool_service, arguments):
    with pytest.raises(ToolError) as exc_info:
        tool_service.call_tool("analyze_language", arguments)
    assert exc_info.value.code == INVALID_PARAMS


def test_schema_error_names_parameter(tool_service):
    ok, message = tool_service.validate_tool_arguments("analyze_language", {"text": 1})
    assert not ok
    assert "'text'" in message


def test_input_length_limit_counts_code_units():
    service = ToolService(max_input_length=3)
    assert service.call_tool("analyze_language", {"text": "abc"})["total_characters"] == 3
    # two characters, three code units
    assert service.call_tool("analyze_language", {"text": "a\U0001F600"})["total_characters"] == 3


def test_input_length_limit_rejects_long_text():
    service = ToolService(max_input_length=3)
    with pytest.raises(ToolError) as exc_info:
        service.call_tool("analyze_language", {"text": "ab\U0001F600"})
    assert exc_info.value.code == INVALID_PARAMS
    assert exc_info.value.data == {"length": 4, "limit": 3}


def test_zero_limit_disables_check():
    service = ToolService(max_input_length=0)
    result = service.call_tool("analyze_language", {"text": "x" * 5000})
    assert result["languages"]["english"]["count"] == 5000


def test_custom_default_encoding_label():
    service = ToolService(default_encoding_label="unknown")
    assert service.call_tool("analyze_language", {"text": "abc"})["encoding"] == "unknown"


def test_handler_failure_is_internal_error(tool_service):
    def boom(arguments):
        raise RuntimeError("exploded")

    tool_service.register(Tool(name="boom", description="fails", input_schema={"type": "object"}, handler=boom))
    with pytest.raises(ToolError) as exc_info:
        tool_service.call_tool("boom", {})
    assert exc_info.value.code == INTERNAL_ERROR
    assert exc_info.value.data == "exploded"


def test_duplicate_registration(tool_service):
    existing = tool_service._tools["analyze_language"]
    with pytest.raises(ValueError):
        tool_service.register(existing)
