import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
from jsonschema import validate, ValidationError

from textkit.core.config import settings
from textkit.utils.lang_utils import InvalidInputError, analyze_language, iter_code_units

logger = logging.getLogger(__name__)

# JSON-RPC 2.0 error codes
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ToolError(Exception):
    """Error raised by a tool call, carrying a JSON-RPC style code."""
    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"Tool Error - Code: {self.code}, Message: {self.message}")


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable[[Dict[str, Any]], Dict[str, Any]]


ANALYZE_LANGUAGE_SCHEMA = {
    "type": "object",
    "properties": {
        "text": {
            "type": "string",
            "description": "Text to analyze",
        },
    },
    "required": ["text"],
}


class ToolService:
    """도구 서비스 - 도구 등록, 인수 검증 및 실행을 담당"""

    def __init__(self, max_input_length: Optional[int] = None, default_encoding_label: Optional[str] = None):
        """
        ToolService 초기화. 값이 주어지지 않으면 settings 에서 가져옵니다.

        Args:
            max_input_length: Largest accepted text, in UTF-16 code units (0 = unlimited).
            default_encoding_label: Label reported when no encoding hint is found.
        """
        self.max_input_length = settings.max_input_length if max_input_length is None else max_input_length
        self.default_encoding_label = default_encoding_label or settings.default_encoding_label
        self._tools: Dict[str, Tool] = {}

        self.register(Tool(
            name="analyze_language",
            description=(
                "Analyze text for language and character distribution. "
                "Counts characters of English, Chinese, Russian, Ukrainian, Vietnamese, "
                "Japanese, Turkish and Spanish, plus digits, punctuation, symbols, "
                "whitespace and other characters, with percentages."
            ),
            input_schema=ANALYZE_LANGUAGE_SCHEMA,
            handler=self._analyze_language,
        ))
        logger.info(f"ToolService initialized with tools: {self.list_tool_names()}")

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered.")
        self._tools[tool.name] = tool

    def list_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def list_tools(self) -> List[Dict[str, Any]]:
        """Returns name, description and inputSchema of every registered tool."""
        return [
            {"name": t.name, "description": t.description, "inputSchema": t.input_schema}
            for t in self._tools.values()
        ]

    def validate_tool_arguments(self, tool_name: str, arguments: Any) -> Tuple[bool, str]:
        """Validates the provided arguments against the tool's inputSchema."""
        logger.debug(f"Validating arguments for tool '{tool_name}'")
        tool = self._tools[tool_name]

        if not isinstance(arguments, dict):
            message = f"Invalid arguments format: expected an object, got {type(arguments).__name__}"
            logger.warning(f"Validation failed for '{tool_name}': {message}")
            return False, message

        try:
            validate(instance=arguments, schema=tool.input_schema)
        except ValidationError as e:
            # e.g. "'text' is a required property" or "123 is not of type 'string'"
            error_path = " -> ".join(map(str, e.path)) if e.path else "root"
            message = f"Validation failed for parameter '{error_path}': {e.message}"
            logger.warning(f"Validation failed for '{tool_name}': {message}")
            return False, message

        return True, "Arguments are valid."

    def call_tool(self, tool_name: str, arguments: Any) -> Dict[str, Any]:
        """
        Runs a registered tool.

        Raises:
            ToolError: METHOD_NOT_FOUND for unknown tools, INVALID_PARAMS for
                bad arguments, INTERNAL_ERROR for unexpected handler failures.
        """
        if tool_name not in self._tools:
            logger.warning(f"Unknown tool requested: '{tool_name}'")
            raise ToolError(METHOD_NOT_FOUND, f"Unknown tool: {tool_name}")

        is_valid, message = self.validate_tool_arguments(tool_name, arguments)
        if not is_valid:
            raise ToolError(INVALID_PARAMS, message)

        try:
            return self._tools[tool_name].handler(arguments)
        except ToolError:
            raise
        except InvalidInputError as e:
            raise ToolError(INVALID_PARAMS, str(e)) from e
        except Exception as e:
            logger.error(f"Unexpected error while running tool '{tool_name}': {e}", exc_info=True)
            raise ToolError(INTERNAL_ERROR, f"Error executing tool '{tool_name}'", data=str(e)) from e

    def _analyze_language(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        text = arguments.get("text")
        if isinstance(text, str) and self.max_input_length:
            length = sum(1 for _ in iter_code_units(text))
            if length > self.max_input_length:
                raise ToolError(
                    INVALID_PARAMS,
                    f"Text is too long: {length} code units (limit {self.max_input_length})",
                    data={"length": length, "limit": self.max_input_length},
                )

        result = analyze_language(text, default_encoding=self.default_encoding_label)
        logger.debug(f"analyze_language: {result.total_characters} code units, encoding={result.encoding}")
        return result.model_dump(mode="json", exclude_none=True)
