import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, Any, List, Optional

from textkit.core.config import settings
from textkit.models.api_models import (
    AnalyzeLanguageRequest,
    ErrorDetail,
    HealthResponse,
    LanguageAnalysisResult,
    ToolCallRequest,
    ToolCallResponse,
    ToolInfo,
)
from textkit.services.tool_service import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    ToolError,
    ToolService,
)
from textkit.utils.log_utils import async_append_request_log
from textkit.dependencies import get_tool_service

api_router = APIRouter()

logger = logging.getLogger(__name__)

_STATUS_BY_TOOL_ERROR = {
    METHOD_NOT_FOUND: 404,
    INVALID_PARAMS: 400,
}

def _to_http_exception(error: ToolError) -> HTTPException:
    status_code = _STATUS_BY_TOOL_ERROR.get(error.code, 500)
    detail = ErrorDetail(code=error.code, message=error.message, details=error.data)
    return HTTPException(status_code=status_code, detail=detail.model_dump(exclude_none=True))

async def _log_tool_call(tool_name: str, arguments: Dict[str, Any], result: Optional[Dict[str, Any]] = None, error: Optional[ToolError] = None):
    """Records a tool call in the request log (no-op unless enabled and at DEBUG)."""
    if not settings.request_log_enabled:
        return
    text = arguments.get("text") if isinstance(arguments, dict) else None
    event = {
        "event_type": "tool_error" if error else "tool_call",
        "tool": tool_name,
        "input_length": len(text) if isinstance(text, str) else None,
        "result": result,
        "error": ErrorDetail(code=error.code, message=error.message, details=error.data) if error else None,
    }
    await async_append_request_log(settings.request_log_path, event)

async def _run_tool(tool_service: ToolService, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    try:
        result = tool_service.call_tool(tool_name, arguments)
    except ToolError as e:
        logger.info(f"Tool call '{tool_name}' failed: {e.message}")
        await _log_tool_call(tool_name, arguments, error=e)
        raise _to_http_exception(e) from e
    await _log_tool_call(tool_name, arguments, result=result)
    return result

# --- API Endpoints ---
@api_router.post("/analyze-language", response_model=LanguageAnalysisResult, tags=["Analysis"], response_model_exclude_none=True)
async def analyze_language_endpoint(
    analyze_request: AnalyzeLanguageRequest,
    tool_service: ToolService = Depends(get_tool_service),
):
    """
    Classify every character of the text into a language or structural
    category and return counts and percentages per bucket.
    """
    arguments = {"text": analyze_request.text}
    return await _run_tool(tool_service, "analyze_language", arguments)

@api_router.get("/tools", response_model=List[ToolInfo], tags=["Tools"])
async def list_tools_endpoint(tool_service: ToolService = Depends(get_tool_service)):
    """List the available tools with their input schemas."""
    return tool_service.list_tools()

@api_router.post("/tools/call", response_model=ToolCallResponse, tags=["Tools"])
async def call_tool_endpoint(
    call_request: ToolCallRequest,
    tool_service: ToolService = Depends(get_tool_service),
):
    """Run a tool by name with JSON arguments (uniform request/response protocol)."""
    logger.debug(f"Received tool call: {call_request.name}")
    result = await _run_tool(tool_service, call_request.name, call_request.arguments)
    return ToolCallResponse(name=call_request.name, result=result)

@api_router.get("/health", response_model=HealthResponse, tags=["Status"])
async def health_check(tool_service: ToolService = Depends(get_tool_service)):
    """Check the health/status of the application and list registered tools."""
    return HealthResponse(
        status="ok",
        version=settings.api_version,
        tools=tool_service.list_tool_names(),
    )
