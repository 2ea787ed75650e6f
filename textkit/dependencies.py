from typing import Optional
import logging

from textkit.services.tool_service import ToolService

logger = logging.getLogger(__name__)

# --- Singleton instance storage variables ---
_tool_service_instance: Optional[ToolService] = None

# --- Setters ---
def set_tool_service_instance(instance: Optional[ToolService]) -> None:
    """Sets the global ToolService instance."""
    global _tool_service_instance
    _tool_service_instance = instance

# --- Dependency injection functions (Getters used by FastAPI) ---
def get_tool_service() -> ToolService:
    """
    Returns the singleton ToolService instance.
    This is used by FastAPI for dependency injection.
    """
    if _tool_service_instance is None:
        logger.error("ToolService requested but not initialized. Application lifespan might not have run properly.")
        raise RuntimeError("ToolService has not been initialized. Ensure the application lifespan context is correctly set up.")
    return _tool_service_instance
