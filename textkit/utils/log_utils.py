import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any
import fcntl
import asyncio

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Request log line schema (requests.jsonl, one object per line)
"""
{
  "type": "object",
  "properties": {
    "timestamp": { "type": "string", "format": "date-time" },
    "event_type": { "type": "string" },
    "tool": { "type": "string" },
    "input_length": { "type": "integer" },
    "result": { "type": ["object", "null"] },
    "error": { "type": ["object", "null"] }
  },
  "required": ["timestamp", "event_type"]
}
"""

# --- JSON 직렬화 헬퍼 ---
def default_serializer(obj):
    if isinstance(obj, BaseModel):
        # Use exclude_none=True to avoid serializing None values unless explicitly set
        return obj.model_dump(mode='json', exclude_none=True)
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj) # Convert set to list for JSON
    # Final fallback for unserializable types
    return f"<unserializable: {type(obj).__name__}>"

# 비동기 로그 저장 함수
async def async_append_request_log(log_file_path: Path, event_data: Dict[str, Any]):
    """
    Appends one event to the JSON-lines request log.
    File I/O runs in a worker thread. Nothing is written unless the root
    logger is at DEBUG or below. Failures are logged, never raised.

    Args:
        log_file_path: Path of the requests.jsonl file
        event_data: Event to record (must contain 'event_type')
    """
    root_logger = logging.getLogger()
    if root_logger.level > logging.DEBUG:
        return

    event_type = event_data.get('event_type', 'unknown') if isinstance(event_data, dict) else 'unknown'
    try:
        await asyncio.to_thread(lambda: log_file_path.parent.mkdir(parents=True, exist_ok=True))
        await asyncio.to_thread(_append_log_line, log_file_path, event_data)
    except Exception as e:
        logger.error(f"Failed to write request log event '{event_type}' to {log_file_path}: {e}", exc_info=True)


def _append_log_line(log_file_path: Path, event_data: Dict[str, Any]):
    """Writes a single JSON line under an exclusive file lock."""
    record = {"timestamp": datetime.now().isoformat(), **event_data}
    line = json.dumps(record, ensure_ascii=False, default=default_serializer)

    with open(log_file_path, "a", encoding="utf-8") as f:
        try:
            # 파일 잠금 (Exclusive lock)
            fcntl.flock(f, fcntl.LOCK_EX)
            f.write(line + "\n")
            f.flush()
        finally:
            # 파일 잠금 해제
            fcntl.flock(f, fcntl.LOCK_UN)


def read_request_log(log_file_path: Path) -> list:
    """Reads back every event from the request log, skipping corrupt lines."""
    if not log_file_path.exists():
        return []
    events = []
    with open(log_file_path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning(f"Skipping malformed line {line_no} in {log_file_path}")
    return events
