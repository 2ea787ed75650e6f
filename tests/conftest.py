import os
import tempfile

import pytest

# Settings are read at import time, keep test logs out of the project tree.
os.environ.setdefault("TEXTKIT_LOG_DIR", tempfile.mkdtemp(prefix="textkit-logs-"))

from textkit.services.tool_service import ToolService


@pytest.fixture
def tool_service():
    return ToolService()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from textkit.main import app

    with TestClient(app) as c:  # runs the lifespan
        yield c
