from __future__ import annotations

import os
from typing import Dict

MCP_URL = os.environ.get("MCP_URL", "http://127.0.0.1:3500/mcp")


def auth_headers() -> Dict[str, str]:
    token = os.environ.get("MCP_SERVER_TOKEN", "").strip()
    return {"Authorization": f"Bearer {token}"} if token else {}
