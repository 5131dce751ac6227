"""MCP surface for the sessions_spawn tool."""
from .tools import (
    SESSIONS_SPAWN_SCHEMA,
    SESSIONS_SPAWN_TOOL_NAME,
    SessionsSpawnTool,
    json_result,
)

__all__ = [
    "SESSIONS_SPAWN_SCHEMA",
    "SESSIONS_SPAWN_TOOL_NAME",
    "SessionsSpawnTool",
    "json_result",
]
