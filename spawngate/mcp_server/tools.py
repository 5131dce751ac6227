"""The ``sessions_spawn`` agent tool.

Declares the tool's name, description and JSON parameter schema, and
binds a SpawnGate to the requester context of the agent that owns the
tool. Results are wrapped in the MCP text-content shape with the raw
payload kept under ``details``.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any

from ..gate import SpawnGate
from ..models import CleanupPolicy, RequesterContext, SpawnMode

logger = logging.getLogger(__name__)

SESSIONS_SPAWN_TOOL_NAME = "sessions_spawn"
SESSIONS_SPAWN_TOOL_LABEL = "Sessions"
SESSIONS_SPAWN_DESCRIPTION = (
    'Spawn a sub-agent in an isolated session (mode="run" one-shot or '
    'mode="session" persistent) and route results back to the requester '
    "chat/thread."
)

SESSIONS_SPAWN_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "task": {"type": "string", "description": "Task for the sub-agent"},
        "label": {"type": "string", "description": "Short display label"},
        "agentId": {"type": "string", "description": "Agent to run the task as"},
        "model": {
            "type": "string",
            "description": "Model override, 'provider/model' or a bare model name",
        },
        "thinking": {"type": "string", "description": "Thinking level override"},
        "runTimeoutSeconds": {
            "type": "number",
            "minimum": 0,
            "description": "Run timeout for the sub-agent in seconds",
        },
        # Older callers only know this name; keep it.
        "timeoutSeconds": {
            "type": "number",
            "minimum": 0,
            "deprecated": True,
            "description": "Deprecated alias for runTimeoutSeconds",
        },
        "thread": {
            "type": "boolean",
            "description": "Reply in a thread of the requester's message",
        },
        "mode": {
            "type": "string",
            "enum": [mode.value for mode in SpawnMode],
        },
        "cleanup": {
            "type": "string",
            "enum": [CleanupPolicy.DELETE.value, CleanupPolicy.KEEP.value],
        },
    },
    "required": ["task"],
}


def json_result(payload: Any) -> dict[str, Any]:
    """Format a payload as MCP text content, keeping the raw payload."""
    return {
        "content": [{"type": "text", "text": json.dumps(payload, indent=2)}],
        "details": payload,
    }


class SessionsSpawnTool:
    """``sessions_spawn`` bound to one requesting agent."""

    name = SESSIONS_SPAWN_TOOL_NAME
    label = SESSIONS_SPAWN_TOOL_LABEL
    description = SESSIONS_SPAWN_DESCRIPTION
    parameters = SESSIONS_SPAWN_SCHEMA

    def __init__(
        self,
        gate: SpawnGate,
        requester: RequesterContext | None = None,
    ) -> None:
        self._gate = gate
        self._requester = requester or RequesterContext()

    @property
    def requester(self) -> RequesterContext:
        return self._requester

    async def execute(
        self, tool_call_id: str, args: dict[str, Any],
    ) -> dict[str, Any]:
        """Run the gate for one tool call and wrap its payload."""
        started = time.monotonic()
        logger.info(
            "Tool start tool=%s tool_call_id=%s requester=%s",
            self.name,
            tool_call_id,
            self._requester.agent_session_key or "<unknown>",
        )
        try:
            payload = await self._gate.handle_spawn(args, self._requester)
        except Exception:
            logger.exception(
                "Tool crash tool=%s tool_call_id=%s duration_s=%.2f",
                self.name,
                tool_call_id,
                time.monotonic() - started,
            )
            raise
        logger.info(
            "Tool end tool=%s tool_call_id=%s duration_s=%.2f status=%s",
            self.name,
            tool_call_id,
            time.monotonic() - started,
            payload.get("status") if isinstance(payload, dict) else None,
        )
        return json_result(payload)
