"""Core data models for the spawn gate.

All dataclasses and enums. Single source of truth to avoid circular
imports.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SpawnMode(str, Enum):
    """How the spawned sub-agent session lives."""
    RUN = "run"          # one-shot
    SESSION = "session"  # persistent


class CleanupPolicy(str, Enum):
    """What happens to the sub-agent session once it finishes."""
    DELETE = "delete"
    KEEP = "keep"


@dataclass
class SpawnRequest:
    """Canonical request handed to the spawning service."""
    task: str
    label: str | None = None
    agent_id: str | None = None
    model: str | None = None
    thinking: str | None = None
    run_timeout_seconds: int | None = None
    thread: bool = False
    mode: SpawnMode | None = None
    cleanup: CleanupPolicy = CleanupPolicy.KEEP
    expects_completion_message: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Render with wire names, dropping absent fields."""
        data: dict[str, Any] = {
            "task": self.task,
            "label": self.label,
            "agentId": self.agent_id,
            "model": self.model,
            "thinking": self.thinking,
            "runTimeoutSeconds": self.run_timeout_seconds,
            "thread": self.thread,
            "mode": self.mode.value if self.mode else None,
            "cleanup": self.cleanup.value,
            "expectsCompletionMessage": self.expects_completion_message,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class RequesterContext:
    """Identifies where a spawn request came from.

    Opaque to the gate: passed to the spawning service unmodified so
    completion messages can be routed back to the requester's
    session, channel, thread or group.
    """
    agent_session_key: str | None = None
    agent_channel: str | None = None
    agent_account_id: str | None = None
    agent_to: str | None = None
    agent_thread_id: str | int | None = None
    agent_group_id: str | None = None
    agent_group_channel: str | None = None
    agent_group_space: str | None = None
    sandboxed: bool = False
    # Explicit agent ID for cron/hook sessions where the session key
    # does not identify the requester.
    requester_agent_id_override: str | None = None

    @classmethod
    def from_env(cls) -> RequesterContext:
        """Load requester routing from SPAWNGATE_REQUESTER_* variables."""
        def _get(name: str) -> str | None:
            return os.getenv(f"SPAWNGATE_REQUESTER_{name}") or None

        return cls(
            agent_session_key=_get("SESSION_KEY"),
            agent_channel=_get("CHANNEL"),
            agent_account_id=_get("ACCOUNT_ID"),
            agent_to=_get("TO"),
            agent_thread_id=_get("THREAD_ID"),
            agent_group_id=_get("GROUP_ID"),
            agent_group_channel=_get("GROUP_CHANNEL"),
            agent_group_space=_get("GROUP_SPACE"),
            sandboxed=(
                (_get("SANDBOXED") or "").lower() in {"1", "true", "yes"}
            ),
            requester_agent_id_override=_get("AGENT_ID"),
        )


@dataclass(frozen=True)
class ModelRef:
    """A parsed ``provider/model`` reference."""
    provider: str
    model: str


@dataclass
class ModelCatalogEntry:
    """A model known to the catalog."""
    id: str
    provider: str
    name: str = ""
    context_window: int = 200_000
    reasoning: bool = False


@dataclass
class AllowedModelSet:
    """Which models a spawn request may select.

    ``allow_any`` short-circuits enforcement. Otherwise only keys in
    ``allowed_keys`` pass.
    """
    allow_any: bool
    allowed_keys: set[str] = field(default_factory=set)
    allowed_catalog: list[ModelCatalogEntry] = field(default_factory=list)
