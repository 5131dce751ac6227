"""Spawn request gate: admission control for sub-agent spawning.

The gate sits between an agent's ``sessions_spawn`` tool call and the
spawning service. It normalizes untrusted parameters, enforces the
model allowlist when a model override is given, and only then hands a
canonical SpawnRequest to the spawner.

Normalization is deliberately lenient: unknown ``mode`` values are
dropped and unknown ``cleanup`` values become ``keep`` instead of being
rejected. Only a missing task or a disallowed model fail the request.

Both ``runTimeoutSeconds`` and its older name ``timeoutSeconds`` are
accepted; callers that never migrated still send the old one.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .config import DEFAULT_PROVIDER, GateConfig, load_config
from .errors import (
    InvalidInputError,
    InvalidModelRefError,
    ModelNotAllowedError,
    SpawnGateError,
)
from .model_catalog import load_model_catalog
from .model_selection import build_allowed_model_set, model_key, parse_model_ref
from .models import (
    AllowedModelSet,
    CleanupPolicy,
    ModelCatalogEntry,
    ModelRef,
    RequesterContext,
    SpawnMode,
    SpawnRequest,
)
from .spawner import Spawner

logger = logging.getLogger(__name__)

# Collaborator signatures. All are injectable so tests can run the gate
# against fake configs, catalogs and allowlists.
ConfigLoader = Callable[[], GateConfig]
CatalogLoader = Callable[[GateConfig], Awaitable[list[ModelCatalogEntry]]]
AllowlistBuilder = Callable[
    [GateConfig, list[ModelCatalogEntry], str], AllowedModelSet
]
ModelRefParser = Callable[[str, str], ModelRef | None]
ModelKeyFunc = Callable[[str, str], str]

_SPAWN_MODES = {mode.value: mode for mode in SpawnMode}


def _error_payload(message: str) -> dict[str, Any]:
    return {"status": "error", "error": message}


def _read_string_param(
    params: Mapping[str, Any], key: str, *, required: bool = False,
) -> str | None:
    """Return the trimmed string at *key*, or None if absent/blank.

    Raises InvalidInputError when *required* and nothing usable is there.
    """
    value = params.get(key)
    if isinstance(value, str):
        value = value.strip()
        if value:
            return value
    if required:
        raise InvalidInputError(key)
    return None


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a timeout
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _resolve_run_timeout(params: Mapping[str, Any]) -> int | None:
    """Pick runTimeoutSeconds, else timeoutSeconds; floor and clamp to >= 0.

    Non-numeric values are skipped. A non-finite chosen value yields None.
    """
    candidate = params.get("runTimeoutSeconds")
    if not _is_number(candidate):
        candidate = params.get("timeoutSeconds")
        if not _is_number(candidate):
            return None
    if not math.isfinite(candidate):
        return None
    return max(0, math.floor(candidate))


class SpawnGate:
    """Validates spawn requests and forwards admitted ones to a spawner.

    Holds no per-request state: the allowed-model set is rebuilt from
    the current config and catalog on every call, so concurrent
    ``handle_spawn`` calls are independent.
    """

    def __init__(
        self,
        spawner: Spawner,
        *,
        load_config: ConfigLoader = load_config,
        load_model_catalog: CatalogLoader = load_model_catalog,
        build_allowed_model_set: AllowlistBuilder = build_allowed_model_set,
        parse_model_ref: ModelRefParser = parse_model_ref,
        model_key: ModelKeyFunc = model_key,
        default_provider: str = DEFAULT_PROVIDER,
    ) -> None:
        self._spawner = spawner
        self._load_config = load_config
        self._load_model_catalog = load_model_catalog
        self._build_allowed_model_set = build_allowed_model_set
        self._parse_model_ref = parse_model_ref
        self._model_key = model_key
        self._default_provider = default_provider

    def normalize(self, raw_params: Mapping[str, Any]) -> SpawnRequest:
        """Build the canonical SpawnRequest from raw tool arguments."""
        params: Mapping[str, Any] = (
            raw_params if isinstance(raw_params, Mapping) else {}
        )
        task = _read_string_param(params, "task", required=True)

        label = params.get("label")
        label = label.strip() if isinstance(label, str) else ""

        mode_raw = params.get("mode")
        cleanup_raw = params.get("cleanup")

        return SpawnRequest(
            task=task,
            label=label or None,
            agent_id=_read_string_param(params, "agentId"),
            model=_read_string_param(params, "model"),
            thinking=_read_string_param(params, "thinking"),
            run_timeout_seconds=_resolve_run_timeout(params),
            thread=params.get("thread") is True,
            mode=(
                _SPAWN_MODES[mode_raw]
                if isinstance(mode_raw, str) and mode_raw in _SPAWN_MODES
                else None
            ),
            cleanup=(
                CleanupPolicy.DELETE
                if cleanup_raw == "delete"
                else CleanupPolicy.KEEP
            ),
            expects_completion_message=True,
        )

    async def check_model_allowed(self, model_override: str) -> None:
        """Raise if *model_override* is not allowed by the current policy."""
        config = self._load_config()
        catalog = await self._load_model_catalog(config)
        allowed = self._build_allowed_model_set(
            config, catalog, self._default_provider,
        )
        if allowed.allow_any:
            logger.debug(
                "Model allowlist allows any model; accepting %s",
                model_override,
            )
            return

        parsed = self._parse_model_ref(model_override, self._default_provider)
        if parsed is None:
            raise InvalidModelRefError(model_override)

        key = self._model_key(parsed.provider, parsed.model)
        if key not in allowed.allowed_keys:
            logger.info(
                "Model %s not in allowlist; allowed catalog models: %s",
                key,
                ", ".join(
                    f"{entry.name or entry.id} ({entry.provider}/{entry.id})"
                    for entry in allowed.allowed_catalog
                ) or "<none>",
            )
            raise ModelNotAllowedError(key, sorted(allowed.allowed_keys))

    async def handle_spawn(
        self,
        raw_params: Mapping[str, Any],
        requester: RequesterContext,
    ) -> Any:
        """Validate *raw_params* and spawn a sub-agent for *requester*.

        Returns ``{"status": "error", "error": ...}`` for invalid input or
        a disallowed model; otherwise the spawner's result, unmodified.
        Exceptions raised by the spawner propagate as-is.
        """
        try:
            request = self.normalize(raw_params)
            if request.model:
                await self.check_model_allowed(request.model)
        except SpawnGateError as e:
            logger.warning(
                "sessions_spawn rejected requester=%s: %s",
                requester.agent_session_key or "<unknown>",
                e,
            )
            return _error_payload(str(e))

        logger.info(
            "sessions_spawn admitted requester=%s agent=%s model=%s mode=%s "
            "cleanup=%s timeout=%s thread=%s task_len=%d",
            requester.agent_session_key or "<unknown>",
            request.agent_id or "<default>",
            request.model or "<default>",
            request.mode.value if request.mode else "<default>",
            request.cleanup.value,
            request.run_timeout_seconds,
            request.thread,
            len(request.task),
        )
        return await self._spawner.spawn(request, requester)
