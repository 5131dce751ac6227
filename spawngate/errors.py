"""Exception hierarchy for the spawn gate.

Validation failures are raised as these exceptions inside the gate and
converted to ``{"status": "error", ...}`` payloads at its boundary.
Errors from the spawning service are never wrapped in these types.
"""
from __future__ import annotations


class SpawnGateError(Exception):
    """Base exception for all spawn gate errors."""


class InvalidInputError(SpawnGateError):
    """A required parameter is missing or empty."""
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} required")


class InvalidModelRefError(SpawnGateError):
    """Model override cannot be parsed as a provider/model reference."""
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"invalid model ref: {raw}")


class ModelNotAllowedError(SpawnGateError):
    """Parsed model override is not in the current allowlist."""
    def __init__(self, key: str, allowed: list[str]):
        self.key = key
        self.allowed = allowed
        super().__init__(
            f"model not allowed: {key}. "
            f"Allowed models: {', '.join(allowed)}"
        )


class SpawnerLoadError(SpawnGateError):
    """The configured spawner file could not be loaded."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load spawner from {path}: {reason}")
