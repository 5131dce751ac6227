"""spawngate: admission control for sub-agent spawn requests."""
from .models import (
    AllowedModelSet,
    CleanupPolicy,
    ModelCatalogEntry,
    ModelRef,
    RequesterContext,
    SpawnMode,
    SpawnRequest,
)
from .config import DEFAULT_MODEL, DEFAULT_PROVIDER, GateConfig, load_config
from .yaml_config import load_yaml_config
from .errors import (
    InvalidInputError,
    InvalidModelRefError,
    ModelNotAllowedError,
    SpawnerLoadError,
    SpawnGateError,
)
from .model_catalog import build_default_catalog, load_model_catalog
from .model_selection import build_allowed_model_set, model_key, parse_model_ref
from .gate import SpawnGate
from .spawner import Spawner

__all__ = [
    # Gate
    "SpawnGate",
    "Spawner",
    # Models
    "AllowedModelSet",
    "CleanupPolicy",
    "ModelCatalogEntry",
    "ModelRef",
    "RequesterContext",
    "SpawnMode",
    "SpawnRequest",
    # Config
    "DEFAULT_MODEL",
    "DEFAULT_PROVIDER",
    "GateConfig",
    "load_config",
    "load_yaml_config",
    # Model selection
    "build_allowed_model_set",
    "build_default_catalog",
    "load_model_catalog",
    "model_key",
    "parse_model_ref",
    # Errors
    "InvalidInputError",
    "InvalidModelRefError",
    "ModelNotAllowedError",
    "SpawnerLoadError",
    "SpawnGateError",
]
