"""Stdio MCP server exposing ``sessions_spawn``.

The spawning service is supplied by the host: a Python file exporting
``create_spawner(config) -> Spawner``. The requester context comes from
SPAWNGATE_REQUESTER_* environment variables, since one server process
serves one requesting agent.

Usage:
    spawngate-mcp --spawner-file host_spawner.py
    spawngate-mcp --spawner-file host_spawner.py --config spawngate.yaml
    python -m spawngate.mcp_server.stdio_server --spawner-file host_spawner.py
"""

import argparse
import importlib.util
import logging
import os
import sys
import uuid
from contextlib import asynccontextmanager
from typing import Annotated, Any

from mcp.server.fastmcp import Context, FastMCP
from pydantic import Field

from ..config import GateConfig, load_config
from ..errors import SpawnerLoadError
from ..gate import SpawnGate
from ..models import RequesterContext
from ..spawner import Spawner
from .tools import (
    SESSIONS_SPAWN_DESCRIPTION,
    SESSIONS_SPAWN_SCHEMA,
    SESSIONS_SPAWN_TOOL_NAME,
    SessionsSpawnTool,
)

logger = logging.getLogger(__name__)

# Parsed CLI args, set in main() before the server starts
_parsed_args: argparse.Namespace | None = None


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI args for the MCP server process."""
    parser = argparse.ArgumentParser(
        prog="spawngate-mcp",
        description="sessions_spawn MCP server",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML config file. Also reads SPAWNGATE_CONFIG_FILE env var.",
    )
    parser.add_argument(
        "--spawner-file",
        default=None,
        help=(
            "Python file exporting create_spawner(config). "
            "Also reads SPAWNGATE_SPAWNER_FILE env var."
        ),
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def _load_spawner(path: str, config: GateConfig) -> Spawner:
    """Load the host's spawning service from a Python file.

    The file must export a create_spawner(config) function returning a
    Spawner.
    """
    spec = importlib.util.spec_from_file_location("spawngate_host_spawner", path)
    if spec is None or spec.loader is None:
        raise SpawnerLoadError(path, "not a loadable Python file")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except FileNotFoundError:
        raise SpawnerLoadError(path, "file not found") from None

    create_fn = getattr(module, "create_spawner", None)
    if create_fn is None:
        raise SpawnerLoadError(path, "no create_spawner(config) function")

    spawner = create_fn(config)
    if not isinstance(spawner, Spawner):
        raise SpawnerLoadError(
            path,
            f"create_spawner returned {type(spawner).__name__}, not a Spawner",
        )
    logger.info("Loaded spawner %s from %s", type(spawner).__name__, path)
    return spawner


@asynccontextmanager
async def gate_lifespan(server: FastMCP):
    """Build the gate and the bound sessions_spawn tool.

    Yields a context dict accessible via
    ctx.request_context.lifespan_context in tool handlers.
    """
    global _parsed_args
    if _parsed_args is None:
        _parsed_args = _parse_args()

    if _parsed_args.config:
        os.environ["SPAWNGATE_CONFIG_FILE"] = _parsed_args.config
    config = load_config()

    # Logging must go to stderr (stdout is the stdio transport)
    level = (
        logging.DEBUG if _parsed_args.verbose
        else logging.getLevelName(config.log_level.upper())
    )
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    spawner_file = (
        _parsed_args.spawner_file or os.getenv("SPAWNGATE_SPAWNER_FILE")
    )
    if not spawner_file:
        raise SpawnerLoadError(
            "<unset>", "pass --spawner-file or set SPAWNGATE_SPAWNER_FILE",
        )
    spawner = _load_spawner(spawner_file, config)

    gate = SpawnGate(spawner, default_provider=config.default_provider)
    requester = RequesterContext.from_env()
    logger.info(
        "spawngate MCP server ready: default_model=%s/%s allowed_models=%d "
        "requester=%s",
        config.default_provider,
        config.default_model,
        len(config.allowed_models),
        requester.agent_session_key or "<unknown>",
    )
    yield {"spawn_tool": SessionsSpawnTool(gate, requester)}
    logger.info("spawngate MCP server shut down")


def _declared(name: str) -> Any:
    """Field carrying the declared schema for *name*, with no validation.

    The gate normalizes these values itself.
    """
    return Field(json_schema_extra=SESSIONS_SPAWN_SCHEMA["properties"][name])


def register_tools(mcp: FastMCP) -> None:
    """Register sessions_spawn with the FastMCP instance."""

    # Parameter names are the wire names of the tool schema.
    @mcp.tool(
        name=SESSIONS_SPAWN_TOOL_NAME,
        description=SESSIONS_SPAWN_DESCRIPTION,
    )
    async def sessions_spawn(  # noqa: N803
        task: str,
        label: str | None = None,
        agentId: str | None = None,
        model: str | None = None,
        thinking: str | None = None,
        runTimeoutSeconds: Annotated[Any, _declared("runTimeoutSeconds")] = None,
        timeoutSeconds: Annotated[Any, _declared("timeoutSeconds")] = None,
        thread: Annotated[Any, _declared("thread")] = None,
        mode: Annotated[Any, _declared("mode")] = None,
        cleanup: Annotated[Any, _declared("cleanup")] = None,
        ctx: Context = None,
    ) -> str:
        tool: SessionsSpawnTool = (
            ctx.request_context.lifespan_context["spawn_tool"]
        )
        args = {
            "task": task,
            "label": label,
            "agentId": agentId,
            "model": model,
            "thinking": thinking,
            "runTimeoutSeconds": runTimeoutSeconds,
            "timeoutSeconds": timeoutSeconds,
            "thread": thread,
            "mode": mode,
            "cleanup": cleanup,
        }
        result = await tool.execute(
            f"{SESSIONS_SPAWN_TOOL_NAME}-{uuid.uuid4().hex}",
            {k: v for k, v in args.items() if v is not None},
        )
        return result["content"][0]["text"]


mcp = FastMCP(
    name="spawngate",
    instructions=(
        "Use sessions_spawn to hand a task to a sub-agent in its own "
        "session. Results are delivered back to this conversation when "
        "the sub-agent finishes."
    ),
    lifespan=gate_lifespan,
)

register_tools(mcp)


def main() -> None:
    """Entry point for the MCP server."""
    global _parsed_args
    _parsed_args = _parse_args()
    try:
        mcp.run(transport="stdio")
    except Exception:
        logger.exception("Fatal stdio MCP server error (pid=%s)", os.getpid())
        raise


if __name__ == "__main__":
    main()
