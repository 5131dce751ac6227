"""Abstract base for spawning services.

A spawner owns everything after admission: creating the sub-agent
session, enforcing ``run_timeout_seconds``, cleanup, and delivering the
completion message back to the requester. The gate only calls
``spawn()`` once per admitted request and passes its result through.
"""
from __future__ import annotations

import abc
from typing import Any

from .models import RequesterContext, SpawnRequest


class Spawner(abc.ABC):
    """Spawning service interface."""

    @abc.abstractmethod
    async def spawn(
        self,
        request: SpawnRequest,
        requester: RequesterContext,
    ) -> Any:
        """Create the sub-agent session for an admitted request.

        Returns a JSON-serializable result. Failures may be reported in
        the result or raised; the gate does not interpret either.
        """
