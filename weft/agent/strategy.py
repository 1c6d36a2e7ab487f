"""Step policies: the think/act half of an agent."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .core import Agent


@runtime_checkable
class StepPolicy(Protocol):
    """Decides (``think``) and carries out (``act``) one step of an agent.

    ``think`` returns False when there is nothing to act on. Every action a
    step performs is decided in ``think`` before ``act`` runs any of them.
    A policy that holds resources may also define ``async cleanup()``; the
    agent calls it once a run ends, however it ends.
    """

    async def think(self, agent: Agent) -> bool: ...

    async def act(self, agent: Agent) -> str: ...
