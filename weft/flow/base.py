"""Flow base: a named set of agents driven toward one goal."""

from __future__ import annotations

from ..agent import Agent

AgentsArg = Agent | list[Agent] | dict[str, Agent]


class BaseFlow:
    """Holds agents by key. Subclass and implement ``execute``.

    A single agent is stored as ``default``; a list as ``agent_0``,
    ``agent_1``, ... The primary agent is the first key unless named.
    """

    def __init__(self, agents: AgentsArg, primary_agent_key: str | None = None) -> None:
        if isinstance(agents, Agent):
            self.agents: dict[str, Agent] = {"default": agents}
        elif isinstance(agents, list):
            self.agents = {f"agent_{i}": agent for i, agent in enumerate(agents)}
        else:
            self.agents = dict(agents)
        self.primary_agent_key = primary_agent_key or next(iter(self.agents), None)

    @property
    def primary_agent(self) -> Agent | None:
        if self.primary_agent_key is None:
            return None
        return self.agents.get(self.primary_agent_key)

    def get_agent(self, key: str) -> Agent | None:
        return self.agents.get(key)

    def add_agent(self, key: str, agent: Agent) -> None:
        self.agents[key] = agent

    async def execute(self, input_text: str) -> str:
        raise NotImplementedError
