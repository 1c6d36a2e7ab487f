"""
Pytest Configuration and Fixtures
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from weft.agent import Agent
from weft.types import AgentState, LLMResponse, Role, ToolCall, ToolChoice


class MockLLMProvider:
    """Scripted LLM: hands out queued replies in order and records every call.

    A queued exception is raised instead of returned. When a queue runs dry
    ``ask_tool`` answers with plain content and ``ask`` with a fixed summary.
    """

    def __init__(
        self,
        tool_responses: list[LLMResponse | Exception | None] | None = None,
        text_responses: list[str | Exception] | None = None,
    ) -> None:
        self.tool_responses = list(tool_responses or [])
        self.text_responses = list(text_responses or [])
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def ask(self, messages, system_msgs=None, temperature=None, model=None) -> str:
        self.calls.append(("ask", {"messages": list(messages), "system_msgs": system_msgs}))
        if not self.text_responses:
            return "All steps were carried out."
        reply = self.text_responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def ask_tool(
        self,
        messages,
        system_msgs=None,
        tools=None,
        tool_choice=ToolChoice.AUTO,
        temperature=None,
        model=None,
    ) -> LLMResponse | None:
        self.calls.append(
            (
                "ask_tool",
                {
                    "messages": list(messages),
                    "system_msgs": system_msgs,
                    "tools": tools,
                    "tool_choice": tool_choice,
                },
            )
        )
        if not self.tool_responses:
            return LLMResponse(content="Nothing left to do.")
        reply = self.tool_responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]


class RecordingPolicy:
    """Step policy that always acts, replying with scripted text.

    Each act appends the reply as an assistant message. ``finish_after``
    moves the agent to FINISHED after that many acts; ``fail_on`` raises
    when the latest user message contains the given text.
    """

    def __init__(
        self,
        replies: list[str] | None = None,
        finish_after: int | None = None,
        fail_on: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.replies = list(replies or [])
        self.finish_after = finish_after
        self.fail_on = fail_on
        self.error = error
        self.acts = 0
        self.prompts: list[str] = []
        self.directives: list[str | None] = []
        self.cleanups = 0

    async def think(self, agent: Agent) -> bool:
        self.directives.append(agent.next_step_directive)
        return True

    async def act(self, agent: Agent) -> str:
        self.acts += 1
        users = [m.content for m in agent.messages if m.role is Role.USER]
        latest = users[-1] if users else ""
        self.prompts.append(latest)
        if self.error is not None:
            err, self.error = self.error, None
            raise err
        if self.fail_on and self.fail_on in latest:
            raise RuntimeError(f"cannot handle: {self.fail_on}")
        reply = self.replies[self.acts - 1] if self.acts <= len(self.replies) else f"reply {self.acts}"
        agent.update_memory(Role.ASSISTANT, reply)
        if self.finish_after is not None and self.acts >= self.finish_after:
            agent.state = AgentState.FINISHED
        return reply

    async def cleanup(self) -> None:
        self.cleanups += 1


def tool_call(name: str, args: dict[str, Any] | str | None = None, call_id: str | None = None) -> ToolCall:
    arguments = args if isinstance(args, str) else json.dumps(args or {})
    return ToolCall(id=call_id or f"call_{name}", name=name, arguments=arguments)


def respond(content: str | None = None, *calls: ToolCall) -> LLMResponse:
    return LLMResponse(content=content, tool_calls=list(calls))


@pytest.fixture
def mock_llm() -> MockLLMProvider:
    """Returns an empty scripted LLM."""
    return MockLLMProvider()
