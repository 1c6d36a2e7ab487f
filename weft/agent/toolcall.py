"""Tool-calling step policy."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ..errors import EmptyLLMResponse, TokenLimitExceeded, ToolCallRequired
from ..infra.logging import get_logger
from ..tools import Terminate, ToolRegistry
from ..types import AgentState, AssistantMessage, Role, ToolCall, ToolChoice, ToolMessage, ToolResult

if TYPE_CHECKING:
    from .core import Agent

logger = get_logger(__name__)

NO_CONTENT = "No content or commands to execute"


class ToolCallPolicy:
    """Think by asking the model to choose tools; act by dispatching them in order.

    Tool-level failures never escape ``act``: unknown tools, malformed
    arguments and tool exceptions all become observations the model sees on
    its next turn. Calling a special tool (``terminate`` by default) moves
    the agent to FINISHED.
    """

    def __init__(
        self,
        tools: ToolRegistry | None = None,
        tool_choice: ToolChoice = ToolChoice.AUTO,
        special_tool_names: list[str] | None = None,
        max_observe: int | None = None,
        model: str | None = None,
    ) -> None:
        self.tools = tools if tools is not None else ToolRegistry(Terminate())
        self.tool_choice = ToolChoice(tool_choice)
        self.special_tool_names = special_tool_names if special_tool_names is not None else [Terminate.name]
        self.max_observe = max_observe
        self.model = model
        self.tool_calls: list[ToolCall] = []
        self._current_base64_image: str | None = None

    async def think(self, agent: Agent) -> bool:
        prompt = agent.next_step_directive
        if prompt:
            agent.update_memory(Role.USER, prompt)

        try:
            response = await agent.llm.ask_tool(
                messages=agent.messages,
                system_msgs=agent.system_messages(),
                tools=self.tools.to_params(),
                tool_choice=self.tool_choice,
                model=self.model,
            )
            if response is None:
                raise EmptyLLMResponse()
        except TokenLimitExceeded as e:
            logger.error("token_limit_exceeded", agent=agent.name, error=e.message)
            agent.update_memory(Role.ASSISTANT, f"Maximum token limit reached, cannot continue execution: {e}")
            agent.state = AgentState.FINISHED
            self.tool_calls = []
            return False
        except EmptyLLMResponse as e:
            logger.error("llm_empty_response", agent=agent.name, error=e.message)
            agent.update_memory(Role.ASSISTANT, f"Error encountered while processing: {e}")
            self.tool_calls = []
            return False

        content = response.content or ""
        offered = list(response.tool_calls or [])
        logger.info("agent_thoughts", agent=agent.name, content=content)
        logger.info("tools_selected", agent=agent.name, count=len(offered), tools=[tc.name for tc in offered])
        for tc in offered:
            logger.info("tool_arguments", agent=agent.name, tool=tc.name, arguments=tc.arguments)

        if self.tool_choice is ToolChoice.NONE:
            self.tool_calls = []
            if offered:
                logger.warning("tool_calls_ignored", agent=agent.name, count=len(offered))
            if content:
                agent.memory.add_message(AssistantMessage(content=content))
                return True
            return False

        self.tool_calls = offered
        agent.memory.add_message(AssistantMessage(content=content or None, tool_calls=offered))

        if self.tool_choice is ToolChoice.REQUIRED and not offered:
            return True  # act() raises ToolCallRequired
        if not offered:
            return bool(content)
        return True

    async def act(self, agent: Agent) -> str:
        if not self.tool_calls:
            if self.tool_choice is ToolChoice.REQUIRED:
                raise ToolCallRequired()
            messages = agent.messages
            last = messages[-1].content if messages else None
            return last if isinstance(last, str) and last else NO_CONTENT

        results: list[str] = []
        for call in self.tool_calls:
            self._current_base64_image = None
            result = await self.execute_tool(agent, call)
            if self.max_observe:
                result = result[: self.max_observe]
            logger.info("tool_completed", agent=agent.name, tool=call.name, result=result)

            agent.memory.add_message(
                ToolMessage(
                    content=result,
                    tool_call_id=call.id,
                    name=call.name,
                    base64_image=self._current_base64_image,
                )
            )
            results.append(result)
        return "\n\n".join(results)

    async def execute_tool(self, agent: Agent, call: ToolCall) -> str:
        """Dispatch one call and render the observation text."""
        name = call.name
        if not name:
            return "Error: Invalid command format"
        if name not in self.tools:
            return f"Error: Unknown tool '{name}'"

        try:
            args = _parse_arguments(call.arguments)
        except ValueError:
            logger.error("tool_arguments_invalid", agent=agent.name, tool=name, arguments=call.arguments)
            return f"Error: Error parsing arguments for {name}: Invalid JSON format"

        try:
            logger.info("tool_activating", agent=agent.name, tool=name)
            result = await self.tools.execute(name, args)
            await self._handle_special_tool(agent, name, result)
        except Exception as e:
            logger.exception("tool_failed", agent=agent.name, tool=name)
            return f"Error: ⚠️ Tool '{name}' encountered a problem: {e}"

        self._current_base64_image = result.base64_image
        if result:
            return f"Observed output of cmd `{name}` executed:\n{result}"
        return f"Cmd `{name}` completed with no output"

    def is_special_tool(self, name: str) -> bool:
        return name.lower() in (n.lower() for n in self.special_tool_names)

    def should_finish_execution(self, name: str, result: ToolResult) -> bool:
        return True

    async def _handle_special_tool(self, agent: Agent, name: str, result: ToolResult) -> None:
        if not self.is_special_tool(name) or result.error:
            return
        if self.should_finish_execution(name, result):
            logger.info("special_tool_finished", agent=agent.name, tool=name)
            agent.state = AgentState.FINISHED

    async def cleanup(self) -> None:
        await self.tools.cleanup_all()


def _parse_arguments(raw: str | dict[str, Any] | None) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    args = json.loads(raw or "{}")
    if not isinstance(args, dict):
        raise ValueError("tool arguments must be a JSON object")
    return args
