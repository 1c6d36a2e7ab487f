"""Agent: the bounded step loop. Composition over inheritance."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from ..errors import InvalidStateTransition
from ..infra.logging import get_logger
from ..memory import Memory
from ..prompts import STUCK_PROMPT
from ..types import (
    AgentState,
    AssistantMessage,
    LLMProvider,
    Message,
    Role,
    SupportsCleanup,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from .strategy import StepPolicy

logger = get_logger(__name__)

NO_ACTION_NEEDED = "Thinking complete - no action needed"


class Agent:
    """Provider + memory + step policy, driven through a bounded loop.

    ``run`` only starts from IDLE. Each step asks the policy to think and
    then act, checks for repeated assistant output, and records
    ``"Step n: result"``. The loop ends when the policy moves the agent to
    FINISHED or the step budget is spent. The state before the run is put
    back afterwards, except after an exception: the agent then stays in
    ERROR until ``reset()``. ``last_state`` keeps the state the loop ended in.
    """

    def __init__(
        self,
        llm: LLMProvider,
        policy: StepPolicy,
        name: str = "agent",
        description: str | None = None,
        system_prompt: str | None = None,
        next_step_prompt: str | None = None,
        memory: Memory | None = None,
        max_steps: int = 10,
        duplicate_threshold: int = 2,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.name = name
        self.description = description
        self.llm = llm
        self.policy = policy
        self.system_prompt = system_prompt
        self.next_step_prompt = next_step_prompt
        self.memory = memory if memory is not None else Memory()
        self.max_steps = max_steps
        self.duplicate_threshold = duplicate_threshold

        self.state = AgentState.IDLE
        self.last_state = AgentState.IDLE
        self.current_step = 0
        self._stuck = False

    @property
    def messages(self) -> list[Message]:
        return self.memory.messages

    @property
    def stuck(self) -> bool:
        """True while the corrective directive is being added to the next-step prompt."""
        return self._stuck

    @property
    def next_step_directive(self) -> str | None:
        """The next-step prompt as it should be sent on the coming step."""
        if not self._stuck:
            return self.next_step_prompt
        if self.next_step_prompt:
            return f"{STUCK_PROMPT}\n{self.next_step_prompt}"
        return STUCK_PROMPT

    def system_messages(self) -> list[SystemMessage] | None:
        return [SystemMessage(content=self.system_prompt)] if self.system_prompt else None

    def update_memory(
        self,
        role: Role | str,
        content: str,
        base64_image: str | None = None,
        tool_call_id: str | None = None,
        name: str | None = None,
    ) -> None:
        role = Role(role)
        msg: Message
        if role is Role.USER:
            msg = UserMessage(content=content, base64_image=base64_image)
        elif role is Role.ASSISTANT:
            msg = AssistantMessage(content=content, base64_image=base64_image)
        elif role is Role.SYSTEM:
            msg = SystemMessage(content=content)
        else:
            msg = ToolMessage(content=content, tool_call_id=tool_call_id or "", name=name, base64_image=base64_image)
        self.memory.add_message(msg)

    @asynccontextmanager
    async def state_context(self, new_state: AgentState) -> AsyncIterator[None]:
        previous = self.state
        self.state = new_state
        try:
            yield
        except BaseException:
            self.state = AgentState.ERROR
            raise
        finally:
            self.last_state = self.state
            if self.state is not AgentState.ERROR:
                self.state = previous

    async def run(self, request: str | None = None) -> str:
        if self.state is not AgentState.IDLE:
            raise InvalidStateTransition(self.state)

        if request:
            self.update_memory(Role.USER, request)
        self.current_step = 0

        results: list[str] = []
        try:
            async with self.state_context(AgentState.RUNNING):
                while self.current_step < self.max_steps and self.state is not AgentState.FINISHED:
                    self.current_step += 1
                    logger.info("step_started", agent=self.name, step=self.current_step, max_steps=self.max_steps)
                    result = await self.step()

                    if self.is_stuck():
                        self.handle_stuck_state()
                    else:
                        self._stuck = False
                    results.append(f"Step {self.current_step}: {result}")

                if self.state is not AgentState.FINISHED and self.current_step >= self.max_steps:
                    logger.info("max_steps_reached", agent=self.name, max_steps=self.max_steps)
                    self.current_step = 0
                    self.state = AgentState.IDLE
                    results.append(f"Terminated: Reached max steps ({self.max_steps})")
        finally:
            await self.cleanup()

        return "\n".join(results) if results else "No steps executed"

    async def step(self) -> str:
        if not await self.policy.think(self):
            return NO_ACTION_NEEDED
        return await self.policy.act(self)

    def is_stuck(self) -> bool:
        messages = self.memory.messages
        if len(messages) < 2:
            return False
        last = messages[-1]
        if not last.content:
            return False
        duplicates = sum(
            1 for m in reversed(messages[:-1]) if m.role is Role.ASSISTANT and m.content == last.content
        )
        return duplicates >= self.duplicate_threshold

    def handle_stuck_state(self) -> None:
        # one directive at a time; it is dropped again by the first step that is not stuck
        self._stuck = True
        logger.warning("agent_stuck", agent=self.name, prompt=STUCK_PROMPT)

    async def cleanup(self) -> None:
        if not isinstance(self.policy, SupportsCleanup):
            return
        try:
            await self.policy.cleanup()
        except Exception:
            logger.exception("agent_cleanup_failed", agent=self.name)

    def reset(self, clear_memory: bool = False) -> None:
        """Return to IDLE with a fresh step budget, e.g. after an ERROR."""
        self.state = AgentState.IDLE
        self.last_state = AgentState.IDLE
        self.current_step = 0
        self._stuck = False
        if clear_memory:
            self.memory.clear()

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, state={self.state.value})"
