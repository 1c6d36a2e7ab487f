"""
Tests for the agent state machine
"""

import pytest

from conftest import MockLLMProvider, RecordingPolicy
from weft.agent import NO_ACTION_NEEDED, Agent, create_general_agent
from weft.config import AgentSettings
from weft.errors import InvalidStateTransition
from weft.memory import Memory
from weft.prompts import STUCK_PROMPT
from weft.types import AgentState, AssistantMessage, Role, ToolMessage, UserMessage


def _agent(policy, **kwargs) -> Agent:
    return Agent(llm=MockLLMProvider(), policy=policy, name="tester", **kwargs)


class NeverActs:
    async def think(self, agent):
        return False

    async def act(self, agent):
        raise AssertionError("act must not run")


class FailingCleanup(RecordingPolicy):
    async def cleanup(self) -> None:
        raise RuntimeError("cleanup failed")


class TestRun:
    @pytest.mark.asyncio
    async def test_request_is_recorded_first(self):
        agent = _agent(RecordingPolicy(finish_after=1))
        await agent.run("do the thing")
        first = agent.messages[0]
        assert isinstance(first, UserMessage)
        assert first.content == "do the thing"

    @pytest.mark.asyncio
    async def test_step_budget(self):
        policy = RecordingPolicy()
        agent = _agent(policy, max_steps=3)

        result = await agent.run("go")

        assert result.splitlines() == [
            "Step 1: reply 1",
            "Step 2: reply 2",
            "Step 3: reply 3",
            "Terminated: Reached max steps (3)",
        ]
        assert policy.acts == 3
        assert agent.state is AgentState.IDLE
        assert agent.current_step == 0

    @pytest.mark.asyncio
    async def test_finished_ends_loop_early(self):
        agent = _agent(RecordingPolicy(finish_after=2), max_steps=5)

        result = await agent.run("go")

        assert result == "Step 1: reply 1\nStep 2: reply 2"
        assert agent.state is AgentState.IDLE
        assert agent.last_state is AgentState.FINISHED
        assert agent.current_step == 2

    @pytest.mark.asyncio
    async def test_finished_agent_can_run_again(self):
        policy = RecordingPolicy(finish_after=1)
        agent = _agent(policy, max_steps=5)
        await agent.run("first")
        policy.finish_after = 2
        result = await agent.run("second")
        assert result.startswith("Step 1:")
        assert policy.acts == 2

    @pytest.mark.asyncio
    async def test_think_false_short_circuits(self):
        agent = _agent(NeverActs(), max_steps=1)
        result = await agent.run()
        assert result.splitlines()[0] == f"Step 1: {NO_ACTION_NEEDED}"

    @pytest.mark.asyncio
    async def test_exception_moves_to_error(self):
        policy = RecordingPolicy(error=RuntimeError("disk on fire"))
        agent = _agent(policy)

        with pytest.raises(RuntimeError, match="disk on fire"):
            await agent.run("go")

        assert agent.state is AgentState.ERROR
        assert agent.last_state is AgentState.ERROR
        assert policy.cleanups == 1

        with pytest.raises(InvalidStateTransition):
            await agent.run("again")

        agent.reset()
        assert agent.state is AgentState.IDLE
        assert agent.current_step == 0
        await agent.run("again")

    @pytest.mark.asyncio
    async def test_cleanup_runs_after_every_run(self):
        policy = RecordingPolicy(finish_after=1)
        agent = _agent(policy)
        await agent.run("one")
        await agent.run("two")
        assert policy.cleanups == 2

    @pytest.mark.asyncio
    async def test_cleanup_failure_is_not_raised(self):
        agent = _agent(FailingCleanup(finish_after=1))
        assert await agent.run("go") == "Step 1: reply 1"

    def test_max_steps_must_be_positive(self):
        with pytest.raises(ValueError):
            _agent(RecordingPolicy(), max_steps=0)


class TestStateInvariant:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("state", [AgentState.RUNNING, AgentState.FINISHED, AgentState.ERROR])
    async def test_run_requires_idle(self, state):
        agent = _agent(RecordingPolicy())
        agent.update_memory(Role.USER, "earlier")
        agent.current_step = 4
        agent.state = state

        with pytest.raises(InvalidStateTransition) as excinfo:
            await agent.run("new request")

        assert excinfo.value.code == "INVALID_STATE"
        assert str(excinfo.value) == f"Cannot run agent from state: {state.value}"
        assert agent.current_step == 4
        assert len(agent.memory) == 1
        assert agent.state is state


class TestStuckDetection:
    def test_threshold(self):
        agent = _agent(RecordingPolicy())
        agent.update_memory(Role.ASSISTANT, "X")
        agent.update_memory(Role.ASSISTANT, "X")
        assert not agent.is_stuck()
        agent.update_memory(Role.ASSISTANT, "X")
        assert agent.is_stuck()

    def test_only_assistant_messages_count(self):
        agent = _agent(RecordingPolicy())
        agent.memory.add_message(ToolMessage(content="X", tool_call_id="c1"))
        agent.update_memory(Role.USER, "X")
        agent.update_memory(Role.ASSISTANT, "X")
        assert not agent.is_stuck()

    def test_empty_last_message_is_not_stuck(self):
        agent = _agent(RecordingPolicy())
        for _ in range(3):
            agent.memory.add_message(AssistantMessage(content=None))
        assert not agent.is_stuck()

    def test_custom_threshold(self):
        agent = _agent(RecordingPolicy(), duplicate_threshold=1)
        agent.update_memory(Role.ASSISTANT, "X")
        agent.update_memory(Role.ASSISTANT, "X")
        assert agent.is_stuck()

    def test_directive(self):
        agent = _agent(RecordingPolicy(), next_step_prompt="What next?")
        assert agent.next_step_directive == "What next?"
        agent.handle_stuck_state()
        assert agent.next_step_directive == f"{STUCK_PROMPT}\nWhat next?"

    def test_directive_without_next_step_prompt(self):
        agent = _agent(RecordingPolicy())
        agent.handle_stuck_state()
        assert agent.next_step_directive == STUCK_PROMPT

    @pytest.mark.asyncio
    async def test_directive_is_not_cumulative(self):
        policy = RecordingPolicy(replies=["same"] * 5)
        agent = _agent(policy, max_steps=5, next_step_prompt="base")

        await agent.run()

        # stuck from step 3 onward: steps 4 and 5 see the directive exactly once
        assert policy.directives[:3] == ["base", "base", "base"]
        for directive in policy.directives[3:]:
            assert directive == f"{STUCK_PROMPT}\nbase"
            assert directive.count(STUCK_PROMPT) == 1
        assert agent.next_step_prompt == "base"

    @pytest.mark.asyncio
    async def test_directive_clears_once_unstuck(self):
        policy = RecordingPolicy(replies=["same", "same", "same", "fresh", "other"])
        agent = _agent(policy, max_steps=5, next_step_prompt="base")

        await agent.run()

        assert policy.directives == ["base", "base", "base", f"{STUCK_PROMPT}\nbase", "base"]
        assert not agent.stuck


class TestUpdateMemory:
    def test_roles(self):
        agent = _agent(RecordingPolicy())
        agent.update_memory("user", "u")
        agent.update_memory(Role.ASSISTANT, "a")
        agent.update_memory(Role.SYSTEM, "s")
        agent.update_memory(Role.TOOL, "t", tool_call_id="c9", name="bash")
        roles = [m.role for m in agent.messages]
        assert roles == [Role.USER, Role.ASSISTANT, Role.SYSTEM, Role.TOOL]
        assert agent.messages[-1].tool_call_id == "c9"

    def test_unknown_role(self):
        with pytest.raises(ValueError):
            _agent(RecordingPolicy()).update_memory("narrator", "x")

    def test_reset_can_clear_memory(self):
        agent = _agent(RecordingPolicy())
        agent.update_memory(Role.USER, "u")
        agent.reset(clear_memory=True)
        assert len(agent.memory) == 0


class TestConstruction:
    def test_injected_memory_is_used(self):
        memory = Memory(max_messages=5)
        agent = _agent(RecordingPolicy(), memory=memory)
        assert agent.memory is memory
        assert agent.memory.max_messages == 5

    @pytest.mark.asyncio
    async def test_injected_memory_caps_history(self):
        agent = _agent(RecordingPolicy(), memory=Memory(max_messages=3), max_steps=5)
        await agent.run("go")
        assert [m.content for m in agent.messages] == ["reply 3", "reply 4", "reply 5"]

    def test_general_agent_uses_settings(self, tmp_path):
        settings = AgentSettings(max_messages=7, max_steps=4, duplicate_threshold=3)
        agent = create_general_agent(MockLLMProvider(), workspace_root=tmp_path, settings=settings)
        assert agent.memory.max_messages == 7
        assert agent.max_steps == 4
        assert agent.duplicate_threshold == 3
        assert agent.policy.tools.names() == ["bash", "read_file", "write_file", "ask_human", "terminate"]
