"""Planning flow: break a goal into plan steps and hand each to an agent."""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass

from ..agent import Agent
from ..errors import FlowError, ToolError
from ..infra.logging import get_logger
from ..prompts import (
    PLAN_REQUEST_PROMPT,
    PLANNING_AGENTS_PROMPT,
    PLANNING_SYSTEM_PROMPT,
    STEP_PROMPT,
    SUMMARY_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
)
from ..tools import Plan, PlanningTool, PlanStepStatus
from ..types import AgentState, LLMProvider, SystemMessage, ToolChoice, UserMessage
from .base import AgentsArg, BaseFlow

logger = get_logger(__name__)

DEFAULT_PLAN_STEPS = ["Analyze request", "Execute task", "Verify results"]
SUMMARY_FAILED = "Plan completed. Error generating summary."

_STEP_TYPE = re.compile(r"\[([A-Z_]+)\]")


@dataclass
class StepInfo:
    index: int
    text: str
    type: str | None = None


class PlanningFlow(BaseFlow):
    """Runs the steps of one plan in order, one executor call per step.

    The plan lives in a ``PlanningTool``. Step status goes through the tool
    first; if the tool rejects the update the flow patches the stored plan
    itself, so a finished step is never lost. An executor that ends in
    FINISHED stops the loop early; the summary is produced either way.
    """

    def __init__(
        self,
        agents: AgentsArg,
        llm: LLMProvider,
        planning_tool: PlanningTool | None = None,
        executors: list[str] | None = None,
        plan_id: str | None = None,
        primary_agent_key: str | None = None,
        continue_on_error: bool = False,
    ) -> None:
        super().__init__(agents, primary_agent_key)
        self.llm = llm
        self.planning_tool = planning_tool or PlanningTool()
        self.executor_keys = list(executors) if executors else list(self.agents)
        self.active_plan_id = plan_id or f"plan_{int(time.time())}"
        self.continue_on_error = continue_on_error
        self.current_step_index: int | None = None

    @property
    def plan(self) -> Plan | None:
        return self.planning_tool.plans.get(self.active_plan_id)

    def get_executor(self, step_type: str | None = None) -> Agent:
        if step_type and step_type in self.agents:
            return self.agents[step_type]
        for key in self.executor_keys:
            if key in self.agents:
                return self.agents[key]
        if self.primary_agent is None:
            raise FlowError("No primary agent available")
        return self.primary_agent

    async def execute(self, input_text: str) -> str:
        try:
            if self.primary_agent is None:
                raise FlowError("No primary agent available")

            if self.plan is None:
                if not input_text:
                    raise FlowError(f"No plan found with ID: {self.active_plan_id}")
                await self.create_initial_plan(input_text)
                if self.plan is None:
                    logger.error("plan_missing", plan_id=self.active_plan_id)
                    return f"Failed to create plan for: {input_text}"
            else:
                logger.info("plan_resumed", plan_id=self.active_plan_id)

            result = ""
            while True:
                info = await self._next_step()
                self.current_step_index = info.index if info else None
                if info is None:
                    break

                executor = self.get_executor(info.type)
                step_result, ok = await self._execute_step(executor, info)
                result += f"{step_result}\n"

                if not ok and not self.continue_on_error:
                    return result
                if executor.last_state is AgentState.FINISHED:
                    logger.info("executor_finished", plan_id=self.active_plan_id, step=info.index)
                    break

            result += await self._finalize_plan()
            return result
        except Exception as e:
            logger.exception("flow_failed", plan_id=self.active_plan_id)
            return f"Execution failed: {e}"

    async def create_initial_plan(self, request: str) -> None:
        logger.info("plan_creating", plan_id=self.active_plan_id)

        system = PLANNING_SYSTEM_PROMPT
        agents = [
            {"name": key.upper(), "description": self.agents[key].description}
            for key in self.executor_keys
            if key in self.agents
        ]
        if len(agents) > 1:
            system += PLANNING_AGENTS_PROMPT.format(count=len(agents), agents=json.dumps(agents))

        response = await self.llm.ask_tool(
            messages=[UserMessage(content=PLAN_REQUEST_PROMPT.format(request=request))],
            system_msgs=[SystemMessage(content=system)],
            tools=[self.planning_tool.to_param()],
            tool_choice=ToolChoice.AUTO,
        )

        for call in response.tool_calls if response else []:
            if call.name != self.planning_tool.name:
                continue
            try:
                args = call.arguments if isinstance(call.arguments, dict) else json.loads(call.arguments or "{}")
            except ValueError:
                logger.error("plan_arguments_invalid", arguments=call.arguments)
                continue
            if not isinstance(args, dict):
                logger.error("plan_arguments_invalid", arguments=call.arguments)
                continue

            args["plan_id"] = self.active_plan_id
            try:
                result = await self.planning_tool.call(**args)
            except ToolError as e:
                logger.warning("plan_tool_rejected", plan_id=self.active_plan_id, error=e.message)
                continue
            logger.info("plan_created", plan_id=self.active_plan_id, result=str(result))
            if self.plan is not None:
                return

        logger.warning("plan_default", plan_id=self.active_plan_id)
        title = f"Plan for: {request[:50]}..." if len(request) > 50 else f"Plan for: {request}"
        await self.planning_tool.call(
            command="create", plan_id=self.active_plan_id, title=title, steps=list(DEFAULT_PLAN_STEPS)
        )

    async def _next_step(self) -> StepInfo | None:
        """First step still not_started or in_progress; marks it in_progress."""
        plan = self.plan
        if plan is None:
            logger.error("plan_missing", plan_id=self.active_plan_id)
            return None

        active = PlanStepStatus.get_active_statuses()
        for i, step in enumerate(plan.steps):
            status = plan.step_statuses[i] if i < len(plan.step_statuses) else PlanStepStatus.NOT_STARTED.value
            if status not in active:
                continue
            match = _STEP_TYPE.search(step)
            info = StepInfo(index=i, text=step, type=match.group(1).lower() if match else None)
            await self._update_step_status(i, PlanStepStatus.IN_PROGRESS)
            return info
        return None

    async def _execute_step(self, executor: Agent, info: StepInfo) -> tuple[str, bool]:
        plan_status = await self._get_plan_text()
        prompt = STEP_PROMPT.format(plan_status=plan_status, index=info.index, text=info.text or f"Step {info.index}")
        logger.info("step_executing", plan_id=self.active_plan_id, step=info.index, executor=executor.name)

        try:
            step_result = await executor.run(prompt)
        except Exception as e:
            logger.exception("step_failed", plan_id=self.active_plan_id, step=info.index)
            await self._update_step_status(info.index, PlanStepStatus.BLOCKED, notes=str(e))
            if self.continue_on_error:
                executor.reset()
            return f"Error executing step {info.index}: {e}", False

        await self._update_step_status(info.index, PlanStepStatus.COMPLETED)
        return step_result, True

    async def _update_step_status(self, index: int, status: PlanStepStatus, notes: str | None = None) -> None:
        try:
            await self.planning_tool.call(
                command="mark_step",
                plan_id=self.active_plan_id,
                step_index=index,
                step_status=status.value,
                step_notes=notes,
            )
            logger.info("step_marked", plan_id=self.active_plan_id, step=index, status=status.value)
        except ToolError as e:
            logger.warning("step_status_fallback", plan_id=self.active_plan_id, step=index, error=e.message)
            plan = self.plan
            if plan is None:
                return
            while len(plan.step_statuses) <= index:
                plan.step_statuses.append(PlanStepStatus.NOT_STARTED.value)
            while len(plan.step_notes) <= index:
                plan.step_notes.append("")
            plan.step_statuses[index] = status.value
            if notes:
                plan.step_notes[index] = notes

    async def _get_plan_text(self) -> str:
        try:
            return str(await self.planning_tool.call(command="get", plan_id=self.active_plan_id))
        except ToolError as e:
            logger.error("plan_text_fallback", plan_id=self.active_plan_id, error=e.message)
            return self._plan_text_from_storage()

    def _plan_text_from_storage(self) -> str:
        plan = self.plan
        if plan is None:
            return f"Error: Plan with ID {self.active_plan_id} not found"
        n = len(plan.steps)
        statuses = (plan.step_statuses + [PlanStepStatus.NOT_STARTED.value] * n)[:n]
        notes = (plan.step_notes + [""] * n)[:n]
        snapshot = Plan(
            plan_id=self.active_plan_id,
            title=plan.title or "Untitled Plan",
            steps=list(plan.steps),
            step_statuses=statuses,
            step_notes=notes,
        )
        return snapshot.format()

    async def _finalize_plan(self) -> str:
        plan_text = await self._get_plan_text()
        request = SUMMARY_PROMPT.format(plan_text=plan_text)
        try:
            summary = await self.llm.ask(
                messages=[UserMessage(content=request)],
                system_msgs=[SystemMessage(content=SUMMARY_SYSTEM_PROMPT)],
            )
        except Exception as e:
            logger.error("summary_failed", plan_id=self.active_plan_id, error=str(e))
            agent = self.primary_agent
            if agent is None:
                return SUMMARY_FAILED
            try:
                summary = await agent.run(request)
            except Exception:
                logger.exception("agent_summary_failed", plan_id=self.active_plan_id)
                return SUMMARY_FAILED
        return f"Plan completed:\n\n{plan_text}\n{summary}"
