"""Planning tool: create and track multi-step plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ToolError
from ..types import ToolResult
from .base import BaseTool


class PlanStepStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    @classmethod
    def get_all_statuses(cls) -> list[str]:
        return [s.value for s in cls]

    @classmethod
    def get_active_statuses(cls) -> list[str]:
        """Statuses of steps that still need work."""
        return [cls.NOT_STARTED.value, cls.IN_PROGRESS.value]

    @classmethod
    def get_status_marks(cls) -> dict[str, str]:
        return {
            cls.COMPLETED.value: "[✓]",
            cls.IN_PROGRESS.value: "[→]",
            cls.BLOCKED.value: "[!]",
            cls.NOT_STARTED.value: "[ ]",
        }


COMMANDS = ["create", "update", "list", "get", "set_active", "mark_step", "delete"]


@dataclass
class Plan:
    """An ordered checklist; statuses and notes run parallel to ``steps``."""

    plan_id: str
    title: str
    steps: list[str] = field(default_factory=list)
    step_statuses: list[str] = field(default_factory=list)
    step_notes: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.step_statuses:
            self.step_statuses = [PlanStepStatus.NOT_STARTED.value] * len(self.steps)
        if not self.step_notes:
            self.step_notes = [""] * len(self.steps)

    def count(self, status: PlanStepStatus) -> int:
        return sum(1 for s in self.step_statuses if s == status.value)

    def replace_steps(self, steps: list[str]) -> None:
        """Swap in a new step list, keeping state for steps unchanged at the same index."""
        statuses: list[str] = []
        notes: list[str] = []
        for i, step in enumerate(steps):
            if i < len(self.steps) and step == self.steps[i]:
                statuses.append(self.step_statuses[i])
                notes.append(self.step_notes[i])
            else:
                statuses.append(PlanStepStatus.NOT_STARTED.value)
                notes.append("")
        self.steps = list(steps)
        self.step_statuses = statuses
        self.step_notes = notes

    def format(self) -> str:
        header = f"Plan: {self.title} (ID: {self.plan_id})\n"
        output = header + "=" * len(header) + "\n\n"

        total = len(self.steps)
        completed = self.count(PlanStepStatus.COMPLETED)
        output += f"Progress: {completed}/{total} steps completed "
        output += f"({completed / total * 100:.1f}%)\n" if total else "(0%)\n"
        output += (
            f"Status: {completed} completed, {self.count(PlanStepStatus.IN_PROGRESS)} in progress, "
            f"{self.count(PlanStepStatus.BLOCKED)} blocked, "
            f"{self.count(PlanStepStatus.NOT_STARTED)} not started\n\n"
        )
        output += "Steps:\n"

        marks = PlanStepStatus.get_status_marks()
        for i, (step, status, notes) in enumerate(zip(self.steps, self.step_statuses, self.step_notes)):
            output += f"{i}. {marks.get(status, '[ ]')} {step}\n"
            if notes:
                output += f"   Notes: {notes}\n"
        return output


class PlanningParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    command: str = Field(
        ...,
        description="The command to execute. Available commands: " + ", ".join(COMMANDS) + ".",
        json_schema_extra={"enum": COMMANDS},
    )
    plan_id: str | None = Field(
        None,
        description=(
            "Unique identifier for the plan. Required for create, update, set_active, and delete "
            "commands. Optional for get and mark_step (uses active plan if not specified)."
        ),
    )
    title: str | None = Field(
        None, description="Title for the plan. Required for create command, optional for update command."
    )
    steps: list[str] | None = Field(
        None, description="List of plan steps. Required for create command, optional for update command."
    )
    step_index: int | None = Field(
        None, description="Index of the step to update (0-based). Required for mark_step command."
    )
    step_status: str | None = Field(
        None,
        description="Status to set for a step. Used with mark_step command.",
        json_schema_extra={"enum": PlanStepStatus.get_all_statuses()},
    )
    step_notes: str | None = Field(None, description="Additional notes for a step. Optional for mark_step command.")


class PlanningTool(BaseTool):
    """In-process plan store driven by commands.

    Malformed input raises ``ToolError`` with a message meant for the model.
    """

    name = "planning"
    description = (
        "A planning tool that allows the agent to create and manage plans for solving complex tasks.\n"
        "The tool provides functionality for creating plans, updating plan steps, and tracking progress."
    )
    parameters = PlanningParams

    def __init__(self) -> None:
        self.plans: dict[str, Plan] = {}
        self.current_plan_id: str | None = None

    async def execute(self, params: PlanningParams) -> ToolResult:
        handlers: dict[str, Any] = {
            "create": lambda: self._create(params.plan_id, params.title, params.steps),
            "update": lambda: self._update(params.plan_id, params.title, params.steps),
            "list": self._list,
            "get": lambda: self._get(params.plan_id),
            "set_active": lambda: self._set_active(params.plan_id),
            "mark_step": lambda: self._mark_step(
                params.plan_id, params.step_index, params.step_status, params.step_notes
            ),
            "delete": lambda: self._delete(params.plan_id),
        }
        handler = handlers.get(params.command)
        if handler is None:
            raise ToolError(
                f"Unrecognized command: {params.command}. Allowed commands are: {', '.join(COMMANDS)}",
                tool_name=self.name,
            )
        return ToolResult(output=handler())

    def _require(self, plan_id: str | None, command: str) -> str:
        if not plan_id:
            raise ToolError(f"Parameter `plan_id` is required for command: {command}", tool_name=self.name)
        return plan_id

    def _lookup(self, plan_id: str | None) -> Plan:
        if not plan_id:
            if not self.current_plan_id:
                raise ToolError(
                    "No active plan. Please specify a plan_id or set an active plan.", tool_name=self.name
                )
            plan_id = self.current_plan_id
        if plan_id not in self.plans:
            raise ToolError(f"No plan found with ID: {plan_id}", tool_name=self.name)
        return self.plans[plan_id]

    def _create(self, plan_id: str | None, title: str | None, steps: list[str] | None) -> str:
        plan_id = self._require(plan_id, "create")
        if plan_id in self.plans:
            raise ToolError(
                f"A plan with ID '{plan_id}' already exists. Use 'update' to modify existing plans.",
                tool_name=self.name,
            )
        if not title:
            raise ToolError("Parameter `title` is required for command: create", tool_name=self.name)
        if not steps:
            raise ToolError(
                "Parameter `steps` must be a non-empty list of strings for command: create", tool_name=self.name
            )

        plan = Plan(plan_id=plan_id, title=title, steps=list(steps))
        self.plans[plan_id] = plan
        self.current_plan_id = plan_id
        return f"Plan created successfully with ID: {plan_id}\n\n{plan.format()}"

    def _update(self, plan_id: str | None, title: str | None, steps: list[str] | None) -> str:
        plan = self._lookup(self._require(plan_id, "update"))
        if title:
            plan.title = title
        if steps is not None:
            plan.replace_steps(steps)
        return f"Plan updated successfully: {plan.plan_id}\n\n{plan.format()}"

    def _list(self) -> str:
        if not self.plans:
            return "No plans available. Create a plan with the 'create' command."
        output = "Available plans:\n"
        for plan_id, plan in self.plans.items():
            marker = " (active)" if plan_id == self.current_plan_id else ""
            completed = plan.count(PlanStepStatus.COMPLETED)
            output += f"• {plan_id}{marker}: {plan.title} - {completed}/{len(plan.steps)} steps completed\n"
        return output

    def _get(self, plan_id: str | None) -> str:
        return self._lookup(plan_id).format()

    def _set_active(self, plan_id: str | None) -> str:
        plan = self._lookup(self._require(plan_id, "set_active"))
        self.current_plan_id = plan.plan_id
        return f"Plan '{plan.plan_id}' is now the active plan.\n\n{plan.format()}"

    def _mark_step(
        self,
        plan_id: str | None,
        step_index: int | None,
        step_status: str | None,
        step_notes: str | None,
    ) -> str:
        plan = self._lookup(plan_id)
        if step_index is None:
            raise ToolError("Parameter `step_index` is required for command: mark_step", tool_name=self.name)
        if step_index < 0 or step_index >= len(plan.steps):
            raise ToolError(
                f"Invalid step_index: {step_index}. Valid indices range from 0 to {len(plan.steps) - 1}.",
                tool_name=self.name,
            )
        if step_status and step_status not in PlanStepStatus.get_all_statuses():
            raise ToolError(
                f"Invalid step_status: {step_status}. Valid statuses are: "
                + ", ".join(PlanStepStatus.get_all_statuses()),
                tool_name=self.name,
            )
        if step_status:
            plan.step_statuses[step_index] = step_status
        if step_notes:
            plan.step_notes[step_index] = step_notes
        return f"Step {step_index} updated in plan '{plan.plan_id}'.\n\n{plan.format()}"

    def _delete(self, plan_id: str | None) -> str:
        plan_id = self._require(plan_id, "delete")
        if plan_id not in self.plans:
            raise ToolError(f"No plan found with ID: {plan_id}", tool_name=self.name)
        del self.plans[plan_id]
        if self.current_plan_id == plan_id:
            self.current_plan_id = None
        return f"Plan '{plan_id}' has been deleted."
