"""Built-in control tools: terminate, ask_human."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, Field
from rich.prompt import Prompt

from .base import BaseTool


class TerminateParams(BaseModel):
    status: Literal["success", "failure"] = Field(..., description="The finish status of the interaction.")


class Terminate(BaseTool):
    name = "terminate"
    description = (
        "Terminate the interaction when the request is met OR if the assistant cannot proceed further "
        "with the task. When you have finished all the tasks, call this tool to end the work."
    )
    parameters = TerminateParams

    async def execute(self, params: TerminateParams) -> str:
        return f"The interaction has been completed with status: {params.status}"


class AskHumanParams(BaseModel):
    inquire: str = Field(..., description="The question you want to ask the human.")


def _console_input(prompt: str) -> str:
    return Prompt.ask(prompt)


class AskHuman(BaseTool):
    """Put a question to the operator and return the typed answer."""

    name = "ask_human"
    description = "Use this tool to ask the human for help."
    parameters = AskHumanParams

    def __init__(self, input_fn: Callable[[str], str] | None = None) -> None:
        self._input_fn = input_fn or _console_input

    async def execute(self, params: AskHumanParams) -> str:
        answer = await asyncio.to_thread(self._input_fn, f"Bot: {params.inquire}")
        return answer.strip()
