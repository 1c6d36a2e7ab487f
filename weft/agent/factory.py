"""Prebuilt agents."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from ..config import AgentSettings
from ..memory import Memory
from ..prompts import NEXT_STEP_PROMPT, general_system_prompt
from ..tools import AskHuman, BaseTool, Bash, ReadFile, Terminate, ToolRegistry, WriteFile
from ..types import LLMProvider
from .core import Agent
from .toolcall import ToolCallPolicy


def create_general_agent(
    llm: LLMProvider,
    workspace_root: str | Path | None = None,
    settings: AgentSettings | None = None,
    extra_tools: tuple[BaseTool, ...] = (),
    input_fn: Callable[[str], str] | None = None,
    name: str = "weft",
) -> Agent:
    """General-purpose agent: shell, file read/write, ask_human and terminate."""
    settings = settings or AgentSettings()
    root = str(workspace_root or os.getcwd())
    tools = ToolRegistry(
        Bash(root),
        ReadFile(root),
        WriteFile(root),
        AskHuman(input_fn),
        Terminate(),
        *extra_tools,
    )
    policy = ToolCallPolicy(tools=tools, special_tool_names=[Terminate.name], max_observe=settings.max_observe)
    return Agent(
        llm=llm,
        policy=policy,
        name=name,
        description="A versatile agent that can solve various tasks using multiple tools",
        system_prompt=general_system_prompt(root),
        next_step_prompt=NEXT_STEP_PROMPT,
        memory=Memory(settings.max_messages),
        max_steps=settings.max_steps,
        duplicate_threshold=settings.duplicate_threshold,
    )
