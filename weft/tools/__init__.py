"""Tool contract, registry and bundled tools."""

from .base import BaseTool, FunctionTool, as_result, define_tool
from .builtin import AskHuman, Terminate
from .planning import Plan, PlanningTool, PlanStepStatus
from .registry import ToolRegistry, validate_tool
from .schema import DictSchema, PydanticSchema
from .system import Bash, ReadFile, WriteFile

__all__ = [
    "BaseTool", "FunctionTool", "define_tool", "as_result",
    "ToolRegistry", "validate_tool",
    "PydanticSchema", "DictSchema",
    "Terminate", "AskHuman", "Bash", "ReadFile", "WriteFile",
    "Plan", "PlanStepStatus", "PlanningTool",
]
