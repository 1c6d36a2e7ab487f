"""weft: an autonomous tool-using agent runtime with plan-driven flows."""

from .agent import Agent, StepPolicy, ToolCallPolicy, create_general_agent
from .config import WeftConfig, load_config
from .errors import (
    ConfigError,
    EmptyLLMResponse,
    FlowError,
    InvalidStateTransition,
    TokenLimitExceeded,
    ToolCallRequired,
    ToolError,
    ToolRegistrationError,
    WeftError,
)
from .flow import BaseFlow, FlowFactory, FlowType, PlanningFlow
from .memory import Memory
from .tools import BaseTool, PlanningTool, ToolRegistry, define_tool
from .types import AgentState, LLMResponse, Role, ToolCall, ToolChoice, ToolResult

__version__ = "0.1.0"

__all__ = [
    "Agent", "StepPolicy", "ToolCallPolicy", "create_general_agent",
    "Memory",
    "BaseTool", "ToolRegistry", "PlanningTool", "define_tool",
    "BaseFlow", "PlanningFlow", "FlowFactory", "FlowType",
    "WeftConfig", "load_config",
    "AgentState", "Role", "ToolCall", "ToolChoice", "LLMResponse", "ToolResult",
    "WeftError", "InvalidStateTransition", "ToolCallRequired", "EmptyLLMResponse", "TokenLimitExceeded",
    "ToolError", "ToolRegistrationError", "FlowError", "ConfigError",
]
