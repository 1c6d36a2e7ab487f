"""Agent runtime: state machine, step policies, prebuilt agents."""

from .core import NO_ACTION_NEEDED, Agent
from .factory import create_general_agent
from .strategy import StepPolicy
from .toolcall import ToolCallPolicy

__all__ = ["Agent", "StepPolicy", "ToolCallPolicy", "create_general_agent", "NO_ACTION_NEEDED"]
