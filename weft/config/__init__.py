"""Configuration models and loader."""

from .loader import find_config, load_config
from .models import AgentSettings, FlowSettings, LLMSettings, LogSettings, WeftConfig

__all__ = [
    "LLMSettings", "AgentSettings", "FlowSettings", "LogSettings", "WeftConfig",
    "load_config", "find_config",
]
