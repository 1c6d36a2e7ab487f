"""Core type definitions: re-exported from sub-modules."""

from .llm import LLMProvider, LLMResponse, ToolChoice
from .messages import (
    AssistantMessage,
    ContentPart,
    Message,
    Role,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
    message_to_dict,
)
from .state import AgentState
from .tools import SupportsCleanup, ToolFailure, ToolResult, ToolSchema

__all__ = [
    "Role", "Message", "SystemMessage", "UserMessage", "AssistantMessage", "ToolMessage",
    "ToolCall", "ContentPart", "message_to_dict",
    "ToolSchema", "ToolResult", "ToolFailure", "SupportsCleanup",
    "ToolChoice", "LLMResponse", "LLMProvider",
    "AgentState",
]
