"""Structured error hierarchy for the agent runtime."""

from __future__ import annotations


class WeftError(Exception):
    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause

    @classmethod
    def wrap(cls, err: Exception) -> WeftError:
        if isinstance(err, WeftError):
            return err
        return WeftError("UNKNOWN", str(err), err)


class InvalidStateTransition(WeftError):
    """``run()`` was called on an agent that is not IDLE."""

    def __init__(self, current_state: object) -> None:
        state = getattr(current_state, "value", current_state)
        super().__init__("INVALID_STATE", f"Cannot run agent from state: {state}")
        self.current_state = current_state


class ToolCallRequired(WeftError):
    def __init__(self) -> None:
        super().__init__("TOOL_CALL_REQUIRED", "Tool calls required but none provided")


class EmptyLLMResponse(WeftError):
    def __init__(self, provider: str = "llm", message: str = "No response received from the LLM") -> None:
        super().__init__("LLM_EMPTY_RESPONSE", message)
        self.provider = provider


class TokenLimitExceeded(WeftError):
    def __init__(self, estimated_tokens: int, limit: int) -> None:
        super().__init__(
            "LLM_TOKEN_LIMIT",
            f"Request may exceed input token limit (estimated {estimated_tokens} > {limit})",
        )
        self.estimated_tokens = estimated_tokens
        self.limit = limit


class ToolError(WeftError):
    def __init__(self, message: str, tool_name: str = "", cause: Exception | None = None) -> None:
        super().__init__("TOOL_ERROR", message, cause)
        self.tool_name = tool_name


class ToolRegistrationError(WeftError):
    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__("TOOL_REGISTRATION", f"Cannot register tool {tool_name!r}: {reason}")
        self.tool_name = tool_name


class FlowError(WeftError):
    def __init__(self, message: str) -> None:
        super().__init__("FLOW_ERROR", message)


class ConfigError(WeftError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("CONFIG_ERROR", message, cause)
