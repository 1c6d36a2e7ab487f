"""Name-keyed tool registry."""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

from ..errors import ToolError, ToolRegistrationError
from ..infra.logging import get_logger
from ..types import SupportsCleanup, ToolFailure, ToolResult
from .base import BaseTool, as_result

logger = get_logger(__name__)

_TOOL_NAME = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")


def validate_tool(tool: BaseTool) -> None:
    """Check the shape of a tool before it can be exposed to a model."""
    name = getattr(tool, "name", None)
    if not isinstance(name, str) or not _TOOL_NAME.match(name):
        raise ToolRegistrationError(str(name), "name must match [a-zA-Z0-9_-]{1,64}")
    if not isinstance(getattr(tool, "description", None), str) or not tool.description.strip():
        raise ToolRegistrationError(name, "description must be a non-empty string")
    if not callable(getattr(tool, "execute", None)):
        raise ToolRegistrationError(name, "execute() is not callable")
    try:
        schema = tool.schema.to_json_schema()
    except Exception as e:
        raise ToolRegistrationError(name, f"parameter schema is invalid: {e}") from e
    if not isinstance(schema, dict) or schema.get("type", "object") != "object":
        raise ToolRegistrationError(name, "parameter schema must describe an object")


class ToolRegistry:
    """Typed registry of tools, exposed to the model as callable functions.

    Registration validates the tool. At execution time an unknown name or a
    ``ToolError`` comes back as ``ToolFailure`` so the model can see and react
    to it; any other exception propagates to the caller.
    """

    def __init__(self, *tools: BaseTool) -> None:
        self._tools: dict[str, BaseTool] = {}
        self.add_tools(*tools)

    def register(self, tool: BaseTool) -> ToolRegistry:
        validate_tool(tool)
        if tool.name in self._tools:
            logger.warning("tool_already_registered", tool=tool.name)
            return self
        self._tools[tool.name] = tool
        return self

    add_tool = register

    def add_tools(self, *tools: BaseTool) -> ToolRegistry:
        for tool in tools:
            self.register(tool)
        return self

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list(self) -> list[BaseTool]:
        return list(self._tools.values())

    def to_params(self) -> list[dict[str, Any]]:
        return [tool.to_param() for tool in self._tools.values()]

    async def execute(self, name: str, tool_input: dict[str, Any] | None = None) -> ToolResult:
        tool = self._tools.get(name)
        if tool is None:
            return ToolFailure(f"Tool {name} is invalid")
        try:
            return as_result(await tool.call(**(tool_input or {})))
        except ToolError as e:
            logger.warning("tool_error", tool=name, error=e.message)
            return ToolFailure(e.message)

    async def cleanup_all(self) -> None:
        for tool in self._tools.values():
            if not isinstance(tool, SupportsCleanup):
                continue
            try:
                await tool.cleanup()
            except Exception:
                logger.exception("tool_cleanup_failed", tool=tool.name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)
