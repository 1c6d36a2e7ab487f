"""Tool base classes."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from ..errors import ToolError
from ..types import ToolResult, ToolSchema
from .schema import DictSchema, PydanticSchema


def as_schema(parameters: type[BaseModel] | ToolSchema | dict[str, Any] | None) -> ToolSchema:
    if parameters is None or isinstance(parameters, dict):
        return DictSchema(parameters)
    if isinstance(parameters, type) and issubclass(parameters, BaseModel):
        return PydanticSchema(parameters)
    return parameters


class BaseTool:
    """A named capability the model can call.

    Subclasses set ``name``, ``description`` and ``parameters`` (a pydantic
    model, a JSON-schema dict, or a ToolSchema) and implement ``execute``,
    which receives the parsed parameters. Tools that hold live resources
    may also define ``async cleanup()``.
    """

    name: str = ""
    description: str = ""
    parameters: type[BaseModel] | ToolSchema | dict[str, Any] | None = None

    @property
    def schema(self) -> ToolSchema:
        return as_schema(self.parameters)

    async def execute(self, params: Any) -> Any:
        raise NotImplementedError(f"Tool '{self.name}' must implement execute()")

    async def call(self, **kwargs: Any) -> Any:
        """Validate keyword arguments against the schema and execute."""
        try:
            params = self.schema.parse(kwargs)
        except ValidationError as e:
            raise ToolError(f"Invalid parameters for {self.name}: {e}", tool_name=self.name) from e
        return await self.execute(params)

    def to_param(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.schema.to_json_schema(),
            },
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FunctionTool(BaseTool):
    """Tool wrapping a plain (sync or async) callable."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: type[BaseModel] | ToolSchema | dict[str, Any] | None,
        fn: Callable[[Any], Any | Awaitable[Any]],
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = parameters
        self._fn = fn

    async def execute(self, params: Any) -> Any:
        result = self._fn(params)
        if inspect.isawaitable(result):
            result = await result
        return result


def define_tool(
    name: str,
    description: str,
    parameters: type[BaseModel] | ToolSchema | dict[str, Any] | None,
    execute: Callable[[Any], Any | Awaitable[Any]],
) -> FunctionTool:
    return FunctionTool(name=name, description=description, parameters=parameters, fn=execute)


def as_result(value: Any) -> ToolResult:
    if isinstance(value, ToolResult):
        return value
    return ToolResult(output=value)
