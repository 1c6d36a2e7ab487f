"""Tool types."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ToolSchema(Protocol):
    def parse(self, raw: Any) -> Any: ...
    def to_json_schema(self) -> dict: ...


@runtime_checkable
class SupportsCleanup(Protocol):
    async def cleanup(self) -> None: ...


@dataclass
class ToolResult:
    """Outcome of a tool execution.

    ``str()`` renders what the model sees: the output text, or
    ``"Error: ..."`` when the tool failed.
    """

    output: Any = None
    error: str | None = None
    base64_image: str | None = None
    system: str | None = None

    def __bool__(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def __add__(self, other: ToolResult) -> ToolResult:
        def combine(a: str | None, b: str | None, concatenate: bool = True) -> str | None:
            if a and b:
                if concatenate:
                    return a + b
                raise ValueError("Cannot combine tool results")
            return a or b

        return ToolResult(
            output=combine(self.output, other.output),
            error=combine(self.error, other.error),
            base64_image=combine(self.base64_image, other.base64_image, concatenate=False),
            system=combine(self.system, other.system),
        )

    def __str__(self) -> str:
        return f"Error: {self.error}" if self.error else str(self.output if self.output is not None else "")


class ToolFailure(ToolResult):
    """A ToolResult that represents a failure."""

    def __init__(self, error: str, **kwargs: Any) -> None:
        super().__init__(error=error, **kwargs)
