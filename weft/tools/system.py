"""System tools: bash, read_file, write_file."""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, Field

from ..errors import ToolError
from ..infra.logging import get_logger
from ..types import ToolResult
from .base import BaseTool

logger = get_logger(__name__)


def _resolve(root: Path | None, path: str) -> Path:
    p = Path(path).expanduser()
    if not p.is_absolute() and root is not None:
        p = root / p
    return p


class BashParams(BaseModel):
    command: str = Field(..., description="The bash command to execute.")
    timeout: float = Field(120.0, gt=0, description="Seconds to wait before the command is killed.")


class Bash(BaseTool):
    """Run a shell command in a fresh subprocess.

    Commands start in ``workspace_root`` when one is given. A command that
    outlives its timeout is killed and reported as a ToolError.
    """

    name = "bash"
    description = (
        "Execute a bash command in the terminal. Long running commands should be run in the "
        "background. The command's stdout and stderr are returned."
    )
    parameters = BashParams

    def __init__(self, workspace_root: str | Path | None = None) -> None:
        self.workspace_root = Path(workspace_root) if workspace_root else None
        self._running: set[asyncio.subprocess.Process] = set()

    async def execute(self, params: BashParams) -> ToolResult:
        proc = await asyncio.create_subprocess_shell(
            params.command,
            cwd=str(self.workspace_root) if self.workspace_root else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        self._running.add(proc)
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=params.timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise ToolError(
                f"Command timed out after {params.timeout:g} seconds: {params.command}", tool_name=self.name
            ) from e
        finally:
            self._running.discard(proc)

        out = stdout.decode(errors="replace").rstrip("\n")
        err = stderr.decode(errors="replace").rstrip("\n")
        if proc.returncode:
            return ToolResult(output=out or None, error=err or f"Command exited with code {proc.returncode}")
        return ToolResult(output="\n".join(part for part in (out, err) if part) or None)

    async def cleanup(self) -> None:
        for proc in list(self._running):
            if proc.returncode is None:
                logger.info("killing_subprocess", pid=proc.pid)
                proc.kill()
                await proc.wait()
        self._running.clear()


class ReadFileParams(BaseModel):
    path: str = Field(..., description="Path of the file to read.")
    encoding: str = "utf-8"


class ReadFile(BaseTool):
    name = "read_file"
    description = "Read the contents of a file."
    parameters = ReadFileParams

    def __init__(self, workspace_root: str | Path | None = None) -> None:
        self.workspace_root = Path(workspace_root) if workspace_root else None

    async def execute(self, params: ReadFileParams) -> str:
        p = _resolve(self.workspace_root, params.path)
        if not p.is_file():
            raise ToolError(f"File not found: {p}", tool_name=self.name)
        return await asyncio.to_thread(p.read_text, encoding=params.encoding)


class WriteFileParams(BaseModel):
    path: str = Field(..., description="Path of the file to write.")
    content: str = Field(..., description="Text to write.")
    mkdirp: bool = True


class WriteFile(BaseTool):
    name = "write_file"
    description = "Write content to a file, creating parent directories as needed."
    parameters = WriteFileParams

    def __init__(self, workspace_root: str | Path | None = None) -> None:
        self.workspace_root = Path(workspace_root) if workspace_root else None

    async def execute(self, params: WriteFileParams) -> str:
        p = _resolve(self.workspace_root, params.path)
        if params.mkdirp:
            p.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(p.write_text, params.content, encoding="utf-8")
        return f"Wrote {len(params.content.encode())} bytes to {p}"
