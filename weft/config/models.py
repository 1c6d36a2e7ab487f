"""Configuration models.

Pydantic models for the TOML configuration file.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class LLMSettings(BaseModel):
    """One LLM endpoint profile."""
    model: str = Field("gpt-4o", description="Model name")
    base_url: str | None = Field(None, description="OpenAI-compatible API base URL")
    api_key: str | None = Field(None, description="API key")
    max_tokens: int = Field(4096, gt=0, description="Max completion tokens per request")
    max_input_tokens: int | None = Field(None, gt=0, description="Refuse requests estimated above this size")
    temperature: float = Field(1.0, ge=0.0, le=2.0, description="Sampling temperature")
    api_type: str = Field("openai", description="openai | azure")
    api_version: str | None = Field(None, description="API version (azure only)")


class AgentSettings(BaseModel):
    """Agent loop limits."""
    max_steps: int = Field(20, ge=1, description="Step budget per run")
    max_observe: int | None = Field(10000, gt=0, description="Truncate tool observations to this many characters")
    duplicate_threshold: int = Field(2, ge=1, description="Repeated assistant replies before the agent counts as stuck")
    max_messages: int = Field(100, ge=1, description="Memory capacity")


class FlowSettings(BaseModel):
    """Planning flow behaviour."""
    timeout_seconds: float = Field(3600, gt=0, description="Wall-clock limit for one CLI execution")
    continue_on_error: bool = Field(False, description="Move on to the next step when an executor fails")


class LogSettings(BaseModel):
    level: str = Field("INFO", description="Log level name")
    json_format: bool = Field(False, description="Render logs as JSON lines")


class WeftConfig(BaseModel):
    """Complete configuration."""
    llm: dict[str, LLMSettings] = Field(
        default_factory=lambda: {"default": LLMSettings()}, description="LLM profiles keyed by name"
    )
    agent: AgentSettings = Field(default_factory=AgentSettings, description="Agent settings")
    flow: FlowSettings = Field(default_factory=FlowSettings, description="Flow settings")
    log: LogSettings = Field(default_factory=LogSettings, description="Logging settings")
    workspace_root: str | None = Field(None, description="Working directory for file and shell tools")

    @field_validator("llm")
    @classmethod
    def _require_default(cls, v: dict[str, LLMSettings]) -> dict[str, LLMSettings]:
        if "default" not in v:
            raise ValueError("an [llm.default] profile is required")
        return v

    def llm_profile(self, name: str = "default") -> LLMSettings:
        return self.llm.get(name, self.llm["default"])
