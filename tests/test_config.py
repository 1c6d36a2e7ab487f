"""
Tests for configuration loading
"""

import pytest

from weft.config import AgentSettings, LLMSettings, WeftConfig, find_config, load_config
from weft.errors import ConfigError

SAMPLE = """
workspace_root = "work"

[llm.default]
model = "gpt-test"
api_key = "from-file"
temperature = 0.0

[llm.vision]
model = "gpt-vision"

[agent]
max_steps = 7

[flow]
continue_on_error = true
"""


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Each test starts in an empty directory with no config variables set."""
    monkeypatch.chdir(tmp_path)
    for var in ("WEFT_CONFIG", "WEFT_LLM_API_KEY", "WEFT_LLM_MODEL", "WEFT_LLM_BASE_URL", "OPENAI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def _write(tmp_path, text=SAMPLE, name="config/config.toml"):
    path = tmp_path / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestConfigModels:
    """Test configuration models"""

    def test_defaults(self):
        config = WeftConfig()
        assert config.llm_profile().model == "gpt-4o"
        assert config.agent == AgentSettings()
        assert config.agent.max_steps == 20
        assert config.flow.timeout_seconds == 3600
        assert config.flow.continue_on_error is False
        assert config.log.level == "INFO"

    def test_unknown_profile_falls_back_to_default(self):
        config = WeftConfig(llm={"default": LLMSettings(model="a"), "fast": LLMSettings(model="b")})
        assert config.llm_profile("fast").model == "b"
        assert config.llm_profile("missing").model == "a"

    def test_default_profile_required(self):
        with pytest.raises(ValueError, match=r"\[llm.default\] profile is required"):
            WeftConfig(llm={"other": LLMSettings()})

    def test_limits_validated(self):
        with pytest.raises(ValueError):
            AgentSettings(max_steps=0)
        with pytest.raises(ValueError):
            LLMSettings(temperature=3.0)


class TestConfigLoader:
    """Test the TOML loader"""

    def test_no_file_gives_defaults(self):
        assert find_config() is None
        assert load_config() == WeftConfig()

    def test_loads_toml(self, tmp_path):
        _write(tmp_path)
        config = load_config()
        assert config.llm_profile().model == "gpt-test"
        assert config.llm_profile().api_key == "from-file"
        assert config.llm_profile("vision").model == "gpt-vision"
        assert config.agent.max_steps == 7
        assert config.agent.max_observe == 10000
        assert config.flow.continue_on_error is True
        assert config.workspace_root == "work"

    def test_candidate_order(self, tmp_path):
        example = _write(tmp_path, name="config/config.example.toml")
        assert find_config(tmp_path) == example
        real = _write(tmp_path)
        assert find_config(tmp_path) == real

    def test_env_path_wins(self, tmp_path, monkeypatch):
        _write(tmp_path)
        other = _write(tmp_path, '[llm.default]\nmodel = "elsewhere"\n', name="other.toml")
        monkeypatch.setenv("WEFT_CONFIG", str(other))
        assert find_config(tmp_path) == other
        assert load_config().llm_profile().model == "elsewhere"

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path):
        path = _write(tmp_path, "[llm.default\nmodel = ")
        with pytest.raises(ConfigError, match="Invalid TOML") as excinfo:
            load_config(path)
        assert excinfo.value.code == "CONFIG_ERROR"

    def test_invalid_values(self, tmp_path):
        path = _write(tmp_path, "[agent]\nmax_steps = -1\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_llm_table_must_be_a_table(self, tmp_path):
        path = _write(tmp_path, 'llm = "gpt-4o"\n')
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)


class TestEnvironmentOverrides:
    """Test environment variables layered over the file"""

    def test_weft_variables_override_file(self, tmp_path, monkeypatch):
        _write(tmp_path)
        monkeypatch.setenv("WEFT_LLM_API_KEY", "from-env")
        monkeypatch.setenv("WEFT_LLM_MODEL", "gpt-env")
        monkeypatch.setenv("WEFT_LLM_BASE_URL", "http://localhost:8000/v1")

        settings = load_config().llm_profile()

        assert settings.api_key == "from-env"
        assert settings.model == "gpt-env"
        assert settings.base_url == "http://localhost:8000/v1"

    def test_openai_key_only_fills_a_gap(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-fallback")
        assert load_config().llm_profile().api_key == "sk-fallback"

        _write(tmp_path)
        assert load_config().llm_profile().api_key == "from-file"
