"""Tests for TOML config loader."""

import tempfile
from pathlib import Path

from codeduo.infrastructure.config.toml_loader import _apply_env_overrides, load_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_config(self):
        """Loads the repository's default configuration."""
        config = load_config()

        assert config.pipeline.max_turns == 6
        assert config.pipeline.default_filename == "app/page.tsx"
        assert config.pipeline.max_revisions_per_turn == 5
        assert config.ollama.host.startswith("http")

    def test_loads_from_custom_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "default.toml").write_text(
                """
[server]
port = 9999

[pipeline]
max_turns = 3
"""
            )
            config = load_config(Path(tmpdir))

            assert config.server.port == 9999
            assert config.pipeline.max_turns == 3
            assert config.pipeline.history_tail == 6

    def test_merges_development_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "default.toml").write_text(
                """
[pipeline]
max_turns = 6
project_type = "nextjs-tailwind"
"""
            )
            (Path(tmpdir) / "development.toml").write_text(
                """
[pipeline]
max_turns = 2
"""
            )
            config = load_config(Path(tmpdir))

            assert config.pipeline.max_turns == 2
            assert config.pipeline.project_type == "nextjs-tailwind"

    def test_empty_dir_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_config(Path(tmpdir))
            assert config.server.port == 8000
            assert config.log_level == "INFO"


class TestEnvOverrides:
    def test_openai_key_and_hosts(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OLLAMA_HOST", "http://gpu-box:11434")

        config = _apply_env_overrides({})

        assert config["openai"]["api_key"] == "sk-env"
        assert config["ollama"]["host"] == "http://gpu-box:11434"

    def test_invalid_int_is_ignored(self, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-number")
        monkeypatch.setenv("PIPELINE_MAX_TURNS", "4")

        config = _apply_env_overrides({"server": {"port": 8000}})

        assert config["server"]["port"] == 8000
        assert config["pipeline"]["max_turns"] == 4

    def test_cors_origins_split(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
        config = _apply_env_overrides({})
        assert config["security"]["cors_origins"] == ["http://a.test", "http://b.test"]
