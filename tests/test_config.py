"""Tests for global, project and Notion configuration."""

import json
import os
from pathlib import Path

import pytest

from promptdock.config import (
    GlobalConfig,
    NotionConfig,
    ProjectConfig,
    PromptSource,
    default_home,
)
from promptdock.errors import ConfigError
from promptdock.providers import default_providers


class TestGlobalConfig:
    def test_home_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PROMPTDOCK_HOME", str(tmp_path))
        assert default_home() == tmp_path
        assert GlobalConfig.path() == tmp_path / "config.json"

    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "config.json"
        GlobalConfig(local=tmp_path / "prompts", origin="git@example.com:p.git").save(path)

        loaded = GlobalConfig.load(path)

        assert loaded.local == tmp_path / "prompts"
        assert loaded.origin == "git@example.com:p.git"
        assert loaded.branch == "main"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_saved_file_is_private(self, tmp_path: Path):
        path = GlobalConfig(local=tmp_path).save(tmp_path / "config.json")
        assert path.stat().st_mode & 0o777 == 0o600

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="promptdock init"):
            GlobalConfig.load(tmp_path / "config.json")

    def test_malformed_json(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Malformed"):
            GlobalConfig.load(path)

    def test_missing_local(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"origin": "x"}))
        with pytest.raises(ConfigError, match="local"):
            GlobalConfig.load(path)

    def test_exit_code(self):
        assert ConfigError("x").exit_code == 2


class TestProjectConfig:
    def test_round_trip(self, tmp_path: Path):
        config = ProjectConfig(
            name="demo",
            description="Demo project",
            prompts=[PromptSource(name="web", repo="https://example.com/p.git", namespace="web")],
            gitignore=[".claude"],
            providers={"claude": default_providers()["claude"]},
        )
        config.save(tmp_path)

        loaded = ProjectConfig.load(tmp_path)

        assert loaded == config
        assert loaded.find_source("web").folders == ["system", "user", "assistant"]
        assert loaded.find_source("nope") is None

    def test_unknown_keys_are_rejected(self, tmp_path: Path):
        ProjectConfig.path(tmp_path).write_text(json.dumps({"prompts": [{"name": "x", "bogus": 1}]}))
        with pytest.raises(ConfigError):
            ProjectConfig.load(tmp_path)


class TestNotionConfig:
    def test_absent(self, tmp_path: Path):
        assert NotionConfig.load(tmp_path) is None

    def test_round_trip(self, tmp_path: Path):
        NotionConfig(token="secret", database_id="db").save(tmp_path)
        assert NotionConfig.load(tmp_path) == NotionConfig(token="secret", database_id="db")

    def test_missing_key(self, tmp_path: Path):
        NotionConfig.path(tmp_path).write_text(json.dumps({"token": "secret"}))
        with pytest.raises(ConfigError, match="database_id"):
            NotionConfig.load(tmp_path)
