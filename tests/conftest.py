"""Shared fixtures for PromptDock tests."""

from pathlib import Path

import pytest

from promptdock.config import GlobalConfig


def make_prompt(
    name: str,
    namespace: str,
    version: str,
    description: str = "A prompt",
    tags: str = '["test"]',
    body: str = "Body text",
) -> str:
    return (
        "---\n"
        f"name: {name}\n"
        f"namespace: {namespace}\n"
        f"version: {version}\n"
        "author: Tester\n"
        f"description: {description}\n"
        "created: 2024-01-01\n"
        f"tags: {tags}\n"
        "---\n\n"
        f"{body}\n"
    )


def write_prompt(root: Path, namespace: str, name: str, version: str, **kwargs) -> Path:
    path = root / namespace / f"{name}-{version}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(make_prompt(name, namespace, version, **kwargs))
    return path


@pytest.fixture
def registry_root(tmp_path: Path) -> Path:
    """A registry with web/foo@1.0.0, web/foo@2.0.0 and api/bar@1.0.0."""
    root = tmp_path / "prompts"
    write_prompt(root, "web", "foo", "1.0.0", description="First foo")
    write_prompt(root, "web", "foo", "2.0.0", description="Second foo", body="Newer body")
    write_prompt(root, "api", "bar", "1.0.0", description="Bar prompt", tags='["api", "review"]')
    return root


@pytest.fixture
def config_path(tmp_path: Path, registry_root: Path) -> Path:
    path = tmp_path / "home" / "config.json"
    GlobalConfig(local=registry_root, origin="https://example.com/prompts.git").save(path)
    return path
