"""Configuration management for PromptDock."""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import json
import os

from .errors import ConfigError

HOME_ENV_VAR = "PROMPTDOCK_HOME"
CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = "prompt.json"
NOTION_CONFIG_FILENAME = ".notion-config.json"


def default_home() -> Path:
    """
    Directory holding the global config and, by default, the registry clone.

    PROMPTDOCK_HOME overrides ~/.config/promptdock.
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "promptdock"


def _write_private(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    os.chmod(path, 0o600)


def _read_json(path: Path, what: str) -> dict:
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(
            f"No {what} found at {path}. Run 'promptdock init' first."
        ) from None
    except ValueError as e:
        raise ConfigError(f"Malformed {what} at {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Malformed {what} at {path}: expected an object")
    return data


@dataclass
class GlobalConfig:
    """Where the prompt registry lives and where it came from."""

    local: Path
    origin: Optional[str] = None
    branch: str = "main"

    @classmethod
    def path(cls, home: Optional[Path] = None) -> Path:
        return (home or default_home()) / CONFIG_FILENAME

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "GlobalConfig":
        """Load the global config; ConfigError if it is missing or has no local path."""
        config_path = config_path or cls.path()
        data = _read_json(config_path, "configuration")

        if not data.get("local"):
            raise ConfigError(f"Configuration at {config_path} has no 'local' repository path.")

        return cls(
            local=Path(data["local"]).expanduser(),
            origin=data.get("origin"),
            branch=data.get("branch", "main"),
        )

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Write the config, readable only by the current user."""
        config_path = config_path or self.path()
        _write_private(config_path, {
            "origin": self.origin,
            "local": str(self.local),
            "branch": self.branch,
        })
        return config_path


@dataclass
class ProviderSettings:
    """Output location for one AI provider's generated config."""

    folder: str
    filename: Optional[str] = None
    include_commands: bool = False
    enabled: bool = True


@dataclass
class PromptSource:
    """A prompt set a project downloads from a registry repository."""

    name: str
    repo: str
    namespace: str
    description: str = ""
    folders: list[str] = field(default_factory=lambda: ["system", "user", "assistant"])
    providers: list[str] = field(default_factory=list)


@dataclass
class ProjectConfig:
    """Per-project settings stored in ./prompt.json."""

    name: str
    description: str = ""
    prompts: list[PromptSource] = field(default_factory=list)
    gitignore: list[str] = field(default_factory=list)
    providers: dict[str, ProviderSettings] = field(default_factory=dict)

    @classmethod
    def path(cls, project_root: Path) -> Path:
        return project_root / PROJECT_CONFIG_FILENAME

    @classmethod
    def exists(cls, project_root: Path) -> bool:
        return cls.path(project_root).exists()

    @classmethod
    def load(cls, project_root: Path) -> "ProjectConfig":
        config_path = cls.path(project_root)
        data = _read_json(config_path, PROJECT_CONFIG_FILENAME)

        try:
            prompts = [PromptSource(**p) for p in data.get("prompts", [])]
            providers = {
                key: ProviderSettings(**value)
                for key, value in data.get("providers", {}).items()
            }
        except TypeError as e:
            raise ConfigError(f"Malformed {PROJECT_CONFIG_FILENAME}: {e}") from e

        return cls(
            name=data.get("name", project_root.name),
            description=data.get("description", ""),
            prompts=prompts,
            gitignore=data.get("gitignore", []),
            providers=providers,
        )

    def save(self, project_root: Path) -> Path:
        config_path = self.path(project_root)
        data = {
            "name": self.name,
            "description": self.description,
            "prompts": [asdict(p) for p in self.prompts],
            "gitignore": self.gitignore,
            "providers": {key: asdict(value) for key, value in self.providers.items()},
        }
        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)
        return config_path

    def find_source(self, name: str) -> Optional[PromptSource]:
        for source in self.prompts:
            if source.name == name:
                return source
        return None


@dataclass
class NotionConfig:
    """Credentials for the Notion mirror, kept in ./.notion-config.json."""

    token: str
    database_id: str
    sync_enabled: bool = True

    @classmethod
    def path(cls, project_root: Path) -> Path:
        return project_root / NOTION_CONFIG_FILENAME

    @classmethod
    def load(cls, project_root: Path) -> Optional["NotionConfig"]:
        """None when the project has no Notion configuration yet."""
        config_path = cls.path(project_root)
        if not config_path.exists():
            return None
        data = _read_json(config_path, NOTION_CONFIG_FILENAME)
        try:
            return cls(
                token=data["token"],
                database_id=data["database_id"],
                sync_enabled=data.get("sync_enabled", True),
            )
        except KeyError as e:
            raise ConfigError(f"{config_path} is missing {e.args[0]!r}") from e

    def save(self, project_root: Path) -> Path:
        config_path = self.path(project_root)
        _write_private(config_path, asdict(self))
        return config_path
