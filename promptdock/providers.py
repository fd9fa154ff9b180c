"""Provider config generation: one prompt set, many AI assistants."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import json
import logging

from .config import ProjectConfig, ProviderSettings

logger = logging.getLogger(__name__)

SEPARATOR = "\n\n---\n\n"

PROVIDER_LABELS = {
    "claude": "Claude (with commands)",
    "cursor": "Cursor",
    "copilot": "GitHub Copilot",
    "gemini": "Gemini CLI",
    "codeium": "Codeium",
    "continue": "Continue",
    "aider": "Aider",
}

CLAUDE_COMMANDS = """# Claude Commands

## File Operations

### Read File
```
/read <filepath>
```
Read the contents of a file.

### Write File
```
/write <filepath>
<content>
```
Create or overwrite a file with the specified content.

### Edit File
```
/edit <filepath>
<old_content>
---
<new_content>
```
Replace specific content in a file.

## Project Management

### List Files
```
/ls [directory]
```
List files in the current or specified directory.

### Search
```
/search <pattern>
```
Search for files or content matching the pattern.

## Terminal

### Run Command
```
/run <command>
```
Execute a terminal command.

## AI Assistant

### Think Step by Step
```
/think
```
Break down the current problem into steps.

### Plan
```
/plan
```
Create a detailed plan for implementing a feature.
"""

GEMINI_FOOTER = """

## Gemini CLI Commands

Use these patterns when working with the Gemini CLI:

```bash
# Code generation
gemini code "generate a function that..."

# Code review
gemini review file.js

# Explain code
gemini explain "what does this code do"
```
"""


def default_providers() -> dict[str, ProviderSettings]:
    """Output locations for every supported provider."""
    return {
        "claude": ProviderSettings(folder=".claude", filename="instructions.md", include_commands=True),
        "cursor": ProviderSettings(folder=".cursor", filename=".cursorrules"),
        "copilot": ProviderSettings(folder=".github", filename="copilot-instructions.md"),
        "codeium": ProviderSettings(folder=".codeium", filename="instructions.md"),
        "continue": ProviderSettings(folder=".continue", filename="config.json"),
        "aider": ProviderSettings(folder=".aider", filename="conventions.md"),
        "gemini": ProviderSettings(folder=".gemini", filename="instructions.md"),
    }


@dataclass
class ProviderFile:
    provider: str
    path: Path
    content: str


def _titled(title: str, prompts: list[str]) -> str:
    return f"# {title}\n\n" + SEPARATOR.join(prompts)


def render_claude(prompts: list[str], include_commands: bool) -> str:
    content = _titled("Claude Instructions", prompts)
    if include_commands:
        content += "\n\n## Commands\n\nSee commands.md for available commands and usage.\n"
    return content


def render_cursor(prompts: list[str]) -> str:
    return "\n\n".join(prompts)


def render_continue(prompts: list[str]) -> str:
    config = {
        "rules": [{"content": p, "enabled": True} for p in prompts],
        "customInstructions": "\n\n".join(prompts),
    }
    return json.dumps(config, indent=2)


def render_gemini(prompts: list[str]) -> str:
    content = "# Gemini CLI Instructions\n\n"
    content += "These are the instructions for Gemini CLI to follow when assisting with this project.\n\n"
    content += SEPARATOR.join(prompts)
    return content + GEMINI_FOOTER


RENDERERS = {
    "cursor": render_cursor,
    "copilot": lambda prompts: _titled("GitHub Copilot Instructions", prompts),
    "codeium": lambda prompts: _titled("Codeium Instructions", prompts),
    "continue": render_continue,
    "aider": lambda prompts: _titled("Aider Conventions", prompts),
    "gemini": render_gemini,
}


class ProviderHandler:
    """Renders prompt content into each configured provider's file."""

    def __init__(self, config: ProjectConfig, base_dir: Path):
        self.config = config
        self.base_dir = Path(base_dir)

    def _target(self, settings: ProviderSettings, fallback: str) -> Path:
        return self.base_dir / settings.folder / (settings.filename or fallback)

    def generate(self, prompts: list[str], only: Optional[list[str]] = None) -> list[ProviderFile]:
        """Build provider files; ``only`` restricts output to the named providers."""
        files = []
        for provider, settings in self.config.providers.items():
            if not settings.enabled or (only and provider not in only):
                continue

            if provider == "claude":
                files.append(ProviderFile(
                    provider, self._target(settings, "instructions.md"),
                    render_claude(prompts, settings.include_commands),
                ))
                if settings.include_commands:
                    files.append(ProviderFile(
                        provider, self.base_dir / settings.folder / "commands.md", CLAUDE_COMMANDS,
                    ))
                continue

            renderer = RENDERERS.get(provider)
            if renderer is None:
                logger.warning(f"Unknown provider '{provider}' in configuration, skipping")
                continue
            files.append(ProviderFile(provider, self._target(settings, "instructions.md"), renderer(prompts)))

        return files

    def write(self, files: list[ProviderFile]) -> list[Path]:
        written = []
        for file in files:
            file.path.parent.mkdir(parents=True, exist_ok=True)
            file.path.write_text(file.content)
            logger.debug(f"Wrote {file.provider} config to {file.path}")
            written.append(file.path)
        return written
