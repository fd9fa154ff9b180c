"""Error kinds raised by PromptDock library code."""

from pathlib import Path
from typing import Optional


class PromptDockError(Exception):
    """Base class for errors the CLI turns into messages and exit codes."""

    exit_code = 2


class NotReadable(PromptDockError):
    """A path exists but could not be read (permissions or OS error)."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Cannot read {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConfigError(PromptDockError):
    """Configuration is missing or malformed."""


class GitError(PromptDockError):
    """A git or gh command exited with a non-zero status."""

    def __init__(self, command: list[str], stderr: Optional[str] = None):
        self.command = command
        self.stderr = (stderr or "").strip()
        message = f"Command failed: {' '.join(command)}"
        if self.stderr:
            message += f"\n{self.stderr}"
        super().__init__(message)
