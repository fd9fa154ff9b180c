"""
Editor integration for PromptDock.

Opens a prompt file in the user's editor and blocks until it exits.
The editor comes from $VISUAL, then $EDITOR, then falls back to nano.
"""

from pathlib import Path
from typing import Optional
import logging
import os
import shlex
import subprocess

logger = logging.getLogger(__name__)

FALLBACK_EDITOR = "nano"


def detect_editor() -> list[str]:
    """Editor command as an argv list; handles values like ``code --wait``."""
    for var in ("VISUAL", "EDITOR"):
        value = os.environ.get(var, "").strip()
        if value:
            return shlex.split(value)
    return [FALLBACK_EDITOR]


def open_in_editor(path: Path, editor: Optional[list[str]] = None) -> bool:
    """
    Open a file in an editor attached to the current terminal.

    Returns True when the editor exited successfully.
    """
    command = (editor or detect_editor()) + [str(path)]
    logger.debug(f"Launching editor: {' '.join(command)}")

    try:
        result = subprocess.run(command)
    except FileNotFoundError:
        logger.error(f"Editor not found: {command[0]}")
        return False

    return result.returncode == 0
