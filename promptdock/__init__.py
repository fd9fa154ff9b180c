"""PromptDock: versioned AI-assistant prompts in a Git-backed registry."""

__version__ = "0.3.0"
