"""Git and GitHub CLI wrappers for the prompt repository."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging
import subprocess

from .errors import GitError

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown"


@dataclass
class StatusEntry:
    """One line of ``git status --porcelain``."""

    index: str
    working_dir: str
    path: str

    @property
    def deleted(self) -> bool:
        return "D" in (self.index, self.working_dir)


@dataclass
class RepoStatus:
    branch: Optional[str]
    entries: list[StatusEntry] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.entries

    def uncommitted_prompts(self, suffix: str = ".md") -> list[str]:
        """Untracked, added or modified (not deleted) files with the given suffix."""
        return [
            e.path for e in self.entries
            if e.path.endswith(suffix) and not e.deleted
        ]


class GitRepo:
    """
    Runs git porcelain commands in the prompt repository.

    Each method maps to one git invocation; failures raise GitError with the
    captured stderr.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _run_git(
        self,
        args: list[str],
        cwd: Optional[Path] = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a git command."""
        command = ["git"] + args
        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                cwd=cwd or self.path,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise GitError(command, "git executable not found") from e

        if check and result.returncode != 0:
            raise GitError(command, result.stderr)
        return result

    @classmethod
    def clone(cls, url: str, destination: Path) -> "GitRepo":
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        repo = cls(destination)
        repo._run_git(["clone", url, str(destination)], cwd=destination.parent)
        return repo

    def add(self, *paths: str) -> None:
        """Stage files; also stages deletions of files already removed."""
        self._run_git(["add", "-A", "--", *paths])

    def commit(self, message: str) -> None:
        self._run_git(["commit", "-m", message])

    def push(self, branch: str = "main", remote: str = "origin") -> None:
        self._run_git(["push", remote, branch])

    def pull(self, branch: str = "main", remote: str = "origin") -> None:
        self._run_git(["pull", remote, branch])

    def fetch(self) -> None:
        self._run_git(["fetch"])

    def reset_hard(self, ref: str) -> None:
        self._run_git(["reset", "--hard", ref])

    def has_commits(self) -> bool:
        return self._run_git(["log", "-1"], check=False).returncode == 0

    def current_branch(self) -> Optional[str]:
        result = self._run_git(["rev-parse", "--abbrev-ref", "HEAD"], check=False)
        if result.returncode != 0:
            return None
        branch = result.stdout.strip()
        return None if branch == "HEAD" else branch

    def status(self) -> RepoStatus:
        result = self._run_git(["status", "--porcelain", "--untracked-files=all"])
        entries = []
        for line in result.stdout.splitlines():
            if len(line) < 4:
                continue
            path = line[3:]
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            entries.append(StatusEntry(index=line[0], working_dir=line[1], path=path.strip('"')))
        return RepoStatus(branch=self.current_branch(), entries=entries)

    def commit_and_push(self, paths: list[str], message: str, branch: str = "main") -> None:
        """Stage the given repository-relative paths, commit and push."""
        self.add(*paths)
        self.commit(message)
        self.push(branch)


def _run_gh(*args: str) -> subprocess.CompletedProcess:
    """Run a gh CLI command."""
    return subprocess.run(
        ["gh", *args],
        capture_output=True,
        text=True,
    )


def github_author() -> str:
    """Display name of the logged-in GitHub user, or "Unknown"."""
    try:
        result = _run_gh("api", "user", "--jq", ".name")
    except FileNotFoundError:
        logger.debug("gh executable not found")
        return UNKNOWN_AUTHOR

    name = result.stdout.strip() if result.returncode == 0 else ""
    if not name:
        logger.debug(f"gh api user failed: {result.stderr.strip()}")
        return UNKNOWN_AUTHOR
    return name
