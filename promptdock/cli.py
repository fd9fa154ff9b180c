"""
PromptDock CLI - versioned AI-assistant prompts in a Git-backed registry.

Commands:
    promptdock init              Clone the registry (--global) or set up prompt.json
    promptdock new               Write a new prompt in $EDITOR
    promptdock list              List prompts in the registry
    promptdock get <spec>        Print a prompt's body
    promptdock edit <spec>       Edit a prompt and save it as a new version
    promptdock delete <spec>     Delete one or all versions of a prompt
    promptdock push              Import CLAUDE.md / .cursorrules files found on disk
    promptdock pull [file]       Import one file, or install prompt.json sources
    promptdock sync              Pull the latest registry changes
    promptdock status            Show uncommitted prompts
    promptdock notion ...        Mirror project prompts to Notion

A <spec> is name, namespace/name, name@version, namespace/name@version or
name@latest.
"""

from dataclasses import dataclass
from datetime import date
from functools import wraps
from pathlib import Path
from typing import Optional
import logging
import shutil

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from . import __version__
from .config import (
    GlobalConfig,
    NotionConfig,
    ProjectConfig,
    PromptSource,
    default_home,
)
from .editor import open_in_editor
from .errors import ConfigError, PromptDockError
from .frontmatter import missing_header_fields, render_header, render_prompt, strip_frontmatter
from .git import GitRepo, github_author
from .importer import (
    LOCAL_TARGETS,
    PUSH_TAGS,
    SPLIT_TAGS,
    FoundFile,
    parse_file,
    scan_directory,
    split_into_sections,
)
from .notion import NotionMirror, scan_project
from .project import create_folder_structure, pull_source, update_gitignore
from .providers import PROVIDER_LABELS, default_providers
from .registry import (
    PromptRecord,
    PromptRegistry,
    PromptSpecifier,
    Resolution,
    ResolutionStatus,
    latest_only,
    parse_specifier,
    sanitize_name,
    sort_for_listing,
    versioned_filename,
)
from .versioning import DEFAULT_VERSION, BumpKind, bump_version

# Exit codes
EXIT_RESOLUTION = 1
EXIT_IO = 2

app = typer.Typer(
    name="promptdock",
    help="PromptDock: versioned AI-assistant prompts in a Git-backed registry",
    no_args_is_help=True,
)
notion_app = typer.Typer(help="Mirror project prompts to a Notion database", no_args_is_help=True)
app.add_typer(notion_app, name="notion")

console = Console()
logger = logging.getLogger("promptdock")


@dataclass
class Settings:
    """Per-invocation settings, built once in the app callback."""

    config_path: Path
    verbose: bool = False

    def load_config(self) -> GlobalConfig:
        return GlobalConfig.load(self.config_path)


def handles_errors(func):
    """Turn library errors into a red message and the error's exit code."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PromptDockError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(e.exit_code)

    return wrapper


def _version_callback(value: bool):
    if value:
        console.print(f"promptdock {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to the global config file"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """PromptDock: versioned AI-assistant prompts in a Git-backed registry."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    ctx.obj = Settings(config_path=config or GlobalConfig.path(), verbose=verbose)


def get_context(ctx: typer.Context) -> tuple[GlobalConfig, PromptRegistry]:
    """Load the global config and open the registry it points to."""
    settings: Settings = ctx.obj or Settings(config_path=GlobalConfig.path())
    config = settings.load_config()
    return config, PromptRegistry(config.local)


def _fail(message: str, code: int = EXIT_RESOLUTION):
    console.print(f"[red]❌ {message}[/red]")
    raise typer.Exit(code)


def _today() -> str:
    return date.today().isoformat()


def _relative(config: GlobalConfig, path: Path) -> str:
    return path.relative_to(config.local).as_posix()


def _ask_namespace(namespace: Optional[str], question: str) -> str:
    if namespace:
        return namespace.strip()
    answer = Prompt.ask(question, default="").strip()
    if not answer:
        _fail("Namespace is required.")
    return answer


def _describe(record: PromptRecord) -> str:
    return f"{record.namespace}/{record.name}@{record.version} - {record.description}"


def _resolve(registry: PromptRegistry, spec: str) -> Resolution:
    """Resolve a specifier; NOT_FOUND exits with the resolution error code."""
    resolution = registry.resolve(spec)
    if resolution.status == ResolutionStatus.NOT_FOUND:
        _fail(f"No prompt found: {spec}")
    return resolution


def choose_versions(resolution: Resolution, action: str, allow_all: bool = False) -> list[PromptRecord]:
    """Ask which of several matching prompts to act on."""
    spec = resolution.specifier
    label = f"{spec.namespace}/{spec.name}" if spec.namespace else spec.name
    console.print(f"📝 Multiple versions found for [cyan]{label}[/cyan]:")

    matches = resolution.matches
    for i, record in enumerate(matches, 1):
        console.print(f"  {i}. {record.namespace}/v{record.version} ({record.description})")
    choices = [str(i) for i in range(1, len(matches) + 1)]
    if allow_all:
        console.print(f"  {len(matches) + 1}. All versions")
        choices.append(str(len(matches) + 1))

    index = int(Prompt.ask(f"Select version to {action}", choices=choices)) - 1
    if index == len(matches):
        return list(matches)
    return [matches[index]]


def _commit_or_discard(
    config: GlobalConfig,
    paths: list[Path],
    message: str,
    question: str,
    discard_question: Optional[str] = None,
) -> bool:
    """Offer to commit and push new files; otherwise optionally delete them."""
    if Confirm.ask(question, default=False):
        repo = GitRepo(config.local)
        repo.commit_and_push([_relative(config, p) for p in paths], message, branch=config.branch)
        return True

    if discard_question and Confirm.ask(discard_question, default=False):
        for path in paths:
            path.unlink(missing_ok=True)
        console.print("🗑️  Deleted locally.")
    else:
        console.print("📝 Saved locally only.")
    return False


# ============================================================================
# Setup
# ============================================================================


def _global_setup(settings: Settings, origin: Optional[str], directory: Optional[Path]) -> None:
    base_dir = directory or default_home()
    repo_path = base_dir / "prompts"

    if repo_path.exists():
        if not Confirm.ask(f"{repo_path} already exists. Replace it?", default=False):
            console.print("❌ Cancelled.")
            raise typer.Exit(0)
        console.print("🗑️  Removing existing repository...")
        shutil.rmtree(repo_path)

    url = origin or Prompt.ask("Prompt repository URL").strip()
    if not url:
        _fail("Repository URL is required.")

    console.print("📥 Cloning repository...")
    GitRepo.clone(url, repo_path)
    GlobalConfig(local=repo_path, origin=url).save(settings.config_path)

    console.print(f"✅ Cloned {url} → [green]{repo_path}[/green]")
    console.print("ℹ️  Ready to use [cyan]promptdock new[/cyan] etc.")


def _ask_providers() -> list[str]:
    names = ", ".join(f"{key} ({label})" for key, label in PROVIDER_LABELS.items())
    console.print(f"\n🤖 Available providers: {names}")
    while True:
        answer = Prompt.ask("Providers to generate configs for (comma-separated)", default="claude,cursor")
        selected = [p.strip().lower() for p in answer.split(",") if p.strip()]
        unknown = [p for p in selected if p not in PROVIDER_LABELS]
        if not unknown:
            return selected
        console.print(f"[yellow]Unknown provider(s): {', '.join(unknown)}[/yellow]")


def _project_setup(project_root: Path) -> None:
    console.print(Panel(
        "This creates a prompt.json that configures prompt downloads for this folder.",
        title="🚀 PromptDock project setup",
    ))

    name = Prompt.ask("Project name", default=project_root.name)
    description = Prompt.ask("Project description", default=f"AI prompts for {name}")

    selected = _ask_providers()
    providers = {key: value for key, value in default_providers().items() if key in selected}
    if "claude" in providers:
        providers["claude"].include_commands = Confirm.ask("Include Claude command documentation?", default=True)

    gitignore = [".promptdock/"] + [settings.folder for settings in providers.values()]
    if not Confirm.ask(f"Add {', '.join(gitignore)} to .gitignore?", default=True):
        gitignore = []

    sources = []
    if Confirm.ask("Configure prompts to auto-download?", default=True):
        while True:
            console.print("\n📝 Adding a prompt source:")
            source_name = Prompt.ask("Prompt name (used for folder naming)")
            source_description = Prompt.ask("Prompt description", default="")
            repo = Prompt.ask("Registry repository URL", default="https://github.com/user/prompts.git")
            namespace = _ask_namespace(None, "Namespace within the repo (e.g. web, backend, mobile)")
            folders = Prompt.ask("Folders to create (comma-separated)", default="system,user,assistant")
            sources.append(PromptSource(
                name=source_name,
                repo=repo,
                namespace=namespace,
                description=source_description,
                folders=[f.strip() for f in folders.split(",") if f.strip()],
                providers=selected,
            ))
            if not Confirm.ask("Add another prompt source?", default=False):
                break

    config = ProjectConfig(
        name=name,
        description=description,
        prompts=sources,
        gitignore=gitignore,
        providers=providers,
    )
    config.save(project_root)
    console.print("✅ Created prompt.json")

    added = update_gitignore(project_root, gitignore)
    if added:
        console.print(f"✅ Updated .gitignore with {len(added)} entries")

    for path in create_folder_structure(project_root, config):
        console.print(f"   ✅ {path.relative_to(project_root)}/")

    console.print("\n🎉 Project setup complete!")
    console.print("  • Run [cyan]promptdock pull --all[/cyan] to download configured prompts")
    console.print("  • Add your own prompts to the created folders")


@app.command()
@handles_errors
def init(
    ctx: typer.Context,
    global_setup: bool = typer.Option(False, "--global", help="Set up the global prompt registry"),
    origin: Optional[str] = typer.Option(None, "--origin", help="Prompt repository URL (global setup)"),
    directory: Optional[Path] = typer.Option(None, "--dir", help="Local PromptDock directory (global setup)"),
):
    """
    Initialize PromptDock.

    With --global or --origin, clones the prompt registry and writes the
    global config. Otherwise creates a prompt.json for the current project.
    """
    if global_setup or origin:
        _global_setup(ctx.obj, origin, directory)
    else:
        _project_setup(Path.cwd())


# ============================================================================
# Registry commands
# ============================================================================


@app.command()
@handles_errors
def new(
    ctx: typer.Context,
    namespace: str = typer.Option(..., "--namespace", help="Prompt namespace"),
    name: str = typer.Option(..., "--name", help="Prompt name"),
    version: str = typer.Option(DEFAULT_VERSION, "--version", help="Prompt version"),
    description: str = typer.Option(..., "--description", help="Prompt description"),
    author: Optional[str] = typer.Option(None, "--author", help="Author (defaults to your GitHub name)"),
    tags: Optional[str] = typer.Option(None, "--tags", help="Comma-separated tags"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Create locally without pushing"),
):
    """Write a new prompt in your editor."""
    config, registry = get_context(ctx)

    sanitized = sanitize_name(name)
    path = registry.path_for(namespace, sanitized, version)
    if path.exists() and not Confirm.ask(f"{path} already exists. Overwrite?", default=False):
        raise typer.Exit(0)

    header = render_header(
        name=sanitized,
        namespace=namespace,
        version=version,
        author=author or github_author(),
        description=description,
        created=_today(),
        tags=[t.strip() for t in tags.split(",") if t.strip()] if tags else None,
    )

    previous = path.read_text() if path.exists() else None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("# Write your prompt content here\n\n")
    console.print(f"📝 Created prompt: [cyan]{path}[/cyan]")

    if not open_in_editor(path):
        if previous is None:
            path.unlink(missing_ok=True)
        else:
            path.write_text(previous)
        _fail("Editor exited with an error; prompt discarded.")

    final = header + path.read_text()
    path.write_text(final)

    missing = missing_header_fields(final)
    if missing:
        _fail(f"Invalid header, missing: {', '.join(missing)}")
    console.print("✅ Header validation passed!")

    if dry_run:
        console.print("🔍 Dry run: prompt created locally without pushing to git")
        return

    _commit_or_discard(
        config,
        [path],
        f"Add prompt: {namespace}/{sanitized}",
        "🚀 Commit and push this prompt?",
        "🗑️  Delete this prompt locally?",
    )


@app.command("list")
@handles_errors
def list_prompts(
    ctx: typer.Context,
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Filter by namespace"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Filter by tag"),
    name: Optional[str] = typer.Option(None, "--name", help="Filter by prompt name"),
    latest: bool = typer.Option(False, "--latest-only", help="Only the newest version of each prompt"),
):
    """List prompts in the registry."""
    _, registry = get_context(ctx)

    prompts = registry.list_all()
    if namespace:
        prompts = [p for p in prompts if p.namespace == namespace]
    if tag:
        prompts = [p for p in prompts if tag in p.tags]
    if name:
        prompts = [p for p in prompts if p.name == name]
    if latest:
        prompts = latest_only(prompts)

    if not prompts:
        console.print("📭 No prompts found.")
        return

    console.print(_prompt_table(sort_for_listing(prompts), description_width=40))
    console.print(f"\n📊 Total: {len(prompts)} prompts")


def _prompt_table(records: list[PromptRecord], description_width: int, title: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("NAMESPACE", style="cyan")
    table.add_column("NAME", style="bold")
    table.add_column("VERSION")
    table.add_column("AUTHOR")
    table.add_column("TAGS", style="dim")
    table.add_column("DESCRIPTION")

    for record in records:
        description = record.description
        if len(description) > description_width:
            description = description[:description_width - 3] + "..."
        table.add_row(
            record.namespace,
            record.name,
            record.version,
            record.author,
            ", ".join(record.tags),
            description,
        )
    return table


@app.command()
@handles_errors
def get(
    ctx: typer.Context,
    spec: str = typer.Argument(..., help="Prompt specifier, e.g. web/review@latest"),
    copy: bool = typer.Option(False, "--copy", "-c", help="Also copy the prompt to the clipboard"),
):
    """Print a prompt's body (for piping into other tools)."""
    _, registry = get_context(ctx)
    parsed = parse_specifier(spec)

    record = None
    if parsed.namespace and parsed.version and not parsed.is_latest:
        path = registry.find_file(parsed.namespace, parsed.name, parsed.version)
        if path is not None:
            record = registry.load(path)

    if record is None:
        resolution = _resolve(registry, spec)
        if resolution.status == ResolutionStatus.AMBIGUOUS:
            console.print(f"[yellow]Several prompts match {spec}; add a version or @latest:[/yellow]")
            for match in resolution.matches:
                console.print(f"  • {match.label}")
            raise typer.Exit(EXIT_RESOLUTION)
        record = resolution.record

    typer.echo(record.content.strip("\n"))

    if copy:
        try:
            import pyperclip
            pyperclip.copy(record.content.strip("\n"))
            console.print("✅ Copied to clipboard", style="dim")
        except Exception as e:
            logger.debug(f"Clipboard copy failed: {e}")
            console.print("[yellow]Could not copy to clipboard[/yellow]")


def _ask_bump(current: str) -> BumpKind:
    while True:
        answer = Prompt.ask(f"📈 How to bump version {current}? (major/minor/patch)")
        kind = BumpKind.parse(answer)
        if kind is not None:
            return kind
        console.print("[red]Please choose one of: major, minor, patch[/red]")


@app.command()
@handles_errors
def edit(
    ctx: typer.Context,
    spec: str = typer.Argument(..., help="Prompt specifier"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Edit locally without pushing"),
):
    """Edit a prompt and save the result as a new version."""
    config, registry = get_context(ctx)

    resolution = _resolve(registry, spec)
    if resolution.status == ResolutionStatus.AMBIGUOUS:
        target = choose_versions(resolution, "edit")[0]
    else:
        target = resolution.record

    source = target.source_path
    console.print(f"📝 Editing prompt: [cyan]{target.namespace}/{target.name}[/cyan] (v{target.version})")

    original = source.read_text()
    source.write_text(strip_frontmatter(original))
    try:
        if not open_in_editor(source):
            _fail("Editor exited with an error; nothing changed.")
        edited = source.read_text()
    finally:
        source.write_text(original)

    new_version = bump_version(target.version, _ask_bump(target.version))
    new_path = source.parent / versioned_filename(target.name, new_version)
    if new_path.exists() and not Confirm.ask(f"{new_path.name} already exists. Overwrite?", default=False):
        raise typer.Exit(0)

    bumped = PromptRecord(
        name=target.name,
        namespace=target.namespace,
        version=new_version,
        author=target.author,
        description=target.description,
        created=target.created,
        tags=target.tags,
    )
    final = render_prompt(bumped, edited)
    new_path.write_text(final)

    missing = missing_header_fields(final)
    if missing:
        _fail(f"Invalid header, missing: {', '.join(missing)}")

    console.print(f"✅ Prompt updated to version [green]{new_version}[/green]!")

    if dry_run:
        console.print("🔍 Dry run: prompt edited locally without pushing to git")
        return

    _commit_or_discard(
        config,
        [new_path],
        f"Update prompt: {target.namespace}/{target.name} to v{new_version}",
        "🚀 Commit and push this edit?",
        "🗑️  Delete the new version locally?",
    )


@app.command()
@handles_errors
def delete(
    ctx: typer.Context,
    spec: str = typer.Argument(..., help="Prompt specifier"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be deleted"),
    all_versions: bool = typer.Option(False, "--all-versions", help="Delete every version of the prompt"),
):
    """Delete one or more versions of a prompt."""
    config, registry = get_context(ctx)

    parsed = parse_specifier(spec)
    if all_versions:
        parsed = PromptSpecifier(name=parsed.name, namespace=parsed.namespace)

    resolution = _resolve(registry, parsed)
    if all_versions:
        targets = resolution.matches
    elif resolution.status == ResolutionStatus.AMBIGUOUS:
        targets = choose_versions(resolution, "delete", allow_all=True)
    else:
        targets = [resolution.record]

    console.print("🗑️  Target(s) for deletion:")
    for record in targets:
        console.print(f"   • {_describe(record)}")
        console.print(f"     [dim]{record.source_path}[/dim]")

    if dry_run:
        console.print("🔍 Dry run: nothing was deleted")
        return

    count = len(targets)
    noun = "prompt" if count == 1 else "prompts"
    if not Confirm.ask(f"⚠️  Delete {count} {noun}? This cannot be undone!", default=False):
        console.print("❌ Deletion cancelled.")
        raise typer.Exit(0)
    remote = Confirm.ask("🌐 Delete from the remote repository too?", default=False)

    deleted = []
    for record in targets:
        record.source_path.unlink()
        deleted.append(_relative(config, record.source_path))
        console.print(f"✅ Deleted: {record.label}")

    if remote:
        if count == 1:
            message = f"Delete prompt: {targets[0].label}"
        else:
            message = f"Delete {count} prompts: {PromptSpecifier(parsed.name, parsed.namespace)}"
        GitRepo(config.local).commit_and_push(deleted, message, branch=config.branch)
        console.print(f"✅ {count} {noun} deleted from the remote repository.")
    else:
        console.print(f"📝 {count} {noun} deleted locally only. Run [cyan]promptdock status[/cyan] to review.")


# ============================================================================
# Import commands
# ============================================================================


def _found_table(files: list[FoundFile]) -> Table:
    table = Table(title=f"🔍 Found {len(files)} files")
    table.add_column("TYPE", style="cyan")
    table.add_column("NAME", style="bold")
    table.add_column("DESCRIPTION")
    table.add_column("PATH", style="dim")
    table.add_column("SIZE", justify="right")
    for f in files:
        table.add_row(f.file_type.value, f.name, f.description, str(f.path), f"{f.size / 1024:.1f}KB")
    return table


@app.command()
@handles_errors
def push(
    ctx: typer.Context,
    directory: Optional[Path] = typer.Option(None, "--dir", help="Directory to scan (default: current)"),
    depth: int = typer.Option(3, "--depth", help="Maximum scan depth"),
    namespace: Optional[str] = typer.Option(None, "--namespace", help="Target namespace"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show what would be pushed"),
):
    """Find Claude and Cursor instruction files and add them to the registry."""
    scan_dir = (directory or Path.cwd()).resolve()
    console.print(f"🔍 Scanning {scan_dir} (depth: {depth})...")

    found = scan_directory(scan_dir, depth)
    if not found:
        console.print("📭 No Claude or Cursor files found.")
        return
    console.print(_found_table(found))

    if dry_run:
        console.print("\n🔍 Dry run: nothing was pushed")
        return

    target_namespace = _ask_namespace(namespace, "📂 Namespace for these prompts (e.g. web, be, mobile)")
    if not Confirm.ask(f"❓ Push all {len(found)} files to namespace '{target_namespace}'?", default=False):
        console.print("❌ Push cancelled.")
        raise typer.Exit(0)

    config, registry = get_context(ctx)
    author = github_author()
    created = []

    for f in found:
        name = sanitize_name(f.name)
        if registry.find_file(target_namespace, name, DEFAULT_VERSION):
            console.print(f"[yellow]⚠️  Skipping {f.name} - already exists[/yellow]")
            continue

        path = registry.path_for(target_namespace, name, DEFAULT_VERSION)
        record = PromptRecord(
            name=name,
            namespace=target_namespace,
            version=DEFAULT_VERSION,
            author=author,
            description=f.description,
            created=_today(),
            tags=list(PUSH_TAGS[f.file_type]),
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_prompt(record, f.content))
        created.append(path)
        console.print(f"✅ Pushed: {target_namespace}/{name}")

    if not created:
        console.print("😞 No files were pushed")
        return

    _commit_or_discard(
        config,
        created,
        f"Push {len(created)} discovered prompts to {target_namespace}",
        f"🚀 Commit and push these {len(created)} files?",
    )


def _install_sources(all_sources: bool, prompt: Optional[str]) -> None:
    project_root = Path.cwd()
    if not ProjectConfig.exists(project_root):
        raise ConfigError("No prompt.json found. Run 'promptdock init' first.")
    project = ProjectConfig.load(project_root)

    if not all_sources and not prompt:
        console.print("[red]❌ Specify --all or --prompt <name>.[/red]")
        console.print("\nAvailable prompts:")
        for source in project.prompts:
            console.print(f"  • {source.name}: {source.description}")
        raise typer.Exit(EXIT_RESOLUTION)

    if all_sources:
        sources = project.prompts
    else:
        source = project.find_source(prompt)
        if source is None:
            _fail(f"Prompt '{prompt}' not found in prompt.json.")
        sources = [source]

    console.print(f"🚀 Pulling {len(sources)} prompt source(s)...\n")
    for source in sources:
        console.print(f"📦 Processing [cyan]{source.name}[/cyan]...")
        result = pull_source(source, project, project_root)
        if not result.files:
            console.print(f"   [yellow]⚠️  No prompt files found in {source.repo}/{source.namespace}[/yellow]")
            continue
        for path in result.written + result.provider_files:
            console.print(f"   ✅ {path.relative_to(project_root)}")
        console.print(f"   ✅ {source.name} pulled ({result.files} files)\n")

    console.print("🎉 All prompts pulled successfully!")


@app.command()
@handles_errors
def pull(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="Claude (.md/.claude) or Cursor (.cursorrules/.mdc) file"),
    namespace: Optional[str] = typer.Option(None, "--namespace", help="Target namespace"),
    name: Optional[str] = typer.Option(None, "--name", help="Custom prompt name"),
    to_local: bool = typer.Option(False, "--to-local", help="Copy into CLAUDE.md / .cursorrules instead"),
    split: bool = typer.Option(False, "--split", help="One prompt per section"),
    output: Optional[Path] = typer.Option(None, "--output", help="Custom output path"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show what would be pulled"),
    all_sources: bool = typer.Option(False, "--all", help="Install every prompt source in prompt.json"),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Install one prompt source from prompt.json"),
):
    """
    Import an instruction file into the registry.

    Without FILE, installs the prompt sources configured in prompt.json
    (--all or --prompt NAME) and regenerates provider configs.
    """
    if file is None:
        _install_sources(all_sources, prompt)
        return

    if not file.exists():
        _fail(f"File not found: {file}")

    parsed = parse_file(file)
    if name:
        parsed.name = sanitize_name(name)

    console.print(f"📥 Detected file type: [bold]{parsed.file_type.value.upper()}[/bold]")
    console.print(f"   Name: {parsed.name}")
    console.print(f"   Description: {parsed.description}")
    console.print(f"   Tags: {', '.join(parsed.tags)}")

    sections = split_into_sections(parsed.content, parsed.file_type) if split else []

    if dry_run:
        console.print("🔍 Dry run: nothing was pulled")
        if to_local:
            console.print(f"   Would copy to: {output or LOCAL_TARGETS[parsed.file_type]}")
        elif split:
            console.print(f"   Would split into {len(sections)} prompts:")
            for section in sections:
                console.print(f"     - {section.title}")
        else:
            console.print(f"   Would create prompt: {namespace or parsed.namespace}/{parsed.name}")
        return

    if to_local:
        target = output or Path.cwd() / LOCAL_TARGETS[parsed.file_type]
        target.write_text(parsed.content)
        console.print(f"✅ Copied to local project: {target}")
        return

    target_namespace = _ask_namespace(namespace, "📂 Namespace for this prompt (e.g. web, be, mobile)")
    config, registry = get_context(ctx)
    author = github_author()

    if split:
        created = []
        for section in sections:
            section_name = sanitize_name(section.title)
            if registry.find_file(target_namespace, section_name, DEFAULT_VERSION):
                console.print(f"[yellow]⚠️  Skipping {section.title} - already exists[/yellow]")
                continue
            record = PromptRecord(
                name=section_name,
                namespace=target_namespace,
                version=DEFAULT_VERSION,
                author=author,
                description=f"Split from {file.name} - {section.title}",
                created=_today(),
                tags=list(SPLIT_TAGS[parsed.file_type]),
            )
            path = registry.path_for(target_namespace, section_name, DEFAULT_VERSION)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(render_prompt(record, section.content.strip()))
            created.append(path)
            console.print(f"✅ Created: {target_namespace}/{section_name}")

        if created:
            _commit_or_discard(
                config,
                created,
                f"Split {parsed.file_type.value} file into {len(created)} prompts",
                f"🚀 Commit and push these {len(created)} split prompts?",
            )
        return

    path = (
        output
        or registry.find_file(target_namespace, parsed.name, parsed.version)
        or registry.path_for(target_namespace, parsed.name, parsed.version)
    )
    if path.exists() and not Confirm.ask(f"❓ {path} already exists. Overwrite?", default=False):
        console.print("❌ Pull cancelled.")
        raise typer.Exit(0)

    record = PromptRecord(
        name=parsed.name,
        namespace=target_namespace,
        version=parsed.version,
        author=author,
        description=parsed.description,
        created=_today(),
        tags=parsed.tags,
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_prompt(record, parsed.content))
    console.print(f"✅ Pulled to: [green]{path}[/green]")

    if output is None:
        _commit_or_discard(
            config,
            [path],
            f"Pull {parsed.file_type.value} prompt: {target_namespace}/{parsed.name}",
            "🚀 Commit and push this prompt?",
        )


# ============================================================================
# Repository commands
# ============================================================================


@app.command()
@handles_errors
def sync(ctx: typer.Context):
    """Pull the latest changes from the prompt repository."""
    config, _ = get_context(ctx)
    repo = GitRepo(config.local)
    console.print(f"🔄 Syncing {config.local}...")

    if not repo.has_commits():
        repo.fetch()
        console.print("ℹ️  Repository is empty, nothing to sync.")
        return

    status = repo.status()
    branch = status.branch or config.branch

    if status.clean:
        repo.fetch()
        repo.pull(branch)
        console.print("✅ Repository synced successfully!")
        return

    console.print("[yellow]⚠️  You have uncommitted changes:[/yellow]")
    for entry in status.entries:
        console.print(f"  {entry.index}{entry.working_dir} {entry.path}")

    if not Confirm.ask("🔄 Hard sync? This discards local changes.", default=False):
        console.print("❌ Sync cancelled. Use [cyan]promptdock status --clean[/cyan] to manage changes.")
        raise typer.Exit(0)

    console.print("🔄 Performing hard sync...")
    repo.fetch()
    repo.reset_hard(f"origin/{branch}")
    console.print("✅ Hard sync completed! Local repo now matches remote.")


@app.command()
@handles_errors
def status(
    ctx: typer.Context,
    clean: bool = typer.Option(False, "--clean", help="Delete all uncommitted prompts"),
):
    """Show prompts that are not yet committed."""
    config, registry = get_context(ctx)
    repo = GitRepo(config.local)

    records = []
    for relative in repo.status().uncommitted_prompts():
        record = registry.load(config.local / relative)
        if record is not None:
            records.append(record)

    if not records:
        console.print("✅ No uncommitted prompts found.")
        return

    console.print(_prompt_table(records, description_width=35, title="🔄 Uncommitted prompts"))
    console.print(f"\n📊 Total: {len(records)} uncommitted prompts")

    if not clean:
        return

    if not Confirm.ask(f"⚠️  Delete all {len(records)} uncommitted prompts?", default=False):
        console.print("❌ Cancelled.")
        return

    for record in records:
        record.source_path.unlink()
        console.print(f"🗑️  Deleted: {record.namespace}/{record.name}")
    console.print("✅ All uncommitted prompts deleted.")


# ============================================================================
# Notion
# ============================================================================


def _notion_config() -> NotionConfig:
    config = NotionConfig.load(Path.cwd())
    if config is None:
        raise ConfigError("Notion not configured. Run 'promptdock notion setup' first.")
    return config


@notion_app.command("setup")
@handles_errors
def notion_setup():
    """Connect a Notion database and create its columns."""
    console.print(Panel(
        "1. Create an integration at https://www.notion.so/my-integrations\n"
        "2. Copy its Internal Integration Token\n"
        "3. Create a database and share it with the integration\n"
        "4. Copy the database ID from the URL",
        title="🔧 Notion setup",
    ))

    token = Prompt.ask("Notion integration token", password=True).strip()
    database_id = Prompt.ask("Notion database ID").strip()
    if not token or not database_id:
        _fail("Token and database ID are required.")

    config = NotionConfig(token=token, database_id=database_id)
    mirror = NotionMirror(config)

    console.print("🔍 Testing connection...")
    if not mirror.test_connection():
        _fail("Failed to connect to Notion. Check the token and database ID.")
    console.print("✅ Connected to Notion")

    mirror.setup_database()
    console.print("✅ Database properties updated")

    path = config.save(Path.cwd())
    console.print(f"✅ Notion configuration saved to {path.name}")


@notion_app.command("sync")
@handles_errors
def notion_sync(
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
):
    """Upsert this project's prompts into Notion."""
    config = _notion_config()
    if not ProjectConfig.exists(Path.cwd()):
        raise ConfigError("No prompt.json found. Run 'promptdock init' first.")

    console.print("📂 Scanning for prompts...")
    prompts = scan_project(Path.cwd())
    if not prompts:
        console.print("📭 No prompts found to sync.")
        return

    for p in prompts:
        console.print(f"   • {p.record.namespace}/{p.folder}/{p.record.name}")

    if not yes and not Confirm.ask(f"Sync {len(prompts)} prompts to Notion?", default=True):
        console.print("❌ Sync cancelled.")
        return

    summary = NotionMirror(config).sync(prompts)
    console.print(f"✅ Notion sync complete: {summary.created} created, {summary.updated} updated")
    if summary.failed:
        console.print(f"[red]❌ Failed: {', '.join(summary.failed)}[/red]")
        raise typer.Exit(EXIT_IO)


@notion_app.command("test")
@handles_errors
def notion_test():
    """Check the Notion connection and count syncable prompts."""
    mirror = NotionMirror(_notion_config())
    if not mirror.test_connection():
        _fail("Failed to connect to Notion. Check your configuration.", EXIT_IO)
    console.print("✅ Notion connection successful!")
    console.print(f"📋 Found {len(scan_project(Path.cwd()))} prompts to sync")


@notion_app.command("status")
@handles_errors
def notion_status():
    """Show whether the Notion mirror is configured and reachable."""
    config = NotionConfig.load(Path.cwd())
    if config is None:
        console.print("❌ Notion integration not configured")
        console.print("   Run [cyan]promptdock notion setup[/cyan] to get started")
        return

    connected = NotionMirror(config).test_connection()
    console.print("✅ Notion integration configured")
    console.print(f"   Database ID: {config.database_id}")
    console.print(f"   Sync enabled: {'Yes' if config.sync_enabled else 'No'}")
    console.print(f"   Connection: {'✅ Working' if connected else '❌ Failed'}")


if __name__ == "__main__":
    app()
