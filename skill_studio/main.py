"""Command-line entry point for Skill Studio."""

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from skill_studio.catalog import FilterMode
from skill_studio.commands import SkillStudio
from skill_studio.config import Config, get_config, set_config
from skill_studio.exceptions import SkillStudioError
from skill_studio.installer import INSTALL_METHODS
from skill_studio.logging import configure_logging, log
from skill_studio.models import RepositorySource, Settings

app = typer.Typer(help="Skill Studio - browse, fetch and install skills from GitHub repositories")
console = Console()

_FILTER_MODES = ("all", "fetched", "installed")


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except SkillStudioError as exc:
        log.error("Command failed", kind=exc.kind.value, error=str(exc))
        console.print(f"[red]Error ({exc.kind.value}):[/red] {exc}", markup=True, highlight=False)
        raise typer.Exit(code=1) from exc


def _studio() -> SkillStudio:
    return SkillStudio(get_config())


def _parse_repo(value: str) -> RepositorySource:
    source = RepositorySource.parse(value)
    if source is None:
        raise typer.BadParameter(f"Expected owner/repo, got {value!r}")
    return source


def _check_filter(mode: str) -> FilterMode:
    if mode not in _FILTER_MODES:
        raise typer.BadParameter(f"Filter must be one of: {', '.join(_FILTER_MODES)}")
    return mode  # type: ignore[return-value]


def _yes(flag: bool) -> str:
    return "yes" if flag else ""


@app.callback()
def _main(
    config: str = typer.Option("", "-c", "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    if config:
        set_config(Config.load(config))
    configure_logging("DEBUG" if verbose else None)


@app.command()
def catalog() -> None:
    """Show the built-in repository catalog."""
    with _reporting_errors():
        data = _studio().get_catalog()
    table = Table(title=f"Catalog v{data.version} ({data.last_updated})", header_style="bold cyan")
    table.add_column("Repository")
    table.add_column("Highlight")
    for entry in data.repos:
        table.add_row(entry.url, _yes(entry.highlight))
    console.print(table)


@app.command()
def repos(
    search: str = typer.Option("", "-s", "--search", help="Filter by repository or skill text"),
    filter_mode: str = typer.Option("all", "-f", "--filter", help="all, fetched or installed"),
) -> None:
    """List catalog and custom repositories."""
    mode = _check_filter(filter_mode)
    with _reporting_errors():
        studio = _studio()
        groups = studio.get_repo_groups(search=search, mode=mode)
        favorites = set(studio.get_favorites().repos)
    table = Table(title="Repositories", header_style="bold cyan")
    for column in ("", "Repository", "Fetched", "Custom", "Skills"):
        table.add_column(column)
    for group in groups:
        marker = "*" if group.key in favorites else ("+" if group.highlight else "")
        table.add_row(
            marker,
            group.key,
            _yes(group.is_fetched),
            _yes(group.is_custom),
            str(len(group.skills)) if group.is_fetched else "-",
        )
    console.print(table)


@app.command()
def fetch(repository: str = typer.Argument(..., help="owner/repo")) -> None:
    """Clone (or re-clone) a repository and index its skills."""
    source = _parse_repo(repository)
    with _reporting_errors():
        with console.status(f"Fetching {source.key}..."):
            message = _studio().fetch_repo(source.owner, source.repo)
    console.print(f"[green]{message}[/green]")


@app.command("add-repo")
def add_repo(repository: str = typer.Argument(..., help="owner/repo")) -> None:
    """Add a custom repository."""
    source = _parse_repo(repository)
    with _reporting_errors():
        with console.status(f"Adding {source.key}..."):
            message = _studio().add_custom_repo(source.owner, source.repo)
    console.print(f"[green]{message}[/green]")


@app.command("remove-repo")
def remove_repo(repository: str = typer.Argument(..., help="owner/repo")) -> None:
    """Remove a custom repository."""
    source = _parse_repo(repository)
    with _reporting_errors():
        message = _studio().remove_custom_repo(source.owner, source.repo)
    console.print(message)


@app.command()
def skills(
    search: str = typer.Option("", "-s", "--search", help="Match name, description or owner/repo"),
    filter_mode: str = typer.Option("all", "-f", "--filter", help="all, fetched or installed"),
    favorites: bool = typer.Option(False, "--favorites", help="Only favorited skills"),
) -> None:
    """List skills discovered in fetched repositories."""
    mode = _check_filter(filter_mode)
    with _reporting_errors():
        results = _studio().search_skills(search=search, mode=mode, favorites_only=favorites)
    table = Table(title=f"Skills ({len(results)})", header_style="bold cyan")
    for column in ("ID", "Name", "Installed", "Description"):
        table.add_column(column)
    for skill in results:
        table.add_row(skill.id, skill.name, _yes(skill.is_installed), skill.description)
    console.print(table)


@app.command()
def show(skill_id: str = typer.Argument(..., help="owner/repo/folder")) -> None:
    """Print a skill's definition document."""
    with _reporting_errors():
        skill = _studio().find_skill(skill_id)
    console.print(Markdown(skill.content or f"# {skill.name}\n\n{skill.description}"))


@app.command()
def installed() -> None:
    """List installed skill folders."""
    with _reporting_errors():
        names = _studio().get_installed_skills()
    for name in names:
        console.print(name, highlight=False)


@app.command()
def install(
    skill_id: str = typer.Argument(..., help="owner/repo/folder"),
    method: str = typer.Option("", "-m", "--method", help="copy or npx (defaults to settings)"),
) -> None:
    """Install a skill into the local skills directory."""
    if method and method not in INSTALL_METHODS:
        raise typer.BadParameter(f"Method must be one of: {', '.join(INSTALL_METHODS)}")
    with _reporting_errors():
        studio = _studio()
        skill = studio.find_skill(skill_id)
        message = studio.install_skill(
            skill.owner,
            skill.repo,
            skill.name,
            skill.path,
            skill.skills_path,
            method or None,
        )
    console.print(f"[green]{message.strip() or 'Installed ' + skill.name}[/green]")


@app.command()
def uninstall(skill_name: str = typer.Argument(..., help="Installed skill name")) -> None:
    """Remove an installed skill."""
    with _reporting_errors():
        _studio().uninstall_skill(skill_name)
    console.print(f"Uninstalled {skill_name}")


@app.command()
def reveal(skill_name: str = typer.Argument(..., help="Installed skill name")) -> None:
    """Open an installed skill's folder in the file manager."""
    with _reporting_errors():
        _studio().reveal_skill(skill_name)


@app.command()
def readme(repository: str = typer.Argument(..., help="owner/repo")) -> None:
    """Show a fetched repository's README."""
    source = _parse_repo(repository)
    with _reporting_errors():
        text = _studio().get_repo_readme(source.owner, source.repo)
    if text is None:
        console.print(f"[yellow]No README for {source.key}[/yellow]")
        return
    console.print(Markdown(text))


@app.command()
def favorites() -> None:
    """Show favorited skills and repositories."""
    with _reporting_errors():
        data = _studio().get_favorites()
    console.print("[bold]Skills[/bold]")
    for skill_id in data.skills:
        console.print(f"  {skill_id}", highlight=False)
    console.print("[bold]Repositories[/bold]")
    for key in data.repos:
        console.print(f"  {key}", highlight=False)


@app.command("favorite-skill")
def favorite_skill(skill_id: str = typer.Argument(..., help="owner/repo/folder")) -> None:
    """Toggle a skill favorite."""
    with _reporting_errors():
        data = _studio().toggle_favorite_skill(skill_id)
    state = "added" if skill_id in data.skills else "removed"
    console.print(f"Favorite {state}: {skill_id}", highlight=False)


@app.command("favorite-repo")
def favorite_repo(repository: str = typer.Argument(..., help="owner/repo")) -> None:
    """Toggle a repository favorite."""
    source = _parse_repo(repository)
    with _reporting_errors():
        data = _studio().toggle_favorite_repo(source.key)
    state = "added" if source.key in data.repos else "removed"
    console.print(f"Favorite {state}: {source.key}", highlight=False)


@app.command()
def settings(
    install_method: str = typer.Option("", "--install-method", help="Set default install method"),
) -> None:
    """Show or update settings."""
    with _reporting_errors():
        studio = _studio()
        if install_method:
            if install_method not in INSTALL_METHODS:
                raise typer.BadParameter(f"Method must be one of: {', '.join(INSTALL_METHODS)}")
            studio.save_settings(Settings(install_method=install_method))
        current = studio.get_settings()
    console.print(f"install_method: {current.install_method}", highlight=False)


@app.command()
def version() -> None:
    """Show version information."""
    from skill_studio import __version__

    console.print(f"Skill Studio v{__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
