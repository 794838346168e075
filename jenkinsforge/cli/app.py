"""Main Typer application — run a Jenkins goal from the terminal.

Entry point: ``jenkinsforge`` (configured via pyproject.toml scripts).

Commands: run, phases.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from jenkinsforge.config import JenkinsSettings
from jenkinsforge.core.executor import execute_jenkins
from jenkinsforge.core.progress import report_progress
from jenkinsforge.errors import JenkinsGoalError
from jenkinsforge.models.goals import GoalState
from jenkinsforge.models.invocation import GoalInvocation, RepoRef
from jenkinsforge.models.registration import JenkinsRegistration, ServerConfig

console = Console()

app = typer.Typer(
    name="jenkinsforge",
    help="jenkinsforge: run and monitor Jenkins jobs as delivery goals.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

_STATE_STYLES: dict[GoalState, str] = {
    GoalState.SUCCESS: "green",
    GoalState.FAILURE: "red",
    GoalState.STOPPED: "yellow",
}


class ConsoleProgressLog:
    """Progress log that echoes every chunk to a Rich console verbatim."""

    def __init__(self, target: Console) -> None:
        self._console = target

    def write(self, text: str) -> None:
        self._console.print(text.rstrip("\n"), markup=False, highlight=False)


def parse_parameters(pairs: list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings into a parameter mapping."""
    parameters: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {pair!r}")
        parameters[key] = value
    return parameters


@app.command(name="run", help="Reconcile, trigger and follow a Jenkins job.")
def run_cmd(
    repo: str = typer.Option(..., "--repo", "-r", help="Triggering repository as OWNER/NAME."),
    job: Optional[str] = typer.Option(None, "--job", "-j", help="Job name; defaults to the repository name."),
    sha: str = typer.Option("HEAD", help="Commit sha reported with build status."),
    branch: str = typer.Option("main", help="Branch reported with build status."),
    workspace: str = typer.Option("local", help="Workspace id scoping the status webhook."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-p", help="Build parameter KEY=VALUE (repeatable)."),
    definition: Optional[Path] = typer.Option(None, "--definition", "-d", help="Job config.xml to create or update."),
    converge_only: bool = typer.Option(False, "--converge-only", help="Only reconcile the job definition."),
    server_url: Optional[str] = typer.Option(None, "--server-url", help="Jenkins URL (overrides JENKINSFORGE_JENKINS_URL)."),
    user: Optional[str] = typer.Option(None, "--user", help="Jenkins user."),
    password: Optional[str] = typer.Option(None, "--password", help="Jenkins password or API token."),
    queue_timeout: Optional[float] = typer.Option(None, help="Seconds to wait for the build to leave the queue."),
    build_timeout: Optional[float] = typer.Option(None, help="Seconds to wait for the build to finish."),
) -> None:
    """Run one Jenkins goal invocation and exit non-zero unless it succeeds."""
    settings = JenkinsSettings()
    logging.basicConfig(level=settings.log_level.upper())

    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name:
        raise typer.BadParameter(f"Expected OWNER/NAME, got {repo!r}", param_hint="--repo")

    if definition is not None and not definition.exists():
        console.print(f"[bold red]Definition not found:[/bold red] {definition}")
        raise typer.Exit(code=1)

    registration = JenkinsRegistration(
        job=job,
        converge_only=converge_only,
        parameters=parse_parameters(param or []) or None,
        definition=definition.read_text(encoding="utf-8") if definition else None,
        server=ServerConfig(url=server_url, user=user, password=password),
        queue_timeout=queue_timeout,
        build_timeout=build_timeout,
    )
    invocation = GoalInvocation(
        repo=RepoRef(owner=owner, name=name),
        sha=sha,
        branch=branch,
        workspace_id=workspace,
        progress_log=ConsoleProgressLog(console),
    )

    run_id = uuid.uuid4().hex[:8]
    console.print(f"[bold cyan]Running Jenkins goal {run_id} for {repo}...[/bold cyan]")
    try:
        result = execute_jenkins(registration, settings=settings)(invocation)
    except JenkinsGoalError as exc:
        console.print(f"[bold red]Jenkins goal failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    style = _STATE_STYLES.get(result.state, "white")
    lines = [
        f"[bold]State:[/bold]       [{style}]{result.state.value}[/{style}]",
        f"[bold]Description:[/bold] {result.description}",
    ]
    for link in result.external_urls:
        lines.append(f"[bold]{link.label}:[/bold]         {link.url}")
    console.print(
        Panel(
            "\n".join(lines),
            title="[bold]Jenkins Goal[/bold]",
            border_style=style,
            padding=(1, 2),
        )
    )
    if result.state != GoalState.SUCCESS:
        raise typer.Exit(code=1)


@app.command(name="phases", help="Detect goal phases in a saved progress log.")
def phases_cmd(
    log_file: Path = typer.Argument(..., help="Progress log file to scan."),
) -> None:
    """Print every line of *log_file* that marks a goal phase."""
    if not log_file.exists():
        console.print(f"[bold red]Log file not found:[/bold red] {log_file}")
        raise typer.Exit(code=1)

    table = Table(title="Detected Phases")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Phase", style="cyan")
    table.add_column("Text")

    found = 0
    for number, line in enumerate(log_file.read_text(encoding="utf-8").splitlines(), start=1):
        phase = report_progress(line)
        if phase is not None:
            table.add_row(str(number), Text(phase), Text(line.strip()))
            found += 1

    if not found:
        console.print("[dim]No phases detected.[/dim]")
        return
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
