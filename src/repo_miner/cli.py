"""Command-line interface for repo-miner"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import MinerConfig, load_config
from .exceptions import MinerError
from .logging_config import setup_logging
from .mining import JsonLinesSink, MemorySink, MiningReport, RepositoryMiner
from .scm import GitSession
from .syntax import PythonAstProvider

app = typer.Typer(
    name="repo-miner",
    help="repo-miner - git history, churn, metrics and code smells",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging")
QuietOption = typer.Option(False, "--quiet", "-q", help="Only log errors")


@app.command()
def refs(
    path: Path = typer.Argument(Path("."), help="Path to the git repository"),
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
) -> None:
    """List branches and tags."""
    setup_logging(verbose=verbose, quiet=quiet)
    try:
        with GitSession().open(path) as session:
            references = session.list_references()
            table = Table(title=f"References in {session.root}")
            table.add_column("Name", style="cyan")
            table.add_column("Type")
            table.add_column("Path", style="dim")
            table.add_column("Target", style="green")
            for ref in references:
                table.add_row(ref.name, ref.type.value, ref.path, (ref.target or "")[:12])
    except MinerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(table)


@app.command()
def commits(
    path: Path = typer.Argument(Path("."), help="Path to the git repository"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON lines"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
) -> None:
    """List every commit with its churn."""
    setup_logging(verbose=verbose, quiet=quiet)
    try:
        settings = load_config(config_file=config)
        sink = MemorySink()
        RepositoryMiner(PythonAstProvider(), sink, config=settings).mine_history(path)
    except MinerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        for commit in sink.commits:
            print(json.dumps(commit.to_dict()))
        return

    table = Table(title=f"{len(sink.commits)} commits")
    table.add_column("Commit", style="cyan")
    table.add_column("Date")
    table.add_column("Author")
    table.add_column("Files", justify="right")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")
    table.add_column("Subject")
    for commit in sink.commits:
        subject = escape(commit.message.splitlines()[0]) if commit.message else ""
        if commit.is_merge:
            subject = f"[yellow]merge[/yellow] {subject}"
        table.add_row(
            commit.id[:12],
            commit.commit_date.strftime("%Y-%m-%d"),
            commit.author.name,
            str(len(commit.changes)),
            str(commit.lines_added),
            str(commit.lines_removed),
            subject,
        )
    console.print(table)


@app.command()
def mine(
    path: Path = typer.Argument(Path("."), help="Path to the git repository"),
    ref: Optional[str] = typer.Option(None, "--ref", "-r", help="Only commits reachable from this reference"),
    commit: Optional[List[str]] = typer.Option(None, "--commit", help="Commit id to mine (repeatable)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write records as JSON lines"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Stop at the first failing commit"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """Compute metrics and smells for each commit.

    [bold cyan]Examples:[/bold cyan]

      repo-miner mine . --ref main --out records.jsonl

      repo-miner mine /path/to/repo --commit abc123 --commit def456
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        settings = load_config(config_file=config, fail_fast=fail_fast or None)
        provider = PythonAstProvider(settings.exclude_patterns)
        if out is not None:
            with JsonLinesSink(out) as sink:
                report = _run(provider, sink, settings, path, commit, ref)
        else:
            memory = MemorySink()
            report = _run(provider, memory, settings, path, commit, ref)
            _print_smells(memory)
    except MinerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Mining interrupted[/yellow]")
        raise typer.Exit(130)

    _print_report(report)
    if not report.ok:
        raise typer.Exit(1)


def _run(provider, sink, settings: MinerConfig, path: Path, commit_ids, ref) -> MiningReport:
    miner = RepositoryMiner(provider, sink, config=settings)
    return miner.mine(path, commits=commit_ids or None, reference=ref)


def _print_smells(sink: MemorySink) -> None:
    flagged = [r for r in sink.analyses if r.smells]
    if not flagged:
        return
    table = Table(title="Smells")
    table.add_column("Commit", style="cyan")
    table.add_column("Type")
    table.add_column("Smell", style="yellow")
    table.add_column("Members")
    for record in flagged:
        for verdict in record.smells:
            table.add_row(
                record.commit[:12],
                f"{record.path}:{record.type_name}",
                verdict.smell.value,
                ", ".join(verdict.members),
            )
    console.print(table)


def _print_report(report: MiningReport) -> None:
    console.print(
        f"[bold]{len(report.commits_analyzed)}[/bold] commits analyzed, "
        f"[bold]{report.records_emitted}[/bold] records emitted"
    )
    for failure in report.failures:
        where = f" {failure.path}" if failure.path else ""
        console.print(
            f"[red]failed[/red] {failure.commit[:12]} at {failure.stage.value}{where}: {failure.error}"
        )


if __name__ == "__main__":
    app()
