"""Command line interface for Issue Reconciler."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .api_clients import APIClientError, IssuesAPIClient
from .config import (
    BindingConfiguration,
    BindingMode,
    ConfigurationError,
    ConfigurationProvider,
    ServerConfig,
)
from .models import LocalIssue, ServerIssue
from .services import (
    BranchMatcher,
    ProjectRootCalculator,
    ServerBranchProvider,
    ServerIssueFinder,
)

logger = logging.getLogger(__name__)
console = Console()


def _create_client(server: ServerConfig) -> IssuesAPIClient:
    return IssuesAPIClient(server.url, token=server.token, timeout=server.timeout)


def _load_connected_config(provider: ConfigurationProvider) -> BindingConfiguration:
    try:
        config = provider.get_configuration()
    except ConfigurationError as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    if config.is_standalone or config.server is None:
        console.print(
            "❌ Project is not bound to a server. Run 'issue-reconciler bind' first.",
            style="red",
        )
        sys.exit(1)
    return config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Project directory (default: current directory)",
)
@click.version_option(version=__version__, prog_name="issue-reconciler")
@click.pass_context
def cli(ctx, verbose: bool, path: Path):
    """Match local analysis issues against a remote issue server.

    \b
    GETTING STARTED:
      1. issue-reconciler bind --server https://sonar.example.com --project my-key
      2. issue-reconciler branch
      3. issue-reconciler find-issue src/app.py --rule python:S1234 --line 42
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["project_root"] = path.resolve()

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


@cli.command()
@click.option("--server", "server_url", required=True, help="Issue server URL")
@click.option("--project", "project_key", required=True, help="Server project key")
@click.option("--token", default=None, help="User access token")
@click.pass_context
def bind(ctx, server_url: str, project_key: str, token: Optional[str]):
    """Bind the project to a server project."""
    provider = ConfigurationProvider(ctx.obj["project_root"])
    try:
        config = BindingConfiguration(
            mode=BindingMode.CONNECTED,
            project_key=project_key,
            server=ServerConfig(url=server_url, token=token),
        )
        provider.save_configuration(config)
    except (ValueError, ConfigurationError) as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    console.print(f"✅ Bound to project '{project_key}' on {server_url}", style="green")


async def _resolve_branch(
    provider: ConfigurationProvider, server: ServerConfig
) -> Optional[str]:
    async with _create_client(server) as client:
        await client.connect()
        branch_provider = ServerBranchProvider(provider, BranchMatcher(client))
        return await branch_provider.get_server_branch_name()


@cli.command()
@click.pass_context
def branch(ctx):
    """Show the server branch matching the local git HEAD."""
    provider = ConfigurationProvider(ctx.obj["project_root"])
    config = _load_connected_config(provider)
    try:
        branch_name = asyncio.run(_resolve_branch(provider, config.server))
    except (APIClientError, ConfigurationError) as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    if branch_name is None:
        console.print("No matching server branch", style="yellow")
    else:
        console.print(f"Server branch: [bold cyan]{branch_name}[/bold cyan]")


async def _find_issue(
    provider: ConfigurationProvider, server: ServerConfig, local: LocalIssue
) -> Optional[ServerIssue]:
    async with _create_client(server) as client:
        await client.connect()
        branch_provider = ServerBranchProvider(provider, BranchMatcher(client))
        root_calculator = ProjectRootCalculator(provider, client, branch_provider)
        finder = ServerIssueFinder(provider, root_calculator, branch_provider, client)
        return await finder.find_server_issue(local)


def _display_issue(issue: ServerIssue) -> None:
    table = Table(title="Server issue", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Key", issue.key or "")
    table.add_row("Rule", issue.rule_id or "")
    table.add_row("File", issue.file_path or "(module)")
    table.add_row("Line", str(issue.start_line) if issue.start_line is not None else "(file)")
    table.add_row("Status", issue.status or "")
    table.add_row("Message", issue.message or "")
    console.print(table)


@cli.command("find-issue")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--rule", "rule_id", required=True, help="Rule identifier")
@click.option("--line", type=int, default=None, help="Start line (omit for file-level)")
@click.option(
    "--column",
    type=int,
    default=None,
    help="Start column; line 1 column 1 is treated as possibly file-level",
)
@click.option("--hash", "line_hash", default=None, help="Hash of the issue line")
@click.pass_context
def find_issue(
    ctx,
    file: Path,
    rule_id: str,
    line: Optional[int],
    column: Optional[int],
    line_hash: Optional[str],
):
    """Check whether the server already knows an issue in FILE."""
    provider = ConfigurationProvider(ctx.obj["project_root"])
    config = _load_connected_config(provider)
    file_path = str(file.resolve())

    if line is not None and column is not None:
        local = LocalIssue.from_position(rule_id, file_path, line, column, line_hash)
    else:
        local = LocalIssue(
            rule_id=rule_id, file_path=file_path, start_line=line, line_hash=line_hash
        )

    try:
        issue = asyncio.run(_find_issue(provider, config.server, local))
    except (APIClientError, ConfigurationError) as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    if issue is None:
        console.print("Issue not found on the server", style="yellow")
    else:
        _display_issue(issue)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
