"""clusterscope CLI - terminal dashboard for Elasticsearch clusters.

Commands:
- run: start the dashboard
- clusters: list the configured clusters
- health: fetch cluster health once and print it

Every command reads the cluster file from --config, falling back to
CLUSTERSCOPE_CONFIG_PATH and then ~/.config/clusterscope/config.yaml.
"""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clusterscope.api.types import ApiFailure, FetchCluster
from clusterscope.app import App
from clusterscope.config import Config, ConfigError, Settings, load_config
from clusterscope.log import setup_logging
from clusterscope.transport import TransportController
from clusterscope.view.format import format_cluster_health

app = typer.Typer(
    name="clusterscope",
    help="Terminal dashboard for browsing Elasticsearch clusters",
    no_args_is_help=True,
)

console = Console()


def _load(settings: Settings, config_path: Path | None) -> Config:
    """Load the cluster file or exit with code 1."""
    path = config_path if config_path is not None else settings.config_path
    try:
        return load_config(path)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command("run")
def run_dashboard(
    config_path: Path = typer.Option(
        None, "--config", "-c", help="Path to the cluster file"
    ),
    log_file: Path = typer.Option(
        None, "--log-file", help="Write logs to this file (default: discard)"
    ),
    log_level: str = typer.Option(None, "--log-level", help="Log level, e.g. DEBUG"),
) -> None:
    """
    Start the dashboard.

    Keys: q quits, r focuses the resource tab, c/e/i/a focus the cluster
    list, resource list, index table and alias table, h/j/k/l or arrows move,
    enter opens an index, esc goes back.
    """
    settings = Settings()
    config = _load(settings, config_path)
    setup_logging(
        log_file if log_file is not None else settings.log_file,
        log_level if log_level is not None else settings.log_level,
    )

    if not config.elasticsearch:
        console.print("[yellow]No clusters configured[/yellow]")

    asyncio.run(App(config, settings, console=console).run())


@app.command("clusters")
def list_clusters(
    config_path: Path = typer.Option(
        None, "--config", "-c", help="Path to the cluster file"
    ),
) -> None:
    """List the configured clusters."""
    settings = Settings()
    config = _load(settings, config_path)

    if not config.elasticsearch:
        console.print("[dim]No clusters configured[/dim]")
        return

    table = Table(title="Clusters")
    table.add_column("Name", style="cyan")
    table.add_column("Endpoint")
    table.add_column("User")

    for cluster in config.elasticsearch:
        try:
            endpoint = cluster.resolve_endpoint()
        except ValueError as e:
            endpoint = f"[red]{escape(str(e))}[/red]"
        table.add_row(cluster.name, endpoint, cluster.credential.username)

    console.print(table)


@app.command("health")
def show_health(
    cluster: str = typer.Option(
        None, "--cluster", help="Only this cluster (default: all)"
    ),
    config_path: Path = typer.Option(
        None, "--config", "-c", help="Path to the cluster file"
    ),
) -> None:
    """Fetch cluster health once and print it."""
    settings = Settings()
    config = _load(settings, config_path)
    setup_logging(settings.log_file, settings.log_level)

    names = config.cluster_names()
    if cluster is not None:
        if cluster not in names:
            console.print(f"[red]Unknown cluster: {cluster}[/red]")
            raise typer.Exit(1)
        names = [cluster]

    failed = asyncio.run(_fetch_health(config, settings, names))
    if failed:
        raise typer.Exit(1)


async def _fetch_health(config: Config, settings: Settings, names: list[str]) -> int:
    """Send one FetchCluster per name through the transport and print results.

    Returns:
        Number of clusters whose fetch failed
    """
    transport = TransportController.init(config, settings)
    failed = 0
    try:
        ids = await transport.send_requests(FetchCluster(name) for name in names)
        for _ in ids:
            envelope = await transport.recv()
            result = envelope.result
            if isinstance(result, ApiFailure):
                failed += 1
                console.print(f"[red]request #{envelope.request_id}: {result}[/red]")
                continue
            console.print(f"[bold]{result.cluster_name}[/bold]")
            console.print(format_cluster_health(result.response))
            console.print()
    finally:
        await transport.close()
    return failed


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
