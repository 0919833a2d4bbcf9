"""Main CLI entry point for the cache operator."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from cache_operator.exceptions import CacheOperatorError
from cache_operator.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="cache-operator",
    help="Kubernetes operator reconciling CacheCluster resources",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _print_error(title: str, error: CacheOperatorError) -> None:
    console.print(f"[red]{title}:[/red] {error.message}")
    if error.details:
        console.print(f"\n{error.details}")


def _load_settings(config_path: str | None, namespace: str | None):
    from cache_operator.config import OperatorSettings

    settings = OperatorSettings.from_env(config_path)
    if namespace:
        settings = OperatorSettings.create(**{**settings.model_dump(), "namespace": namespace})
    return settings


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# Global callback to set up logging
@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_level: str = typer.Option(
        "INFO", "--log-level", "-l", help=f"Log level ({', '.join(LOG_LEVELS)})"
    ),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    level = log_level.upper()
    if level not in LOG_LEVELS:
        console.print(
            f"[red]Invalid log level:[/red] {log_level}\n\nChoose one of {', '.join(LOG_LEVELS)}"
        )
        raise typer.Exit(code=1)

    log_path = Path(log_file) if log_file else None
    setup_logging(level=level, log_file=log_path, verbose=verbose)
    logger.debug("Logging initialized")


@app.command()
def version() -> None:
    """Show version information."""
    from cache_operator import __version__

    typer.echo(f"cache-operator version {__version__}")


@app.command()
def run(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="Path to operator configuration YAML"
    ),
    namespace: str | None = typer.Option(
        None, "--namespace", "-n", help="Namespace to watch (overrides config and WATCH_NAMESPACE)"
    ),
) -> None:
    """
    Run the operator.

    Watches CacheCluster resources and their Deployments in one namespace,
    reconciling Deployments to spec.size and evicting pods that are not ready.
    """
    from cache_operator.operator import Operator, load_kubernetes_config

    operator = None
    try:
        settings = _load_settings(config_path, namespace)
        load_kubernetes_config()

        operator = Operator(settings)
        console.print(
            f"[green]✓[/green] Watching CacheClusters in namespace '{settings.namespace}'"
        )
        operator.run()

    except CacheOperatorError as e:
        logger.error(f"Operator failed: {e.message}")
        _print_error("Error", e)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        if operator:
            operator.stop()
            operator.join()
        console.print("\n[yellow]Operator stopped by user[/yellow]")
        raise typer.Exit(code=130)


@app.command()
def crd(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="Path to operator configuration YAML"
    ),
) -> None:
    """
    Print the CacheCluster CustomResourceDefinition.

    Examples:
        # Install the resource definition
        cache-operator crd | kubectl apply -f -
    """
    import yaml

    from cache_operator.crd import build_crd_manifest

    try:
        settings = _load_settings(config_path, None)
    except CacheOperatorError as e:
        _print_error("Configuration Error", e)
        raise typer.Exit(code=1)

    typer.echo(yaml.safe_dump(build_crd_manifest(settings), sort_keys=False), nl=False)


@app.command()
def status(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="Path to operator configuration YAML"
    ),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Namespace to inspect"),
) -> None:
    """
    Show CacheClusters and the nodes recorded in their status.
    """
    from kubernetes import client

    from cache_operator.operator import load_kubernetes_config
    from cache_operator.stores import ClusterStore

    try:
        settings = _load_settings(config_path, namespace)
        load_kubernetes_config()

        store = ClusterStore(
            client.CustomObjectsApi(), settings.group, settings.version, settings.plural
        )
        clusters = store.list(settings.namespace)
    except CacheOperatorError as e:
        _print_error("Error", e)
        raise typer.Exit(code=1)

    if not clusters:
        console.print(f"[yellow]No CacheClusters found in namespace '{settings.namespace}'[/yellow]")
        return

    table = Table(title=f"CacheClusters in {settings.namespace}")
    table.add_column("Name", style="cyan")
    table.add_column("Size", style="magenta")
    table.add_column("Nodes", style="green")
    table.add_column("Node Names")

    for cluster in sorted(clusters, key=lambda c: c.name):
        observed = len(cluster.status.nodes)
        style = "green" if observed == cluster.spec.size else "yellow"
        table.add_row(
            cluster.name,
            str(cluster.spec.size),
            f"[{style}]{observed}/{cluster.spec.size}[/{style}]",
            ", ".join(cluster.status.nodes) or "-",
        )

    console.print(table)


if __name__ == "__main__":
    app()
