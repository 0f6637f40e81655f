"""Formatting helpers for Elasticsearch values in Rich markup."""

from datetime import datetime, timezone

from rich import filesize
from rich.markup import escape

from clusterscope.client.types import ClusterHealth

HEALTH_COLORS = {
    "green": "green",
    "yellow": "yellow",
    "red": "red",
}


def health_color(health: str | None) -> str:
    """Rich color for an Elasticsearch health string ("green", ...)."""
    return HEALTH_COLORS.get(health or "", "white")


def humanize_bytes(value: str | None) -> str:
    """
    Format a byte count string from the _cat API.

    Args:
        value: Decimal byte count as string (e.g. "40960"), or None

    Returns:
        Size like "41.0 kB", or "unknown" if the value is not a number
    """
    try:
        return filesize.decimal(int(value or ""))
    except ValueError:
        return "unknown"


def parse_epoch_millis(value: str | None) -> datetime | None:
    """Parse an epoch-milliseconds string (index creation.date) as UTC."""
    try:
        return datetime.fromtimestamp(int(value or "") / 1000, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def format_timestamp(value: str | None) -> str:
    parsed = parse_epoch_millis(value)
    return parsed.strftime("%Y-%m-%d %H:%M:%S") if parsed else "-"


def format_cluster_health(health: ClusterHealth) -> str:
    """
    Key/value lines for the cluster health panel.

    Args:
        health: Cluster health snapshot

    Returns:
        Multi-line Rich markup string
    """
    color = health_color(health.status)
    rows = [
        ("cluster_name", escape(health.cluster_name)),
        ("status", f"[{color}]{escape(health.status)}[/{color}]"),
        ("nodes", health.number_of_nodes),
        ("data_nodes", health.number_of_data_nodes),
        ("active_shards", health.active_shards),
        ("active_primary_shards", health.active_primary_shards),
        ("active_shards_percent", f"{health.active_shards_percent_as_number:.1f}%"),
        ("initializing_shards", health.initializing_shards),
        ("relocating_shards", health.relocating_shards),
        ("unassigned_shards", health.unassigned_shards),
        ("delayed_unassigned_shards", health.delayed_unassigned_shards),
        ("in_flight_fetch", health.number_of_in_flight_fetch),
        ("pending_tasks", health.number_of_pending_tasks),
        ("task_max_waiting_in_queue", f"{health.task_max_waiting_in_queue_millis}ms"),
    ]
    width = max(len(key) for key, _ in rows)
    return "\n".join(f"[dim]{key:<{width}}[/dim]  {value}" for key, value in rows)
