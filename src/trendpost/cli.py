"""CLI entry point for the trendpost marketing pipeline."""

from __future__ import annotations

import logging
from contextlib import contextmanager

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from trendpost.errors import TrendpostError
from trendpost.storage.models import ContentStatus, Platform

console = Console()


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """Trend-driven marketing content: discover, draft, approve, publish."""


# ---------------------------------------------------------------------------
# campaign: discover or accept a topic and draft posts for approval
# ---------------------------------------------------------------------------


@main.command()
@click.option("--topic", "-t", default=None, help="Custom topic (skips trend discovery)")
@click.option(
    "--platform",
    "-p",
    "platforms",
    multiple=True,
    type=click.Choice([p.value for p in Platform]),
    help="Target platform (repeatable, defaults to the configured campaign platforms)",
)
def campaign(topic: str | None, platforms: tuple[str, ...]) -> None:
    """Run a campaign and queue the drafts for approval."""
    with _pipeline(require_llm=True) as pipeline:
        mode = "custom" if topic is not None else "auto"
        with console.status("[bold green]Running campaign..."):
            result = pipeline.orchestrator.run(
                mode,
                topic,
                platforms=[Platform(p) for p in platforms] or None,
            )

    if result.processed is None:
        console.print("[yellow]No pending trends found. Add RSS feeds or a SerpAPI key.[/yellow]")
        return

    console.print(
        Panel(
            f"[bold]{result.processed}",
            subtitle=f"{result.trends_found} trend(s) found | "
            f"{len(result.content_ids)} draft(s) created",
        )
    )
    for platform, reason in result.failures.items():
        console.print(f"  [red]{platform} failed:[/red] {reason}")
    if result.content_generated:
        console.print("[green]Drafts are waiting for approval:[/green] trendpost content list")


# ---------------------------------------------------------------------------
# trends: discovery queue
# ---------------------------------------------------------------------------


@main.group()
def trends() -> None:
    """Discover and inspect trend candidates."""


@trends.command("fetch")
def trends_fetch() -> None:
    """Fetch RSS feeds and Google Trends into the pending queue."""
    with _pipeline() as pipeline:
        with console.status("[green]Fetching trends..."):
            items = pipeline.aggregator.aggregate()
    console.print(f"Fetched [bold]{len(items)}[/bold] unique trends")


@trends.command("pending")
@click.option("--limit", "-n", default=10, help="Maximum number of trends to show")
def trends_pending(limit: int) -> None:
    """List pending trends, newest first."""
    with _pipeline() as pipeline:
        topics = pipeline.trends.pending(limit)

    if not topics:
        console.print("[yellow]No pending trends.[/yellow]")
        return

    table = Table(title="Pending Trends")
    table.add_column("ID", width=5, justify="right")
    table.add_column("Title", width=60)
    table.add_column("Source", width=20)
    table.add_column("Discovered", width=16)
    for t in topics:
        table.add_row(
            str(t.id), t.title[:60], t.source, t.discovered_at.strftime("%Y-%m-%d %H:%M")
        )
    console.print(table)


# ---------------------------------------------------------------------------
# content: review queue
# ---------------------------------------------------------------------------


@main.group()
def content() -> None:
    """Inspect generated content."""


@content.command("list")
@click.option(
    "--status",
    "-s",
    type=click.Choice([s.value for s in ContentStatus]),
    default=None,
    help="Only show one status (default: pending, approved and published)",
)
def content_list(status: str | None) -> None:
    """List content grouped by status."""
    statuses = [status] if status else [
        ContentStatus.PENDING_APPROVAL.value,
        ContentStatus.APPROVED.value,
        ContentStatus.PUBLISHED.value,
    ]
    with _pipeline() as pipeline:
        groups = {s: pipeline.content.list_by_status(s) for s in statuses}

    for s, items in groups.items():
        table = Table(title=f"{s} ({len(items)})")
        table.add_column("ID", width=5, justify="right")
        table.add_column("Platform", width=10)
        table.add_column("Title", width=50)
        table.add_column("Topic", width=30)
        table.add_column("URL", width=40)
        for item in items:
            table.add_row(
                str(item.id),
                item.platform,
                item.title[:50],
                item.topic_title[:30],
                item.published_url or "",
            )
        console.print(table)


@content.command("show")
@click.argument("content_id", type=int)
def content_show(content_id: int) -> None:
    """Show one content item in full."""
    with _pipeline() as pipeline:
        item = pipeline.content.get(content_id)

    console.print(
        Panel(
            f"[bold]{item.title}",
            subtitle=f"#{item.id} | {item.platform} | {item.status}",
        )
    )
    console.print(Markdown(item.body))
    if item.hashtags:
        console.print(f"\n[cyan]{item.hashtags}[/cyan]")
    if item.published_url:
        console.print(f"\n[green]Published:[/green] {item.published_url}")


# ---------------------------------------------------------------------------
# approve / reject / publish: lifecycle transitions
# ---------------------------------------------------------------------------


@main.command()
@click.argument("content_id", type=int)
def approve(content_id: int) -> None:
    """Approve a draft for publishing."""
    with _pipeline() as pipeline:
        item = pipeline.content.approve(content_id)
    console.print(f"[green]Content {item.id} is {item.status}.[/green]")


@main.command()
@click.argument("content_id", type=int)
def reject(content_id: int) -> None:
    """Reject a draft."""
    with _pipeline() as pipeline:
        item = pipeline.content.reject(content_id)
    console.print(f"[yellow]Content {item.id} is {item.status}.[/yellow]")


@main.command()
@click.argument("content_id", type=int)
def publish(content_id: int) -> None:
    """Publish an approved item to its platform."""
    with _pipeline() as pipeline:
        with console.status("[green]Publishing..."):
            item = pipeline.dispatcher.publish(content_id)
    console.print(f"[green]Content {item.id} published.[/green]")
    if item.published_url:
        console.print(f"  {item.published_url}")


# ---------------------------------------------------------------------------
# providers: publishing destination status
# ---------------------------------------------------------------------------


@main.command()
@click.option("--test", "run_test", is_flag=True, help="Run a live check on configured providers")
def providers(run_test: bool) -> None:
    """Show which publishing providers are configured."""
    with _pipeline() as pipeline:
        report = pipeline.registry.status_report()
        checks = pipeline.registry.test_all() if run_test else []

    table = Table(title="Publishing Providers")
    table.add_column("Provider", width=32)
    table.add_column("Platform", width=10)
    table.add_column("Configured", width=10, justify="center")
    table.add_column("Missing", width=40)
    for p in report["available"] + report["unavailable"]:
        table.add_row(
            p.name,
            p.platform.value,
            "[green]yes[/green]" if p.configured else "[red]no[/red]",
            ", ".join(p.missing_keys),
        )
    console.print(table)
    console.print(report["summary"])

    for check in checks:
        if not check.tested:
            continue
        if check.working:
            console.print(f"  [green]{check.provider}: working[/green]")
        else:
            console.print(f"  [red]{check.provider}: {check.error or 'not working'}[/red]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(level: str) -> None:
    """Route library logging through rich once per process."""
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def _check_api_key(settings: object) -> None:
    """Exit with a helpful message if the API key is not set."""
    if not getattr(settings, "anthropic_api_key", ""):
        console.print(
            "[bold red]Error:[/bold red] ANTHROPIC_API_KEY not set.\n"
            "Add it to .env or the environment."
        )
        raise SystemExit(1)


@contextmanager
def _pipeline(*, require_llm: bool = False):
    """Build the pipeline from settings and turn pipeline errors into exit code 1."""
    from trendpost.config import get_settings
    from trendpost.pipeline import Pipeline

    settings = get_settings()
    _configure_logging(settings.log_level)
    if require_llm:
        _check_api_key(settings)

    pipeline = Pipeline.from_settings(settings)
    try:
        yield pipeline
    except TrendpostError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        if e.details and e.details not in e.message:
            console.print(f"[dim]{e.details}[/dim]")
        raise SystemExit(1) from e
    finally:
        pipeline.close()
