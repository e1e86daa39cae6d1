"""CLI entry point for Domo."""

import os
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from domo.config import load_config
from domo.conversation.registry import link_conversation
from domo.errors import ConflictError, NotFoundError
from domo.logging_setup import setup_logging
from domo.reporting.service import build_demo_report, score_conversation, summarize_reports
from domo.storage.database import Database
from domo.storage.models import DemoVideo
from domo.storage.repository import Repository
from domo.video.chapters import (
    find_chapter_at_timestamp,
    format_time,
    parse_chapters_from_context,
)

console = Console(force_terminal=True)


@click.group()
@click.option(
    "--db",
    default=None,
    help="Database path (overrides DOMO_DB_PATH)",
    type=click.Path(),
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db, verbose):
    """Domo - Conversational demo backend and reporting."""
    ctx.ensure_object(dict)

    config = load_config(db)
    ctx.obj["config"] = config
    ctx.obj["db_path"] = config.db_path
    setup_logging(config.log_level, verbose=verbose)


def _open_db(ctx) -> Database:
    config = ctx.obj["config"]
    config.ensure_dirs()
    return Database(ctx.obj["db_path"])


@cli.command(name="init-db")
@click.pass_context
def init_db(ctx):
    """Create the database schema."""
    with _open_db(ctx):
        pass
    console.print(f"[green]Database ready:[/green] {ctx.obj['db_path']}")


# ---------------------------------------------------------------------------
# Demo Management
# ---------------------------------------------------------------------------


@cli.group(name="demo")
def demo_group():
    """Manage demos and their videos."""
    pass


@demo_group.command(name="create")
@click.argument("name")
@click.option("--cta-title", default=None, help="Trial CTA heading")
@click.option("--cta-message", default=None, help="Trial CTA body text")
@click.option("--cta-button-text", default=None, help="Trial CTA button label")
@click.option("--cta-url", default=None, help="Trial CTA button URL")
@click.pass_context
def demo_create(ctx, name, cta_title, cta_message, cta_button_text, cta_url):
    """Create a new demo."""
    with _open_db(ctx) as db:
        demo = Repository(db).create_demo(
            name,
            cta_title=cta_title,
            cta_message=cta_message,
            cta_button_text=cta_button_text,
            cta_button_url=cta_url,
        )
    console.print(f"[green]Created demo:[/green] {demo.name}")
    console.print(f"  ID: {demo.id}")


@demo_group.command(name="list")
@click.pass_context
def demo_list(ctx):
    """List all demos."""
    with _open_db(ctx) as db:
        repo = Repository(db)
        demos = repo.list_demos()
        if not demos:
            console.print("[yellow]No demos yet.[/yellow]")
            return

        table = Table(title="Demos")
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("Videos", justify="right")
        table.add_column("Conversations", justify="right")
        table.add_column("CTA URL")

        for d in demos:
            table.add_row(
                d.id,
                d.name,
                str(len(repo.list_demo_videos(d.id))),
                str(len(repo.list_conversations(d.id))),
                d.cta_button_url or "",
            )
    console.print(table)


@demo_group.command(name="add-video")
@click.argument("demo_id")
@click.argument("title")
@click.option("--url", "storage_url", default="", help="Storage URL of the video")
@click.option(
    "--context-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Markdown file with the generated video context (chapters)",
)
@click.pass_context
def demo_add_video(ctx, demo_id, title, storage_url, context_file):
    """Attach a video to a demo."""
    generated_context = context_file.read_text(encoding="utf-8") if context_file else None

    with _open_db(ctx) as db:
        repo = Repository(db)
        if repo.get_demo(demo_id) is None:
            console.print(f"[red]Error:[/red] Unknown demo: {demo_id}")
            raise SystemExit(1)
        repo.add_demo_video(DemoVideo(
            demo_id=demo_id,
            title=title,
            storage_url=storage_url,
            generated_context=generated_context,
        ))

    chapters = parse_chapters_from_context(generated_context)
    console.print(f"[green]Added video:[/green] {title} ({len(chapters)} chapters)")


@demo_group.command(name="link-conversation")
@click.argument("demo_id")
@click.argument("conversation_id")
@click.option("--name", "conversation_name", default=None, help="Display name for the conversation")
@click.pass_context
def demo_link_conversation(ctx, demo_id, conversation_id, conversation_name):
    """Make CONVERSATION_ID the active conversation of a demo."""
    with _open_db(ctx) as db:
        try:
            detail = link_conversation(Repository(db), demo_id, conversation_id, conversation_name)
        except (NotFoundError, ConflictError) as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)
    console.print(f"[green]Linked conversation:[/green] {detail.conversation_name}")


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("demo_id")
@click.pass_context
def report(ctx, demo_id):
    """Show conversations and Domo Scores for a demo."""
    with _open_db(ctx) as db:
        try:
            reports = build_demo_report(Repository(db), demo_id)
        except NotFoundError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    if not reports:
        console.print("[yellow]No conversations recorded yet.[/yellow]")
        return

    table = Table(title="Conversations")
    table.add_column("Conversation", style="cyan")
    table.add_column("Status")
    table.add_column("Contact")
    table.add_column("Interest")
    table.add_column("Videos", justify="right")
    table.add_column("CTA")
    table.add_column("Score", justify="right")

    for r in reports:
        contact = ""
        if r.contact:
            contact = " ".join(p for p in (r.contact.first_name, r.contact.last_name) if p)
            contact = contact or (r.contact.email or "")
        cta = ""
        if r.cta_tracking:
            cta = "clicked" if r.cta_tracking.cta_clicked_at else "shown"
        style = r.color
        table.add_row(
            r.conversation.conversation_name or r.conversation.tavus_conversation_id,
            r.conversation.status,
            contact,
            (r.product_interest.primary_interest or "") if r.product_interest else "",
            str(len(r.video_showcase.videos_shown)) if r.video_showcase else "0",
            cta,
            f"[{style}]{r.score.score}/{r.score.max_score} {r.label}[/{style}]",
        )
    console.print(table)

    summary = summarize_reports(reports)
    console.print(
        f"\nAverage score: [bold]{summary['average_score']}[/bold] / {summary['max_score']}"
    )
    console.print(f"Contacts captured: [bold]{summary['contacts_captured']}[/bold]")
    console.print(f"CTA clicks: [bold]{summary['cta_clicks']}[/bold]")


@cli.command()
@click.argument("demo_id")
@click.argument("conversation_id")
@click.pass_context
def score(ctx, demo_id, conversation_id):
    """Show the Domo Score breakdown for one conversation."""
    with _open_db(ctx) as db:
        try:
            r = score_conversation(Repository(db), demo_id, conversation_id)
        except NotFoundError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    style = r.color
    console.print(
        f"Domo Score: [{style}]{r.score.score}/{r.score.max_score}[/{style}] ({r.label})"
    )

    b = r.score.breakdown
    table = Table(title="Breakdown")
    table.add_column("Criterion", style="cyan")
    table.add_column("Met", justify="center")
    for label, met in (
        ("Contact confirmation", b.contact_confirmation),
        ("Reason for visit", b.reason_for_visit),
        ("Platform feature interest", b.platform_feature_interest),
        ("CTA execution", b.cta_execution),
        ("Perception analysis", b.perception_analysis),
    ):
        table.add_row(label, "[green]✓[/green]" if met else "[dim]-[/dim]")
    console.print(table)


@cli.command()
@click.argument("context_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--at", "at_seconds", type=float, default=None, help="Show the chapter at this timestamp (seconds)")
def chapters(context_file, at_seconds):
    """Parse chapters from a generated video context file."""
    parsed = parse_chapters_from_context(context_file.read_text(encoding="utf-8"))
    if not parsed:
        console.print("[yellow]No chapters found.[/yellow]")
        return

    current = find_chapter_at_timestamp(parsed, at_seconds) if at_seconds is not None else None

    table = Table(title="Chapters")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Title", style="bold")
    for c in parsed:
        marker = " [green]<[/green]" if c is current else ""
        table.add_row(format_time(c.start), format_time(c.end), f"{c.title}{marker}")
    console.print(table)

    if current is not None:
        console.print(f"\nAt {format_time(at_seconds)}: [bold]{current.title}[/bold]")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_context
def serve(ctx, host, port, reload):
    """Run the web service."""
    import uvicorn

    from domo.web.app import create_app

    config = ctx.obj["config"]
    console.print(f"[bold]Serving {config.site_name}[/bold] on http://{host}:{port}")
    console.print(f"  DB: {config.db_path}")
    if reload:
        # reload needs an import string; the worker rebuilds config from the environment
        os.environ["DOMO_DB_PATH"] = str(config.db_path)
        uvicorn.run("domo.web.app:create_app", host=host, port=port, reload=True, factory=True)
    else:
        uvicorn.run(create_app(config), host=host, port=port)


if __name__ == "__main__":
    cli()
