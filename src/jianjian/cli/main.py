"""CLI entry point for jianjian.

Invoked as::

    jianjian [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m jianjian.cli.main

Commands
--------
write          Send a letter in one go (ink cap applies, no throttle)
compose        Write a letter interactively under the typing throttle
list           List letters, optionally filtered by status
show           Show one letter
open           Open a letter that has arrived
home           Show or set the "at home" flag
ink            Show this week's remaining ink
notifications  List pending unlock reminders
export         Dump a letter as JSON or YAML
handle-url     Handle a jian://save?id=<id> link
discard        Delete a letter
version        Show version information
"""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlparse

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from jianjian.delivery.policy import Route
    from jianjian.letters.letter import Letter
    from jianjian.service.lifecycle import LifecycleService

console = Console()
err_console = Console(stderr=True)

URL_SCHEME = "jian"

_STATUS_CHOICES = {
    "in-transit": "IN_TRANSIT",
    "ready": "READY",
    "opened": "OPENED",
}


def _get_service(ctx: click.Context) -> "LifecycleService":
    """Build the service once per invocation, exiting on bad configuration."""
    from jianjian.config import load_config
    from jianjian.errors import ConfigError
    from jianjian.logging_setup import configure_logging
    from jianjian.service.lifecycle import LifecycleService

    if "service" in ctx.obj:
        return ctx.obj["service"]
    try:
        config = load_config(ctx.obj.get("config_path"))
        configure_logging(config.log_level, console=err_console)
        service = LifecycleService.from_config(config)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)
    ctx.obj["service"] = service
    return service


def _require_letter(service: "LifecycleService", letter_id: str) -> "Letter":
    from jianjian.errors import LetterNotFoundError

    try:
        return service.require(letter_id)
    except LetterNotFoundError as exc:
        err_console.print(f"[red]Error:[/red] No letter with id {exc.letter_id}")
        sys.exit(1)


def _status_line(service: "LifecycleService", letter: "Letter") -> tuple[str, str]:
    """Return (label, detail) for a letter's current state."""
    from jianjian.letters.letter import Status, raw_status
    from jianjian.timing.calendar import format_remaining

    now = service.clock.now()
    current = raw_status(letter, now)
    if current is Status.OPENED:
        return "[dim]opened[/dim]", f"opened {letter.opened_at:%Y-%m-%d %H:%M}"
    if current is Status.IN_TRANSIT:
        return "[yellow]in transit[/yellow]", f"unlocks in {format_remaining(letter.unlock_at, now)}"
    if letter.requires_home_gate and not service.home_flag():
        return "[blue]arrived[/blue]", "can be opened once you are home"
    return "[green]ready[/green]", "can be opened now"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="jianjian")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.yaml (default: $JIANJIAN_CONFIG or ~/.jianjian/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """Slow letters: write now, open when they arrive."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from jianjian import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]jianjian[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# write / compose commands
# ---------------------------------------------------------------------------


_route_option = click.option(
    "--route",
    "-r",
    type=click.Choice(["local1d", "province3d", "nation7d"], case_sensitive=False),
    default="local1d",
    show_default=True,
    help="Delivery route (1, 3 or 7 days)",
)


def _report_sent(letter: "Letter", route: "Route") -> None:
    console.print(
        f"[green]Sent[/green] {letter.id} via {route.display_name} "
        f"[dim]({letter.ink_used} ink, unlocks {letter.unlock_at:%Y-%m-%d %H:%M})[/dim]"
    )


@cli.command(name="write")
@click.argument("text")
@_route_option
@click.pass_context
def write_command(ctx: click.Context, text: str, route: str) -> None:
    """Send TEXT as a letter.

    The weekly ink limit applies; the typing throttle does not.
    """
    from jianjian.delivery.policy import Route
    from jianjian.errors import LetterStoreError

    service = _get_service(ctx)
    if not text.strip():
        err_console.print("[red]Error:[/red] The letter is empty.")
        sys.exit(1)
    remaining = service.remaining_ink()
    if len(text) > remaining:
        err_console.print(
            f"[red]Error:[/red] Not enough ink: the letter needs {len(text)}, "
            f"{remaining} left this week."
        )
        sys.exit(1)
    try:
        letter = service.submit(text, Route.parse(route))
    except LetterStoreError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    if letter is not None:
        _report_sent(letter, Route.parse(route))


@cli.command(name="compose")
@_route_option
@click.option("--reply-to", default=None, help="Start with a quote from an opened letter")
@click.pass_context
def compose_command(ctx: click.Context, route: str, reply_to: str | None) -> None:
    """Write a letter line by line at a calm pace.

    Each line is offered to the typing throttle; anything typed faster than
    the allowed rate is held back.  Finish with an empty line, or press
    Ctrl-D to discard the draft.
    """
    from jianjian.delivery.policy import Route
    from jianjian.errors import LetterStoreError

    service = _get_service(ctx)
    prefill = ""
    if reply_to is not None:
        prefill = service.reply_prefill(reply_to) or ""
        if not prefill:
            err_console.print(f"[yellow]Warning:[/yellow] {reply_to} is not an opened letter; starting blank.")

    session = service.begin_compose(prefill)
    rate = service.limiter.rate_per_second
    console.print(
        f"[bold]Ink left:[/bold] {service.remaining_ink()}  "
        f"[dim](throttle {rate:g} chars/s; empty line to send)[/dim]"
    )
    if prefill:
        console.print(Panel(prefill.strip("\n"), title="Replying"))

    while True:
        try:
            line = click.prompt("", default="", show_default=False, prompt_suffix="> ")
        except click.Abort:
            session.cancel()
            err_console.print("\n[yellow]Draft discarded.[/yellow]")
            sys.exit(1)
        if not line:
            break
        separator = "\n" if session.committed_text else ""
        result = session.append(separator + line)
        if result.was_throttled:
            console.print(
                f"[dim]Writing slowly... kept {len(result.committed_text)} chars so far "
                f"(limit {rate:g} chars/s)[/dim]"
            )

    try:
        letter = session.submit(Route.parse(route))
    except LetterStoreError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    if letter is None:
        err_console.print("[yellow]Nothing written; no letter sent.[/yellow]")
        sys.exit(1)
    _report_sent(letter, Route.parse(route))


# ---------------------------------------------------------------------------
# list / show / open commands
# ---------------------------------------------------------------------------


@cli.command(name="list")
@click.option(
    "--status",
    "status_name",
    type=click.Choice(sorted(_STATUS_CHOICES), case_sensitive=False),
    default=None,
    help="Only show letters in this state",
)
@click.pass_context
def list_command(ctx: click.Context, status_name: str | None) -> None:
    """List letters, newest first."""
    from jianjian.letters.letter import Status

    service = _get_service(ctx)
    status_filter = Status[_STATUS_CHOICES[status_name.lower()]] if status_name else None
    letters = service.letters(status_filter)

    if not letters:
        console.print("[dim]No letters yet. Try `jianjian compose`.[/dim]")
        return

    table = Table(title="Letters", show_lines=False)
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Preview")
    table.add_column("Status", min_width=10)
    table.add_column("Detail")
    for letter in letters:
        label, detail = _status_line(service, letter)
        table.add_row(letter.id, letter.preview(), label, detail)
    console.print(table)


@cli.command(name="show")
@click.argument("letter_id")
@click.pass_context
def show_command(ctx: click.Context, letter_id: str) -> None:
    """Show one letter.  The text is only visible once opened."""
    service = _get_service(ctx)
    letter = _require_letter(service, letter_id)
    label, detail = _status_line(service, letter)
    console.print(f"{letter.id}  {label}  [dim]{detail}[/dim]")
    if letter.is_opened:
        console.print(Panel(letter.content, title="Letter"))


@cli.command(name="open")
@click.argument("letter_id")
@click.pass_context
def open_command(ctx: click.Context, letter_id: str) -> None:
    """Open a letter that has arrived."""
    service = _get_service(ctx)
    letter = _require_letter(service, letter_id)
    opened = service.open(letter_id)
    if opened is None:
        _, detail = _status_line(service, letter)
        if letter.is_opened:
            detail = "already opened"
        err_console.print(f"[yellow]Not yet:[/yellow] {detail}")
        sys.exit(1)
    console.print(Panel(opened.content, title="Letter"))


# ---------------------------------------------------------------------------
# home / ink / notifications commands
# ---------------------------------------------------------------------------


@cli.command(name="home")
@click.argument("state", required=False, type=click.Choice(["on", "off"], case_sensitive=False))
@click.pass_context
def home_command(ctx: click.Context, state: str | None) -> None:
    """Show or set the "at home" flag (STATE is on or off)."""
    service = _get_service(ctx)
    if state is not None:
        service.set_home_flag(state.lower() == "on")
    value = service.home_flag()
    console.print(f"At home: {'[green]on[/green]' if value else '[yellow]off[/yellow]'}")


@cli.command(name="ink")
@click.pass_context
def ink_command(ctx: click.Context) -> None:
    """Show this week's ink."""
    service = _get_service(ctx)
    limit = service.weekly_ink_limit
    remaining = service.remaining_ink()
    console.print(f"[bold]Ink:[/bold] {remaining}/{limit} left this week")
    console.print(f"[dim]Resets {service.week_start():%Y-%m-%d %H:%M} + 7 days[/dim]")


@cli.command(name="notifications")
@click.pass_context
def notifications_command(ctx: click.Context) -> None:
    """List pending unlock reminders."""
    from jianjian.notify.scheduler import InMemoryScheduler

    service = _get_service(ctx)
    if not isinstance(service.scheduler, InMemoryScheduler):
        console.print("[dim]This scheduler does not expose pending reminders.[/dim]")
        return
    pending = service.scheduler.pending()
    if not pending:
        console.print("[dim]No pending reminders.[/dim]")
        return
    now = service.clock.now()
    table = Table(title="Pending reminders")
    table.add_column("Letter", style="bold", no_wrap=True)
    table.add_column("Fires at")
    table.add_column("Due")
    for notice in pending:
        due = "[green]yes[/green]" if notice.fire_at <= now else "no"
        table.add_row(notice.letter_id, f"{notice.fire_at:%Y-%m-%d %H:%M}", due)
    console.print(table)


# ---------------------------------------------------------------------------
# export / handle-url / discard commands
# ---------------------------------------------------------------------------


@cli.command(name="export")
@click.argument("letter_id")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Output format",
)
@click.pass_context
def export_command(ctx: click.Context, letter_id: str, output_format: str) -> None:
    """Dump a letter's stored record."""
    from jianjian.letters.serializer import LetterSerializer

    service = _get_service(ctx)
    letter = _require_letter(service, letter_id)
    serializer = LetterSerializer()
    if output_format.lower() == "json":
        text, lang = serializer.to_json(letter), "json"
    else:
        text, lang = serializer.to_yaml(letter), "yaml"
    console.print(Syntax(text, lang))


def parse_save_url(url: str) -> str | None:
    """Return the letter id from ``jian://save?id=<id>``, or ``None``."""
    parsed = urlparse(url)
    if parsed.scheme.lower() != URL_SCHEME or parsed.netloc.lower() != "save":
        return None
    ids = parse_qs(parsed.query).get("id")
    return ids[0] if ids else None


@cli.command(name="handle-url")
@click.argument("url")
@click.pass_context
def handle_url_command(ctx: click.Context, url: str) -> None:
    """Pick up a letter saved by another app via a jian://save?id=<id> link."""
    letter_id = parse_save_url(url)
    if letter_id is None:
        err_console.print(f"[red]Error:[/red] Not a {URL_SCHEME}://save link: {url}")
        sys.exit(1)
    service = _get_service(ctx)
    _require_letter(service, letter_id)
    if service.resync(letter_id):
        console.print(f"[green]Reminder scheduled[/green] for {letter_id}")
    else:
        console.print(f"{letter_id}: no reminder needed")


@cli.command(name="discard")
@click.argument("letter_id")
@click.confirmation_option(prompt="Discard this letter for good?")
@click.pass_context
def discard_command(ctx: click.Context, letter_id: str) -> None:
    """Delete a letter and its pending reminder."""
    service = _get_service(ctx)
    _require_letter(service, letter_id)
    service.discard(letter_id)
    console.print(f"[green]Discarded[/green] {letter_id}")


if __name__ == "__main__":
    cli()
