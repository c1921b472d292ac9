"""runedeck CLI — study, queue inspection, stats and configuration commands."""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer

from runedeck.application.config import AppConfig, resolve_config
from runedeck.application.queue_builder import StudyQueueBuilder
from runedeck.application.review_service import ReviewService
from runedeck.application.scheduler import mode_of, preview_intervals
from runedeck.application.session import StudySession
from runedeck.application.stats import summarize_stages
from runedeck.domain.exceptions import InvalidGradeError, RunedeckError
from runedeck.domain.models import SchedulingState, StudyItem, StudyScope
from runedeck.infrastructure.adapters.json_store import JsonDeckRepository

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="runedeck: spaced-repetition vocabulary study.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage runedeck configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

DeckFileArg = Annotated[
    Path | None,
    typer.Argument(help="Path to a JSON deck file. Defaults to 'deck_file' in config."),
]
DeckOption = Annotated[
    list[str] | None,
    typer.Option("--deck", "-d", help="Limit to a deck ID. Repeat for several decks."),
]


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for runedeck."""
    if verbose >= 2:
        logging.getLogger("runedeck").setLevel(logging.DEBUG)


def humanize_error(error: Exception) -> str:
    """Turn a runedeck error into a one-line message for the terminal."""
    if isinstance(error, RunedeckError):
        cause = error.__cause__
        if cause is not None and not isinstance(error, InvalidGradeError):
            return f"{error} ({type(cause).__name__})"
        return str(error)
    return f"Unexpected error: {error}"


def _open_repository(config: AppConfig, deck_file: Path | None) -> JsonDeckRepository:
    path = deck_file or config.deck_file
    if path is None:
        typer.secho(
            "No deck file given. Pass a path or set 'deck_file' in config.",
            fg="red",
        )
        raise typer.Exit(2)
    try:
        return JsonDeckRepository(path)
    except RunedeckError as e:
        typer.secho(humanize_error(e), fg="red")
        raise typer.Exit(1) from e


def _scope(decks: list[str] | None) -> StudyScope:
    return StudyScope.decks(*decks) if decks else StudyScope.all()


def _format_days(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def _item_summary(item: StudyItem, leech_threshold: int) -> dict:
    s = item.scheduling
    return {
        "card_id": item.card.id,
        "headword": item.card.headword,
        "deck_id": item.card.deck_id,
        "stage": mode_of(s, leech_threshold).value,
        "interval_days": s.interval_days,
        "ease": round(s.ease, 2),
        "lapses": s.lapses,
        "is_new": s.is_new,
        "due_at": s.due_at,
    }


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def preview(
    interval: Annotated[int, typer.Option(help="Current interval in days.")] = 0,
    ease: Annotated[float, typer.Option(help="Current ease factor.")] = 2.5,
    new: Annotated[bool, typer.Option("--new/--mature", help="Treat the card as new.")] = True,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the interval each grade would give a card."""
    config = resolve_config()
    state = SchedulingState(
        card_id="preview", due_at=0, interval_days=interval, ease=ease, is_new=new
    )
    intervals = preview_intervals(state, config.scheduler_config())

    if json_output:
        typer.echo(json.dumps({g.name.lower(): days for g, days in intervals.items()}, indent=2))
        return

    for grade, days in intervals.items():
        typer.echo(f"{grade.value} {grade.name.title():<6} {_format_days(days)}")


@app.command()
def queue(
    deck_file: DeckFileArg = None,
    deck: DeckOption = None,
    due_limit: Annotated[int | None, typer.Option(help="Maximum due cards.")] = None,
    new_per_day: Annotated[int | None, typer.Option(help="Maximum new cards.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Build today's study queue and list it."""
    config = resolve_config({"due_limit": due_limit, "new_per_day": new_per_day})
    repo = _open_repository(config, deck_file)
    builder = StudyQueueBuilder(repo, config.queue_config())

    try:
        result = asyncio.run(builder.build(_scope(deck)))
    except RunedeckError as e:
        typer.secho(humanize_error(e), fg="red")
        raise typer.Exit(1) from e

    threshold = config.leech_threshold
    if json_output:
        typer.echo(
            json.dumps(
                {
                    "cards": [_item_summary(i, threshold) for i in result.cards],
                    "leeches": [_item_summary(i, threshold) for i in result.leeches],
                    "due": result.due_count,
                    "new": result.new_count,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Due: {result.due_count}  New: {result.new_count}  Leeches: {len(result.leeches)}")
    for item in result.cards:
        tag = "new" if item.scheduling.is_new else "due"
        typer.echo(f"  [{tag}] {item.card.headword}")
    if result.leeches:
        typer.secho("Clinic:", fg="yellow")
        for item in result.leeches:
            typer.echo(f"  {item.card.headword}  ({item.scheduling.lapses} lapses)")


@app.command()
def stats(
    deck_file: DeckFileArg = None,
    deck: DeckOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Count cards per learning stage."""
    config = resolve_config()
    repo = _open_repository(config, deck_file)
    items = asyncio.run(repo.list_items(_scope(deck)))
    summary = summarize_stages(items, config.leech_threshold)

    if json_output:
        typer.echo(json.dumps(asdict(summary), indent=2))
        return

    typer.echo(f"Total: {summary.total}")
    typer.echo(f"New: {summary.new}")
    typer.echo(f"Learning: {summary.learning}")
    typer.echo(f"Retention: {summary.retention}")
    if summary.clinic:
        typer.secho(f"Clinic: {summary.clinic}", fg="yellow")
    else:
        typer.secho("Clinic: 0", fg="green")


@app.command()
def study(
    deck_file: DeckFileArg = None,
    deck: DeckOption = None,
):
    """[bold green]Study[/bold green] today's queue interactively."""
    config = resolve_config()
    repo = _open_repository(config, deck_file)
    builder = StudyQueueBuilder(repo, config.queue_config())
    reviewer = ReviewService(repo, config.scheduler_config())

    async def run():
        result = await builder.build(_scope(deck))
        if result.is_empty:
            typer.secho("Nothing to study right now.", fg="green")
            return

        session = StudySession.begin(result.cards)
        while not session.is_complete():
            item = session.current()
            progress = session.progress()
            typer.echo(f"\n[{progress.current}/{progress.total}] {item.card.headword}")
            typer.prompt("Press Enter to reveal", default="", show_default=False)
            session.reveal()

            typer.echo(f"  {item.card.definition}")
            if item.card.example:
                typer.echo(f"  e.g. {item.card.example}")
            intervals = preview_intervals(item.scheduling, config.scheduler_config())
            typer.echo(
                "  "
                + "  ".join(
                    f"{g.value}:{g.name.title()} ({_format_days(d)})" for g, d in intervals.items()
                )
            )

            while True:
                answer = typer.prompt("Grade (1-4, q to quit)")
                if answer.strip().lower() == "q":
                    typer.echo("Session ended early.")
                    return
                try:
                    outcome = await reviewer.grade(session, answer)
                    break
                except InvalidGradeError as e:
                    typer.secho(str(e), fg="red")

            typer.echo(f"  Next review in {_format_days(outcome.updated.interval_days)}")

        typer.secho(f"\nDone: {session.progress().total} cards reviewed.", fg="green")

    try:
        asyncio.run(run())
    except RunedeckError as e:
        typer.secho(humanize_error(e), fg="red")
        raise typer.Exit(1) from e


@config_app.command("show")
def config_show():
    """Print the resolved configuration as JSON."""
    config = resolve_config()
    d = config.model_dump(mode="json")
    typer.echo(json.dumps(d, indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
