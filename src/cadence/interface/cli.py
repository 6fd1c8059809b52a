"""cadence CLI: preview, simulate and config commands."""

import json
import logging
import random
import sys
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, NoReturn

import typer
from pydantic import TypeAdapter

from cadence.application.config import build_scheduler, resolve_config
from cadence.application.scheduler import Scheduler
from cadence.consts import VERSION
from cadence.domain.errors import SchedulerError
from cadence.domain.models import Card, Rating, ReviewLog, State

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="cadence: FSRS review scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage cadence configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}

_RATING_NAMES = {rating.name.lower(): rating for rating in Rating}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_rating(value: str) -> Rating:
    """Accept 1-4 or again/hard/good/easy (any case)."""
    key = value.strip().lower()
    if key in _RATING_NAMES:
        return _RATING_NAMES[key]
    if key.isdigit() and 1 <= int(key) <= 4:
        return Rating(int(key))
    raise typer.BadParameter(f"Unknown rating {value!r}; use 1-4 or again/hard/good/easy.")


def humanize(delta: timedelta) -> str:
    seconds = delta.total_seconds()
    if seconds < 3600:
        return f"{round(seconds / 60)}m"
    if seconds < 86400:
        return f"{round(seconds / 3600)}h"
    return f"{round(seconds / 86400)}d"


def _scheduler_from_options(**overrides: Any) -> Scheduler:
    config = resolve_config(overrides)
    return build_scheduler(config)


def _fail(e: Exception) -> NoReturn:
    typer.secho(f"Error: {e}", fg="red", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for cadence."""
    logging.getLogger().setLevel(_LOG_LEVELS.get(verbose, logging.DEBUG))


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def version():
    """Print the installed version."""
    typer.echo(VERSION)


@app.command()
def preview(
    state: Annotated[
        str, typer.Option(help="Card state: new, learning, review or relearning.")
    ] = "new",
    stability: Annotated[float | None, typer.Option(help="Current stability (days).")] = None,
    difficulty: Annotated[float | None, typer.Option(help="Current difficulty (1-10).")] = None,
    elapsed: Annotated[int, typer.Option(help="Days since the last review.")] = 0,
    step: Annotated[int | None, typer.Option(help="Current (re)learning step.")] = None,
    retention: Annotated[
        float | None, typer.Option(help="Desired retention override.")
    ] = None,
    max_interval: Annotated[
        int | None, typer.Option(help="Maximum interval override (days).")
    ] = None,
    fuzz: Annotated[
        bool | None, typer.Option("--fuzz/--no-fuzz", help="Enable interval fuzz.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Preview[/bold green] the outcome of every rating for a card."""
    try:
        card_state = State[state.upper()]
    except KeyError:
        raise typer.BadParameter(f"Unknown state {state!r}.") from None

    now = datetime.now(timezone.utc)
    if card_state is State.NEW:
        card = Card(due=now)
    else:
        card = Card(
            state=card_state,
            step=step if card_state in (State.LEARNING, State.RELEARNING) else None,
            due=now,
            stability=stability,
            difficulty=difficulty,
            reps=1,
            last_review=now - timedelta(days=elapsed),
        )

    try:
        scheduler = _scheduler_from_options(
            request_retention=retention, maximum_interval=max_interval, enable_fuzz=fuzz
        )
        outcomes = scheduler.preview_all(card, now)
    except SchedulerError as e:
        _fail(e)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    rating.name.lower(): {
                        "state": info.card.state.name.lower(),
                        "interval": humanize(info.interval),
                        "scheduled_days": info.scheduled_days,
                        "stability": info.card.stability,
                        "difficulty": info.card.difficulty,
                    }
                    for rating, info in outcomes.items()
                },
                indent=2,
            )
        )
        return

    typer.echo(f"{'Rating':<8}{'State':<12}{'Next':>8}{'Stability':>12}{'Difficulty':>12}")
    for rating, info in outcomes.items():
        typer.echo(
            f"{rating.name.title():<8}{info.card.state.name.title():<12}"
            f"{humanize(info.interval):>8}{info.card.stability:>12.2f}{info.card.difficulty:>12.2f}"
        )


@app.command()
def simulate(
    ratings: Annotated[
        list[str], typer.Argument(help="Ratings in order: 1-4 or again/hard/good/easy.")
    ],
    seed: Annotated[int | None, typer.Option(help="Seed for reproducible fuzz.")] = None,
    fuzz: Annotated[
        bool | None, typer.Option("--fuzz/--no-fuzz", help="Enable interval fuzz.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Replay a rating sequence on a new card, each review exactly when due."""
    parsed = [parse_rating(r) for r in ratings]

    try:
        scheduler = _scheduler_from_options(seed=seed, enable_fuzz=fuzz)
    except SchedulerError as e:
        _fail(e)

    # Review times come from the wall clock; fuzz draws from one seeded stream.
    rng = random.Random(scheduler.seed) if scheduler.seed is not None else None
    card = Card(card_id=1, due=datetime.now(timezone.utc))
    logs: list[ReviewLog] = []
    for rating in parsed:
        card, log = scheduler.schedule(card, rating, card.due, rng=rng)
        logs.append(log)

    if json_output:
        payload = TypeAdapter(list[ReviewLog]).dump_python(logs, mode="json")
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"{'#':<4}{'Rating':<8}{'From':<12}{'Elapsed':>8}{'Next':>8}{'S':>10}{'D':>8}")
    for i, log in enumerate(logs, start=1):
        typer.echo(
            f"{i:<4}{log.rating.name.title():<8}{log.state.name.title():<12}"
            f"{log.elapsed_days:>7}d{log.scheduled_days:>7}d"
            f"{log.stability:>10.2f}{log.difficulty:>8.2f}"
        )
    typer.echo(
        f"\nFinal: {card.state.name.title()}, due {card.due.isoformat()}, lapses {card.lapses}"
    )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    try:
        config = resolve_config()
    except SchedulerError as e:
        _fail(e)
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))


@config_app.command("check")
def config_check():
    """Validate the configured parameter set."""
    try:
        scheduler = build_scheduler(resolve_config())
    except SchedulerError as e:
        _fail(e)
    params = scheduler.parameters
    typer.secho(
        f"OK: model {params.version}, retention {params.request_retention}, "
        f"max interval {params.maximum_interval}d",
        fg="green",
    )


def main():
    app()
