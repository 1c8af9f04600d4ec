"""Cadence CLI: inspect how the scheduler treats a card."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Annotated

import typer

from cadence.application.config import resolve_config
from cadence.application.formatting import format_due_date, format_interval
from cadence.application.scheduler import SuperMemo2Scheduler, utcnow
from cadence.domain.constants import INITIAL_EASINESS_FACTOR
from cadence.domain.scheduling.models import CardLearningState, CardStatus, ReviewRating
from cadence.infrastructure.adapters.records import card_state_to_record

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="cadence: SM-2 spaced-repetition scheduler for flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage cadence configuration.")
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

# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

StateOption = Annotated[
    str, typer.Option("--state", "-s", help="Card state: NEW, LEARNING, REVIEW, SUSPENDED.")
]
IntervalOption = Annotated[int, typer.Option("--interval", "-i", min=0, help="Interval in days.")]
RepetitionsOption = Annotated[int, typer.Option("--repetitions", "-r", min=0)]
EaseOption = Annotated[float, typer.Option("--ease", "-e", help="Easiness factor.")]
LapsesOption = Annotated[int, typer.Option("--lapses", min=0)]
DueOption = Annotated[
    str | None, typer.Option("--due", help="Due date (ISO-8601). Defaults to --now.")
]
NowOption = Annotated[
    str | None, typer.Option("--now", help="Reference time (ISO-8601). Defaults to the clock.")
]


def _parse_time(value: str | None, option: str) -> datetime | None:
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{option} is not an ISO-8601 timestamp: {value!r}") from None
    # Timestamps without an offset are taken as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_steps(value: str | None) -> tuple[int, ...] | None:
    if value is None:
        return None
    try:
        return tuple(int(part) for part in value.split(",") if part.strip())
    except ValueError:
        raise typer.BadParameter(f"expected comma-separated minutes, got {value!r}") from None


def _fail(exc: Exception) -> None:
    typer.secho(f"Error: {exc}", fg="red", err=True)
    raise typer.Exit(2)


def _build_state(state, interval, repetitions, ease, lapses, due, now) -> CardLearningState:
    return CardLearningState(
        state=CardStatus.parse(state.strip().upper()),
        due_date=_parse_time(due, "--due") or now,
        interval=interval,
        repetitions=repetitions,
        easiness_factor=ease,
        lapses=lapses,
    )


def _echo_json(data) -> None:
    typer.echo(json.dumps(data, indent=2))


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
    learning_steps: Annotated[
        str | None, typer.Option(help="Learning steps in minutes, e.g. '1,10'.")
    ] = None,
    relearning_steps: Annotated[
        str | None, typer.Option(help="Relearning steps in minutes, e.g. '10'.")
    ] = None,
):
    """Global settings for cadence."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "learning_steps": _parse_steps(learning_steps),
        "relearning_steps": _parse_steps(relearning_steps),
    }


def _scheduler(ctx: typer.Context) -> SuperMemo2Scheduler:
    overrides = (ctx.obj or {}).get("overrides", {})
    config = resolve_config(overrides)
    logger.debug(f"Resolved config: {config.model_dump()}")
    return SuperMemo2Scheduler(config)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def new(
    ctx: typer.Context,
    card_id: Annotated[str | None, typer.Option(help="Card identifier.")] = None,
    user_id: Annotated[str | None, typer.Option(help="Learner identifier.")] = None,
    now: NowOption = None,
):
    """Print the initial state of a new card."""
    try:
        scheduler = _scheduler(ctx)
        state = scheduler.schedule_new_card(
            _parse_time(now, "--now"), card_id=card_id, user_id=user_id
        )
    except ValueError as e:
        _fail(e)
    _echo_json(card_state_to_record(state))


@app.command()
def review(
    ctx: typer.Context,
    rating: Annotated[str, typer.Argument(help="AGAIN, HARD, GOOD or EASY.")],
    state: StateOption = "NEW",
    interval: IntervalOption = 0,
    repetitions: RepetitionsOption = 0,
    ease: EaseOption = INITIAL_EASINESS_FACTOR,
    lapses: LapsesOption = 0,
    due: DueOption = None,
    now: NowOption = None,
):
    """[bold green]Apply[/bold green] a rating and print the next state."""
    try:
        scheduler = _scheduler(ctx)
        ref = _parse_time(now, "--now") or utcnow()
        current = _build_state(state, interval, repetitions, ease, lapses, due, ref)
        result = scheduler.calculate_next_review(ReviewRating.parse(rating), current, ref)
    except ValueError as e:
        _fail(e)
    _echo_json(card_state_to_record(result))


@app.command()
def preview(
    ctx: typer.Context,
    state: StateOption = "NEW",
    interval: IntervalOption = 0,
    repetitions: RepetitionsOption = 0,
    ease: EaseOption = INITIAL_EASINESS_FACTOR,
    lapses: LapsesOption = 0,
    due: DueOption = None,
    now: NowOption = None,
):
    """Show the outcome of every rating."""
    try:
        scheduler = _scheduler(ctx)
        ref = _parse_time(now, "--now") or utcnow()
        current = _build_state(state, interval, repetitions, ease, lapses, due, ref)
        outcomes = scheduler.preview(current, ref)
    except ValueError as e:
        _fail(e)

    for rating, nxt in outcomes.items():
        if nxt.state == CardStatus.LEARNING:
            minutes = int((nxt.due_date - ref).total_seconds() // 60)
            when = f"{minutes}m"
        else:
            when = format_interval(nxt.interval)
        typer.echo(
            f"{rating.value:<6} {nxt.state.value:<9} {when:<10} "
            f"ease={nxt.easiness_factor:.2f}"
        )


@app.command()
def describe(
    ctx: typer.Context,
    state: StateOption = "NEW",
    interval: IntervalOption = 0,
    repetitions: RepetitionsOption = 0,
    ease: EaseOption = INITIAL_EASINESS_FACTOR,
    lapses: LapsesOption = 0,
    due: DueOption = None,
    now: NowOption = None,
):
    """Describe a card's state and when it is due."""
    try:
        scheduler = _scheduler(ctx)
        ref = _parse_time(now, "--now") or utcnow()
        current = _build_state(state, interval, repetitions, ease, lapses, due, ref)
        label = format_due_date(current.due_date, ref)
        _echo_json(
            {
                "description": scheduler.describe(current, ref),
                "is_due": scheduler.is_due(current, ref),
                "days_until_due": scheduler.days_until_due(current, ref),
                "due": label.text,
            }
        )
    except ValueError as e:
        _fail(e)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    try:
        config = resolve_config((ctx.obj or {}).get("overrides"))
    except ValueError as e:
        _fail(e)
    _echo_json(config.model_dump(mode="json"))
