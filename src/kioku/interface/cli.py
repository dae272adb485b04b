"""kioku CLI — add, review and inspect spaced-repetition items."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from kioku.application.config import AppConfig, resolve_config
from kioku.application.factory import get_store
from kioku.application.review_service import ReviewService
from kioku.domain.review.models import Grade
from kioku.domain.review.ports import ItemNotFoundError, StoreError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="kioku: spaced-repetition review for vocabulary and kanji.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage kioku configuration.")
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

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _configure_verbosity(verbose: int) -> None:
    logging.getLogger("kioku").setLevel(_LEVELS.get(verbose, logging.DEBUG))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> AppConfig:
    obj = ctx.obj or {}
    return resolve_config({"store_path": obj.get("store_path")})


def _service(ctx: typer.Context) -> ReviewService:
    return ReviewService(get_store(_config(ctx)))


def _fail(message: str, code: int = 1) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=code)


def _format_due(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M")


def _parse_grade(value: str) -> Grade:
    try:
        return Grade.coerce(value)
    except ValueError:
        names = ", ".join(g.name.lower() for g in Grade)
        raise typer.BadParameter(f"{value!r} is not a grade ({names} or 0-3)") from None


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    store: Annotated[
        Path | None,
        typer.Option("--store", help="Deck file. Defaults to 'store_path' in config."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for kioku."""
    ctx.ensure_object(dict)
    ctx.obj["store_path"] = store
    ctx.obj["verbose"] = max(verbose, resolve_config({"store_path": store}).verbose)
    _configure_verbosity(ctx.obj["verbose"])


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    item_ids: Annotated[list[str], typer.Argument(help="Word or kanji ids to track.")],
):
    """[bold green]Add[/bold green] items to the deck. Existing ids are left alone."""
    service = _service(ctx)
    try:
        for item_id in item_ids:
            item = service.add_item(item_id)
            typer.echo(f"{item.id}: due {_format_due(item.due_date)}")
    except ValueError as e:
        _fail(str(e), code=2)
    except StoreError as e:
        _fail(str(e))


@app.command()
def remove(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Id to stop tracking.")],
):
    """Remove an item from the deck."""
    try:
        removed = _service(ctx).remove_item(item_id)
    except StoreError as e:
        _fail(str(e))
    if not removed:
        _fail(f"Unknown item: {item_id}")
    typer.echo(f"Removed {item_id}")


@app.command()
def due(
    ctx: typer.Context,
    limit: Annotated[
        int | None,
        typer.Option(min=1, help="Maximum items to list. Defaults to 'queue_limit'."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print items as JSON.")] = False,
):
    """List items due for review, earliest first."""
    config = _config(ctx)
    service = ReviewService(get_store(config))
    try:
        items = service.due_queue(limit=limit if limit is not None else config.queue_limit)
    except StoreError as e:
        _fail(str(e))

    if as_json:
        typer.echo(json.dumps([asdict(item) for item in items], indent=2))
        return

    if not items:
        typer.echo("Nothing due.")
        return
    for item in items:
        typer.echo(f"{item.id}\t{_format_due(item.due_date)}\treps={item.repetitions}")


@app.command()
def review(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Id of the item that was reviewed.")],
    grade: Annotated[str, typer.Argument(help="again, hard, good, easy (or 0-3).")],
):
    """Grade a review and reschedule the item."""
    parsed = _parse_grade(grade)
    try:
        item = _service(ctx).grade_item(item_id, parsed)
    except ItemNotFoundError:
        _fail(f"Unknown item: {item_id}")
    except StoreError as e:
        _fail(str(e))

    typer.echo(
        f"{item.id}: {parsed.name.lower()} -> next in {item.interval}d "
        f"({_format_due(item.due_date)}), ease {item.easiness_factor:.2f}"
    )


@app.command()
def stats(ctx: typer.Context):
    """Print aggregate statistics for the deck as JSON."""
    try:
        result = _service(ctx).stats()
    except StoreError as e:
        _fail(str(e))
    typer.echo(json.dumps(asdict(result), indent=2))


@app.command()
def progress(ctx: typer.Context):
    """Print study streak and accuracy as JSON."""
    try:
        result = _service(ctx).progress()
    except StoreError as e:
        _fail(str(e))
    typer.echo(json.dumps(asdict(result), indent=2))


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Print the resolved configuration as JSON."""
    config = _config(ctx)
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))
