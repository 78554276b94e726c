"""Command line entry point: manage lists and run practice sessions."""

from __future__ import annotations

import asyncio
import logging
import random
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from lexicard import __version__
from lexicard.application_services.practice.item_sources import (
    AllListsSource,
    ItemSource,
    SingleListSource,
)
from lexicard.application_services.practice.session_controller import (
    SessionController,
    SessionStatus,
    utc_now,
)
from lexicard.core.settings import Settings, get_settings
from lexicard.domain.learning.events.review_events import ReviewPersistenceFailedEvent
from lexicard.domain.learning.services.delete_word import DeleteWord, DeleteWordRequest
from lexicard.domain.learning.services.estimate_review_time import format_duration
from lexicard.domain.learning.services.select_due import count_due, flatten_lists
from lexicard.domain.shared.models import DifficultyLevel, Direction
from lexicard.domain.shared.services import DomainServiceError
from lexicard.infrastructure.database.database import DatabaseManager, SqlVocabRepository
from lexicard.infrastructure.messaging.event_bus import EventBus

console = Console()
logger = logging.getLogger(__name__)

DIFFICULTY_KEYS: dict[str, DifficultyLevel] = {
    "1": DifficultyLevel.HARD,
    "2": DifficultyLevel.OK,
    "3": DifficultyLevel.GOOD,
    "4": DifficultyLevel.PERFECT,
}


@dataclass
class AppContext:
    settings: Settings
    repository: SqlVocabRepository


def setup_logging(settings: Settings, verbose: bool = False) -> None:
    """Log to the terminal through rich and, if configured, to a file."""
    handlers: list[logging.Handler] = [RichHandler(rich_tracebacks=True, console=Console(stderr=True))]
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
    )


@click.group()
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="SQLite database file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__, prog_name="lexicard")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None, verbose: bool) -> None:
    """Lexicard - spaced-repetition vocabulary trainer."""
    settings = get_settings()
    setup_logging(settings, verbose)
    db_manager = DatabaseManager(db_path or settings.database_path)
    ctx.obj = AppContext(settings=settings, repository=SqlVocabRepository(db_manager))


@cli.command("add-list")
@click.argument("name")
@click.option("--language", help="Language code of the list, e.g. 'de'")
@click.pass_obj
def add_list(app: AppContext, name: str, language: str | None) -> None:
    """Create a vocabulary list."""
    vocab_list = app.repository.add_list(name, language)
    console.print(f"[green]Created list[/green] {vocab_list.name} [dim]({vocab_list.id})[/dim]")


@cli.command("add-word")
@click.argument("list_id")
@click.argument("term")
@click.argument("translation")
@click.option("--notes", help="Free-form notes shown with the answer")
@click.pass_obj
def add_word(
    app: AppContext, list_id: str, term: str, translation: str, notes: str | None
) -> None:
    """Add a word to a list."""
    try:
        word = app.repository.add_word(list_id, term, translation, notes)
    except DomainServiceError as e:
        raise click.ClickException(str(e)) from e
    console.print(f"[green]Added[/green] {word.term} = {word.translation} [dim]({word.id})[/dim]")


@cli.command("delete-word")
@click.argument("word_id")
@click.pass_obj
def delete_word(app: AppContext, word_id: str) -> None:
    """Delete a word and its review history."""
    service = DeleteWord(app.repository, EventBus())
    result = asyncio.run(service.call(DeleteWordRequest(word_id=word_id)))
    if not result.deleted:
        raise click.ClickException(f"Word {word_id} not found")
    console.print(f"[green]Deleted word[/green] {word_id}")


@cli.command("lists")
@click.pass_obj
def show_lists(app: AppContext) -> None:
    """Show all lists with the number of due words per direction."""
    lists = asyncio.run(app.repository.get_lists())
    if not lists:
        console.print("[yellow]No lists yet. Create one with 'lexicard add-list'.[/yellow]")
        return

    now = utc_now()
    table = Table(title="Vocabulary lists")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Words", justify="right")
    for direction in Direction:
        table.add_column(f"Due {direction.label}", justify="right")

    for vocab_list in lists:
        counts = count_due(flatten_lists([vocab_list]), now)
        table.add_row(
            vocab_list.id,
            vocab_list.name,
            str(len(vocab_list.words)),
            *(str(counts[direction]) for direction in Direction),
        )
    console.print(table)


@cli.command("due")
@click.option("--list", "list_id", help="Only count words of this list")
@click.pass_obj
def show_due(app: AppContext, list_id: str | None) -> None:
    """Show how many words are due in each direction."""
    source = _item_source(app, list_id)
    try:
        items = asyncio.run(source.load_items())
    except DomainServiceError as e:
        raise click.ClickException(str(e)) from e

    counts = count_due(items, utc_now())
    for direction in Direction:
        console.print(f"{direction.label}: [bold]{counts[direction]}[/bold] due")


@cli.command("practice")
@click.option("--list", "list_id", help="Practice one list instead of all lists")
@click.option(
    "--direction",
    type=click.Choice([direction.value for direction in Direction]),
    help="Quiz direction (defaults to LEXICARD_DEFAULT_DIRECTION)",
)
@click.pass_obj
def practice(app: AppContext, list_id: str | None, direction: str | None) -> None:
    """Practice the words that are due."""
    start_direction = Direction(direction) if direction else app.settings.default_direction
    try:
        asyncio.run(_run_practice(app, _item_source(app, list_id), start_direction))
    except KeyboardInterrupt:
        console.print("\n[yellow]Practice interrupted. Goodbye![/yellow]")
        sys.exit(0)
    except DomainServiceError as e:
        raise click.ClickException(str(e)) from e


def _item_source(app: AppContext, list_id: str | None) -> ItemSource:
    if list_id:
        return SingleListSource(app.repository, list_id)
    return AllListsSource(app.repository)


async def _run_practice(app: AppContext, source: ItemSource, direction: Direction) -> None:
    event_bus = EventBus()
    event_bus.subscribe(
        ReviewPersistenceFailedEvent,
        lambda event: console.print(
            f"[yellow]Could not save progress for this word: {event.error_message}[/yellow]"
        ),
    )
    seed = app.settings.shuffle_seed
    controller = SessionController(
        source,
        app.repository,
        event_bus=event_bus,
        rng=random.Random(seed) if seed is not None else None,
    )
    delete_service = DeleteWord(app.repository, event_bus)

    try:
        await controller.start(direction)
        while True:
            if controller.status is SessionStatus.COMPLETE:
                _print_summary(controller)
                choice = click.prompt(
                    "[r]estart, switch [d]irection or [q]uit",
                    type=click.Choice(["r", "d", "q"]),
                    default="q",
                    show_choices=False,
                )
                if choice == "q":
                    break
                if choice == "r":
                    await controller.restart()
                else:
                    await controller.change_direction(controller.direction.opposite)
                continue

            if not await _practice_card(controller, delete_service):
                break
    finally:
        await controller.flush()
        controller.close()


async def _practice_card(controller: SessionController, delete_service: DeleteWord) -> bool:
    """Show one card. Returns False when the learner quits."""
    item = controller.current_item
    if item is None:
        raise click.ClickException("No card to practice")
    progress = controller.progress()
    question, answer = item.word.prompt(controller.direction)

    console.print(
        f"\n[dim]{progress.current_number}/{progress.total_items} · "
        f"{controller.direction.label} · {item.list_name}[/dim]"
    )
    console.print(f"[bold cyan]{question}[/bold cyan]")
    click.prompt("Press Enter to reveal", default="", show_default=False)
    console.print(f"[bold green]{answer}[/bold green]")
    if item.word.notes:
        console.print(f"[dim]{item.word.notes}[/dim]")

    previews = controller.preview()
    options = "  ".join(
        f"[{key}] {difficulty.value} ({previews[difficulty]})"
        for key, difficulty in DIFFICULTY_KEYS.items()
    )
    console.print(f"{options}  [s] skip  [x] delete  [q] quit", markup=False)
    choice = click.prompt(
        "Your choice",
        type=click.Choice([*DIFFICULTY_KEYS, "s", "x", "q"]),
        show_choices=False,
    )

    if choice == "q":
        return False
    if choice == "s":
        await controller.advance(skip=True)
    elif choice == "x":
        await delete_service.call(DeleteWordRequest(word_id=item.id))
    else:
        outcome = await controller.answer(DIFFICULTY_KEYS[choice])
        console.print(f"[dim]Next review in {format_duration(outcome.duration)}[/dim]")
        await controller.advance()
        # click.prompt blocks the loop; let the save finish so a failure shows now
        await controller.flush()
    return True


def _print_summary(controller: SessionController) -> None:
    progress = controller.progress()
    if progress.total_items == 0:
        console.print(
            f"\n[yellow]No words due in direction {controller.direction.label}.[/yellow]"
        )
        return
    minutes, seconds = divmod(progress.elapsed_seconds, 60)
    console.print(
        f"\n[bold green]Session complete![/bold green] "
        f"{progress.answered_items}/{progress.total_items} words answered "
        f"in {minutes}m {seconds:02d}s."
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
