import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Prompt
from rich.markup import escape
from rich import box
import typer

from book import Book
from library import Library, LoadStatus
from config import settings
from utils.ui_helpers import set_output_mode, print_list_result, print_stats_result, books_table, format_book_line
from utils.validators import TextValidator, YearValidator, parse_search_field

APP_NAME = settings.app_name

console = Console()


def configure_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def open_library(for_update: bool = False, force: bool = False) -> Optional[Library]:
    """Create a Library and seed it from the data file.

    Commands that save afterwards refuse to run over skipped lines, since
    saving would drop them from the file, unless ``force`` is set.
    """
    lib = Library()
    result = lib.load()
    if result.status is LoadStatus.ERROR:
        print(f"Could not read data file {lib.data_file}")
        return None
    if result.skipped:
        print(f"Skipped {len(result.skipped)} malformed line(s) in {lib.data_file}")
        if for_update and not force:
            print("Refusing to save: the skipped lines would be lost. Fix the file or pass --force.")
            return None
    return lib


def save_or_report(lib: Library) -> bool:
    if lib.save():
        return True
    print(f"Error saving to {lib.data_file}")
    return False


# --- Typer CLI application ---
app = typer.Typer(help="Library bookkeeping CLI")

@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode). Without a command, starts the menu."""
    configure_logging()
    if output:
        set_output_mode(output)
    if ctx.invoked_subcommand is None:
        run_menu()

@app.command("list")
def cli_list(genre: str = typer.Option("", "--genre", "-g", help="Show only this genre (exact match)")):
    """List all books, optionally filtered by genre."""
    lib = open_library()
    if not lib:
        return
    print_list_result(lib.list_books(genre))

@app.command("sorted")
def cli_sorted():
    """List all books ordered by year."""
    lib = open_library()
    if not lib:
        return
    print_list_result(lib.books_sorted_by_year())

FORCE_HELP = "Save even if malformed lines were skipped (they are dropped from the file)"

@app.command("add")
def cli_add(title: str, author: str, genre: str, year: str,
            force: bool = typer.Option(False, "--force", "-f", help=FORCE_HELP)):
    """Add a book to the catalog."""
    for label, value in (("Title", title), ("Author", author), ("Genre", genre)):
        if not TextValidator.validate_field(value):
            print(f"Error: {label} must be non-empty and must not contain commas.")
            return
    parsed_year = YearValidator.parse_year(year)
    if parsed_year is None:
        print("Error: Year must be a positive integer.")
        return

    lib = open_library(for_update=True, force=force)
    if not lib:
        return
    book = Book(title=title, author=author, genre=genre, year=parsed_year)
    lib.add_book(book)
    if save_or_report(lib):
        print(f"Book added: {book.title} by {book.author}")

@app.command("remove")
def cli_remove(title: str, force: bool = typer.Option(False, "--force", "-f", help=FORCE_HELP)):
    """Retire a book by title. The record is kept."""
    lib = open_library(for_update=True, force=force)
    if not lib:
        return
    if lib.remove_book(title):
        if save_or_report(lib):
            print(f"Book '{title}' has been retired.")
    else:
        print(f"Book '{title}' not found.")

@app.command("restore")
def cli_restore(title: str, force: bool = typer.Option(False, "--force", "-f", help=FORCE_HELP)):
    """Make a retired book available again."""
    lib = open_library(for_update=True, force=force)
    if not lib:
        return
    if lib.restore_book(title):
        if save_or_report(lib):
            print(f"Book '{title}' is available again.")
    else:
        print(f"Book '{title}' not found.")

@app.command("find")
def cli_find(
    keyword: str = typer.Argument(..., help="Substring to look for (case-sensitive)"),
    by: str = typer.Option("title", "--by", "-b", help="Field to search: title | author | genre"),
):
    """Find books whose field contains the keyword."""
    field = parse_search_field(by)
    if field is None:
        print(f"Unknown search field: {by}. Use title, author or genre.")
        return
    lib = open_library()
    if not lib:
        return
    print_list_result(lib.find_books(keyword, field), empty_message="No books found.")

@app.command("edit")
def cli_edit(
    title: str = typer.Argument(..., help="Exact title of the book to edit"),
    new_title: Optional[str] = typer.Option(None, "--title", help="New title"),
    author: Optional[str] = typer.Option(None, "--author", help="New author"),
    genre: Optional[str] = typer.Option(None, "--genre", help="New genre"),
    year: Optional[str] = typer.Option(None, "--year", help="New year"),
    force: bool = typer.Option(False, "--force", "-f", help=FORCE_HELP),
):
    """Edit a book by title. Omitted fields keep their current value."""
    for label, value in (("Title", new_title), ("Author", author), ("Genre", genre)):
        if value and value.strip() and not TextValidator.validate_field(value):
            print(f"Error: {label} must not contain commas.")
            return
    parsed_year = None
    if year is not None and year.strip():
        parsed_year = YearValidator.parse_year(year)
        if parsed_year is None:
            print("Error: Year must be a positive integer.")
            return

    lib = open_library(for_update=True, force=force)
    if not lib:
        return
    book = lib.edit_book(title, new_title=new_title, author=author, genre=genre, year=parsed_year)
    if not book:
        print(f"Book '{title}' not found.")
        return
    if save_or_report(lib):
        print(f"Book updated: {format_book_line(book)}")

@app.command("stats")
def cli_stats():
    """Show catalog statistics."""
    lib = open_library()
    if not lib:
        return
    print_stats_result(lib.get_statistics())


# --- Interactive menu ---
def ask_text(label: str) -> str:
    """Prompt until a non-empty value without commas is given."""
    while True:
        value = Prompt.ask(label).strip()
        if TextValidator.validate_field(value):
            return value
        console.print(f"[yellow]{label} must be non-empty and must not contain commas.[/]")

def ask_year(label: str = "Year of publication") -> int:
    while True:
        year = YearValidator.parse_year(Prompt.ask(label))
        if year is not None:
            return year
        console.print("[yellow]Enter a positive numeric year.[/]")

def ask_optional_text(label: str, current: str) -> Optional[str]:
    while True:
        value = Prompt.ask(f"{label} [dim](current: {escape(current)}, empty to keep)[/]", default="").strip()
        if not value:
            return None
        if TextValidator.validate_field(value):
            return value
        console.print(f"[yellow]{label} must not contain commas.[/]")

def ask_optional_year(current: int) -> Optional[int]:
    while True:
        raw = Prompt.ask(f"Year [dim](current: {current}, empty to keep)[/]", default="").strip()
        if not raw:
            return None
        year = YearValidator.parse_year(raw)
        if year is not None:
            return year
        console.print("[yellow]Enter a positive numeric year.[/]")

def show_books(books, title: str, empty_message: str) -> None:
    if not books:
        console.print(f"[yellow]{empty_message}[/]")
        return
    console.print(books_table(books, title=title))
    console.print(f"[dim]📊 {len(books)} book(s)[/]")

def menu_add(lib: Library) -> None:
    book = Book(title=ask_text("Title"), author=ask_text("Author"), genre=ask_text("Genre"), year=ask_year())
    lib.add_book(book)
    console.print(f"[green]✅ Book added:[/] [bold]{escape(book.title)}[/]")

def menu_remove(lib: Library) -> None:
    title = Prompt.ask("🔍 Title of the book to retire")
    if lib.remove_book(title):
        console.print(f"[green]✅ [bold]{escape(title)}[/] retired.[/]")
    else:
        console.print(f"[yellow]⚠️ Book [bold]{escape(title)}[/] not found.[/]")

def menu_find(lib: Library) -> None:
    keyword = Prompt.ask("Keyword")
    field = None
    while field is None:
        field = parse_search_field(Prompt.ask("Search by", choices=["title", "author", "genre"], default="title"))
    show_books(lib.find_books(keyword, field), f"🔎 Results for '{escape(keyword)}'", "No books found.")

def menu_list(lib: Library) -> None:
    if not lib.books:
        console.print("[yellow]The library is empty.[/]")
        return
    genre = Prompt.ask("Genre filter [dim](empty for all)[/]", default="").strip()
    show_books(lib.list_books(genre), "📚 Catalog", f"No books in genre '{escape(genre)}'.")

def menu_sorted(lib: Library) -> None:
    show_books(lib.books_sorted_by_year(), "📅 Books by year", "The library is empty.")

def menu_edit(lib: Library) -> None:
    title = Prompt.ask("Title of the book to edit")
    book = lib.find_by_title(title)
    if not book:
        console.print(f"[yellow]⚠️ Book [bold]{escape(title)}[/] not found.[/]")
        return
    lib.edit_book(
        title,
        new_title=ask_optional_text("Title", book.title),
        author=ask_optional_text("Author", book.author),
        genre=ask_optional_text("Genre", book.genre),
        year=ask_optional_year(book.year),
    )
    console.print("[green]✅ Book updated.[/]")

def menu_save(lib: Library) -> None:
    if lib.save():
        console.print(f"[green]💾 Saved to {escape(lib.data_file)}[/]")
    else:
        console.print("[bold red]Error while saving.[/]")

def menu_load(lib: Library) -> None:
    result = lib.load()
    if result.ok:
        console.print(f"[green]📂 Loaded {result.count} book(s).[/]")
        if result.skipped:
            console.print(f"[yellow]Skipped {len(result.skipped)} malformed line(s).[/]")
    elif result.status is LoadStatus.MISSING:
        console.print(f"[yellow]Data file {escape(lib.data_file)} not found.[/]")
    else:
        console.print("[bold red]Error while loading.[/]")

def run_menu():
    """Interactive menu for the bookkeeping CLI."""
    lib = Library()
    startup = lib.load()
    if startup.ok:
        console.print(f"[green]Data loaded from {escape(lib.data_file)}.[/]")
        if startup.skipped:
            console.print(f"[yellow]Skipped {len(startup.skipped)} malformed line(s). Saving will drop them.[/]")
    elif startup.status is LoadStatus.MISSING:
        console.print("[yellow]Data file not found. Starting with an empty library.[/]")
    else:
        console.print(f"[bold red]Could not read {escape(lib.data_file)}. Starting with an empty library.[/]")

    actions = {
        "1": menu_add,
        "2": menu_remove,
        "3": menu_find,
        "4": menu_list,
        "5": menu_save,
        "6": menu_load,
        "7": menu_edit,
        "8": menu_sorted,
    }

    def render_menu() -> None:
        menu_items = [
            ("1", "Add a book", "➕"),
            ("2", "Retire a book", "🗑️"),
            ("3", "Find books", "🔎"),
            ("4", "List books (genre filter)", "📚"),
            ("5", "Save data", "💾"),
            ("6", "Load data", "📂"),
            ("7", "Edit a book", "✏️"),
            ("8", "List books by year", "📅"),
            ("0", "Exit", "🚪"),
        ]

        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, label, icon in menu_items:
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

        console.print(Panel(table, title=APP_NAME, border_style="cyan", box=box.HEAVY, padding=(1, 2)))

    while True:
        render_menu()
        choice = Prompt.ask("Choose an option", choices=[*actions, "0"], default="4").strip()
        if choice == "0":
            console.print("[green]Goodbye![/]")
            break
        actions[choice](lib)
        print()  # spacing between operations


if __name__ == "__main__":
    if len(sys.argv) > 1:
        app()
    else:
        configure_logging()
        run_menu()
