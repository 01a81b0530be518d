import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from book import Book

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def status_label(book: Book) -> str:
    return "Available" if book.available else "Retired"

def format_book_line(book: Book) -> str:
    return f"{book.title} | {book.author} | {book.genre} | {book.year} | {status_label(book)}"

def books_table(books: List[Book], title: str = "📚 Books") -> Table:
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Genre", style="magenta")
    table.add_column("Year", justify="right")
    table.add_column("Status")
    for b in books:
        status = "[green]Available[/]" if b.available else "[red]Retired[/]"
        table.add_row(escape(b.title), escape(b.author), escape(b.genre), str(b.year), status)
    return table

def print_list_result(books: List[Book], empty_message: str = "No books in library.") -> None:
    """Print books according to the current output mode.
    - plain: 'Title | Author | Genre | Year | Status' lines, or the empty message
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print(empty_message)
        return

    if mode == "rich":
        _console.print(books_table(books))
    else:
        for b in books:
            print(format_book_line(b))

def print_stats_result(stats: Dict[str, Any]) -> None:
    mode = get_output_mode()

    total = stats.get("total_books", 0)
    available = stats.get("available_books", 0)
    retired = stats.get("retired_books", 0)
    genres = stats.get("genres", 0)

    if mode == "json":
        print(json.dumps({"total_books": total, "available_books": available,
                          "retired_books": retired, "genres": genres}, ensure_ascii=False))
    elif mode == "rich":
        content = (f"[bold]Total Books:[/] {total}\n[bold]Available:[/] {available}\n"
                   f"[bold]Retired:[/] {retired}\n[bold]Genres:[/] {genres}")
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {total}")
        print(f"Available: {available}")
        print(f"Retired: {retired}")
        print(f"Genres: {genres}")
