#!/usr/bin/env python3
"""
CLI Interface - Chat with the Calculus Cougar from the terminal.

Runs the same pipeline as the HTTP API, with one session per run.
Messages starting with a book command (/openstax, /unbound, ...) go
straight to the pipeline, which picks the book for that message.

Run with:
    python -m cougar_tutor
"""

import asyncio
import uuid

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from cougar_tutor.config import BOOK_COMMANDS, BOOKS, DEFAULT_BOOK
from cougar_tutor.errors import TutorError
from cougar_tutor.rag.pipeline import ChatPipeline

# Rich console for beautiful output
console = Console()

# Prefixes handed to the pipeline instead of being treated as CLI commands
_BOOK_PREFIXES = tuple(prefix for prefixes in BOOK_COMMANDS.values() for prefix in prefixes)


def print_welcome(book: str):
    """Print welcome message and instructions."""
    welcome_text = f"""
[bold blue]The Calculus Cougar[/bold blue] - your Socratic calculus tutor

Ask about limits, derivatives, integrals and anything else from your course.
Current book: [cyan]{BOOKS.get(book, {}).get("label", book)}[/cyan]

[dim]Type /help for all commands[/dim]
"""
    console.print(Panel(welcome_text, border_style="blue"))


def print_help():
    """Print help message with available commands."""
    table = Table(title="Available Commands", show_header=True, header_style="bold cyan")
    table.add_column("Command", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="dim")

    commands = [
        ("(any question)", "Ask the tutor", "What is the chain rule?"),
        ("/openstax <question>", "Ask using OpenStax for this message", "/openstax limits"),
        ("/unbound <question>", "Ask using Calculus Unbound for this message", "/unbound related rates"),
        ("/book <id>", "Change the default book", "/book unbound"),
        ("/new", "Start a new conversation", "/new"),
        ("/history", "Show this conversation", "/history"),
        ("/stats", "Show database statistics", "/stats"),
        ("/clear", "Clear the screen", "/clear"),
        ("/help", "Show this help message", "/help"),
        ("/exit", "Exit the tutor", "/exit"),
    ]

    for cmd, desc, example in commands:
        table.add_row(cmd, desc, example)

    console.print(table)


def parse_command(user_input: str) -> tuple[str, list[str]]:
    """
    Parse user input into command and arguments.

    Returns:
        Tuple of (command, arguments)
        For questions (including book-prefixed ones), command is 'ask'
    """
    user_input = user_input.strip()

    if not user_input:
        return ("empty", [])

    if user_input.startswith("/") and not user_input.lower().startswith(_BOOK_PREFIXES):
        parts = user_input[1:].split(maxsplit=1)
        command = parts[0].lower()
        args = parts[1].split() if len(parts) > 1 else []
        return (command, args)

    return ("ask", [user_input])


async def ask(pipeline: ChatPipeline, question: str, session_id: str, book: str):
    """Send a question through the pipeline and render the reply."""
    try:
        with console.status("[bold green]Thinking...", spinner="dots"):
            reply = await pipeline.handle(question, session_id=session_id, context="cli", default_book=book)
    except TutorError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[yellow]Make sure Ollama is running: ollama serve[/yellow]")
        return

    console.print("\n[bold green]Cougar:[/bold green]")
    console.print(Markdown(reply))


def handle_history(pipeline: ChatPipeline, session_id: str):
    """Handle /history command."""
    session = pipeline.sessions.get(session_id)
    if session is None or len(session) <= 1:
        console.print("[yellow]No messages yet.[/yellow]")
        return

    # Skip the persona prompt
    for turn in session.turns[1:]:
        style = {"user": "cyan", "assistant": "green"}.get(turn.role, "dim")
        console.print(f"[bold {style}]{turn.role}:[/bold {style}] {turn.content}")


def handle_stats(pipeline: ChatPipeline):
    """Handle /stats command."""
    stats = pipeline.retriever.vector_store.get_stats()

    table = Table(title="Database Statistics", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="white")
    table.add_column("Value", style="green")

    table.add_row("Collection Name", stats["collection_name"])
    table.add_row("Total Chunks", str(stats["document_count"]))
    table.add_row("Books", ", ".join(stats["books"]) or "-")
    table.add_row("Storage Location", stats["persist_directory"])

    console.print(table)


async def run(pipeline: ChatPipeline | None = None):
    """Main CLI loop."""
    book = DEFAULT_BOOK
    session_id = f"cli-{uuid.uuid4()}"
    print_welcome(book)

    try:
        pipeline = pipeline or ChatPipeline()
    except Exception as e:
        console.print(f"[red]Error initializing: {e}[/red]")
        return

    if pipeline.retriever.vector_store.count == 0:
        console.print("[red]Vector store is empty![/red]")
        console.print("[yellow]Answers will not cite the textbook until you run:[/yellow]")
        console.print("[cyan]  python scripts/ingest_books.py --book openstax <pdfs>[/cyan]\n")

    while True:
        try:
            user_input = await asyncio.to_thread(Prompt.ask, "[bold cyan]You[/bold cyan]")
            command, args = parse_command(user_input)

            if command == "empty":
                continue

            elif command in ("exit", "quit"):
                console.print("\n[bold blue]Goodbye! Keep practicing![/bold blue]")
                break

            elif command == "help":
                print_help()

            elif command == "clear":
                console.clear()
                print_welcome(book)

            elif command == "book":
                if not args:
                    console.print(f"[yellow]Usage: /book <id>  (known: {', '.join(BOOKS)})[/yellow]")
                else:
                    book = args[0].lower()
                    console.print(f"[cyan]Default book is now {book}[/cyan]")

            elif command == "new":
                session_id = f"cli-{uuid.uuid4()}"
                console.print("[cyan]Started a new conversation.[/cyan]")

            elif command == "history":
                handle_history(pipeline, session_id)

            elif command == "stats":
                handle_stats(pipeline)

            elif command == "ask":
                await ask(pipeline, args[0], session_id, book)

            else:
                console.print("[yellow]Unknown command. Type /help for available commands.[/yellow]")

            console.print()

        except (KeyboardInterrupt, EOFError):
            console.print("\n\n[bold blue]Goodbye! Keep practicing![/bold blue]")
            break

    await pipeline.drain()


def main():
    """Console script entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
