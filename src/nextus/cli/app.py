"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..conversation import ChatController, Message, Role, SubmitOutcome
from .providers import (
    CREDENTIAL_VARIABLES,
    build_controller,
    get_credential,
    get_generation_config,
    get_provider_name,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="nextus",
    help="Conversational AI banking assistant backed by a remote language model",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

EXIT_WORDS = ("exit", "quit", "q")


def _print_message(message: Message) -> None:
    """Print one transcript entry."""
    timestamp = message.created_at.strftime("%H:%M:%S") if message.created_at else ""
    if message.role == Role.USER:
        console.print(f"[bold yellow]You[/bold yellow] [dim]{timestamp}[/dim]")
        console.print(message.content, markup=False)
    else:
        style = "bold red" if message.content.startswith("⚠️") else "bold green"
        console.print(f"[{style}]Assistant[/{style}] [dim]{timestamp}[/dim]")
        console.print(message.content, markup=False)
    console.print()


def _make_controller(verbose: bool) -> ChatController:
    def debug_callback(level: str, component: str, message: str) -> None:
        if verbose or level in ("warning", "error"):
            console.print(f"[dim]{level.upper():<7} [{component}] {message}[/dim]")

    return build_controller(console, debug_callback=debug_callback)


@app.command()
def chat(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print debug trace messages"
    )
):
    """Interactive chat in the terminal (line mode)."""
    async def _chat():
        controller = _make_controller(verbose)

        try:
            console.print("[bold cyan]Nextus - AI Banking Assistant[/bold cyan]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            controller.start()
            for message in controller.snapshot():
                _print_message(message)
            # The prompt line already shows what the user typed.
            controller.subscribe(
                lambda message: _print_message(message) if message.role == Role.ASSISTANT else None
            )

            while controller.can_submit:
                try:
                    user_input = console.input("[bold yellow]>[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    break

                if user_input.strip().lower() in EXIT_WORDS:
                    break

                with console.status("[cyan]Thinking...[/cyan]"):
                    await controller.submit(user_input)

            if controller.diagnostic:
                console.print(f"[red]{controller.diagnostic}[/red]")
        finally:
            await controller.close()
            console.print("[dim]Goodbye![/dim]")

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command(name="tui")
def tui_command(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    async def _tui():
        from ..ui import run_textual_tui

        controller = build_controller(console)
        try:
            await run_textual_tui(controller, log_level=log_level)
        finally:
            await controller.close()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question for the assistant"),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print debug trace messages"
    ),
):
    """Ask a single question and print the answer."""
    async def _ask() -> SubmitOutcome | None:
        controller = _make_controller(verbose)
        try:
            session = controller.start()
            if not session.established:
                _print_message(controller.snapshot()[0])
                console.print(f"[red]Error: {session.last_error}[/red]")
                return None

            with console.status("[cyan]Thinking...[/cyan]"):
                outcome = await controller.submit(question)
            if outcome.rejected:
                console.print(f"[red]Error: question was rejected ({outcome.value})[/red]")
            else:
                _print_message(controller.snapshot()[-1])
            return outcome
        finally:
            await controller.close()

    outcome = asyncio.run(_ask())
    if outcome != SubmitOutcome.COMPLETED:
        raise typer.Exit(code=1)


@app.command()
def info():
    """Show the configured provider, model and generation settings."""
    provider = get_provider_name(console)
    config = get_generation_config(provider)

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=18)
    table.add_column("Value")

    key_set = get_credential(provider) is not None
    key_names = " / ".join(CREDENTIAL_VARIABLES[provider])
    table.add_row("Provider", provider)
    table.add_row("Model", config.model or "default")
    table.add_row("API key", "[green]set[/green]" if key_set else f"[red]missing[/red] ({key_names})")
    table.add_row("Temperature", str(config.temperature))
    table.add_row("Top P", str(config.top_p))
    table.add_row("Top K", str(config.top_k))
    table.add_row("Max Output", f"{config.max_output_tokens:,} tokens")

    console.print(table)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
