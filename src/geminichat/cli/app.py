"""Main CLI application using Typer."""
import asyncio
from pathlib import Path
from typing import NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..credentials import CredentialManager
from ..errors import ChatError
from ..models import Message
from .providers import get_key_store, open_session

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="geminichat",
    help="Chat with Gemini from the terminal, optionally attaching images",
    no_args_is_help=True,
    add_completion=True,
)

key_app = typer.Typer(help="Manage the stored Gemini API key", no_args_is_help=True)
app.add_typer(key_app, name="key")

# Console for rich output
console = Console()

KeyStoreOption = typer.Option(
    None,
    "--key-store",
    help="Key storage backend: memory, file or sqlite (default: $GEMINICHAT_KEY_STORE or file)"
)
KeyStorePathOption = typer.Option(
    None,
    "--key-store-path",
    help="Path of the key file or database"
)


def _print_reply(reply: Message) -> None:
    console.print(f"[bold red]Gemini:[/bold red] {escape(reply.text)}\n")


def _fail(error: ChatError) -> NoReturn:
    """Print the error and exit with code 1."""
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


@app.command(name="tui")
def tui_command(
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    key_store: str | None = KeyStoreOption,
    key_store_path: str | None = KeyStorePathOption,
    no_remember: bool = typer.Option(
        False,
        "--no-remember",
        help="Keep the API key in memory only"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    async def _tui():
        from ..ui import GREETING, run_textual_tui

        store = get_key_store(key_store, key_store_path)
        try:
            session = await open_session(
                store,
                model=model,
                remember=not no_remember,
                greeting=GREETING,
            )
            await run_textual_tui(session, log_level=log_level)
        except ChatError as e:
            _fail(e)
        finally:
            await store.disconnect()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


@app.command()
def chat(
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    key_store: str | None = KeyStoreOption,
    key_store_path: str | None = KeyStorePathOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug log lines"),
):
    """Interactive chat in the console.

    Type '/attach PATH' to attach a file to the next message and
    '/detach' to drop it.
    """
    async def _chat():
        from ..assets import file_to_inline_asset
        from ..ui import GREETING

        store = get_key_store(key_store, key_store_path)
        session = None
        try:
            session = await open_session(store, model=model, greeting=GREETING, verbose=verbose, console=console)
            if not session.has_credential:
                console.print("[red]Error: no API key. Run 'geminichat key set' or set GEMINI_API_KEY[/red]")
                raise typer.Exit(code=1)

            console.print(f"[bold cyan]Gemini Chat[/bold cyan] [dim]({session.model})[/dim]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")
            _print_reply(session.log[0])

            while True:
                try:
                    user_input = console.input("[bold blue]You:[/bold blue] ").strip()
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if user_input.lower() in ("exit", "quit", "q"):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if user_input.startswith("/attach "):
                    try:
                        session.attach(await file_to_inline_asset(user_input[len("/attach "):].strip()))
                    except ChatError as e:
                        console.print(f"[red]⚠ {escape(str(e))}[/red]")
                        continue
                    console.print(f"[dim]Attached {session.pending_file.mime_type} file[/dim]")
                    continue

                if user_input == "/detach":
                    session.detach()
                    console.print("[dim]Attachment removed[/dim]")
                    continue

                if not user_input and session.pending_file is None:
                    continue

                try:
                    with console.status("[dim]Thinking…[/dim]"):
                        reply = await session.submit(user_input)
                except ChatError as e:
                    console.print(f"[red]⚠ {escape(str(e))}[/red]")
                    continue
                if reply is not None:
                    _print_reply(reply)
        except ChatError as e:
            _fail(e)
        finally:
            if session is not None:
                await session.close()
            await store.disconnect()

    asyncio.run(_chat())


@app.command()
def ask(
    text: str = typer.Argument("", help="Message to send"),
    image: Path | None = typer.Option(
        None,
        "--image",
        "-i",
        exists=True,
        dir_okay=False,
        readable=True,
        help="File to attach (sent before the text)"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    key_store: str | None = KeyStoreOption,
    key_store_path: str | None = KeyStorePathOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug log lines"),
):
    """Send one message (and optional image) and print the reply."""
    async def _ask() -> int:
        store = get_key_store(key_store, key_store_path)
        session = None
        try:
            session = await open_session(store, model=model, verbose=verbose, console=console)
            with console.status("[dim]Thinking…[/dim]"):
                reply = await session.submit(text, path=image)
            console.print(Panel(escape(reply.text), title=f"Gemini ({session.model})", border_style="red"))
            return 0
        except ChatError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            return 1
        finally:
            if session is not None:
                await session.close()
            await store.disconnect()

    code = asyncio.run(_ask())
    if code:
        raise typer.Exit(code=code)


@key_app.command("set")
def key_set(
    api_key: str = typer.Option(
        ...,
        "--api-key",
        prompt="Gemini API key",
        hide_input=True,
        help="Key to store"
    ),
    key_store: str | None = KeyStoreOption,
    key_store_path: str | None = KeyStorePathOption,
):
    """Store the API key for later sessions."""
    async def _set():
        async with get_key_store(key_store, key_store_path) as store:
            credentials = CredentialManager(store)
            await credentials.set_credential(api_key.strip())
            if credentials.has_credential:
                console.print(f"[green]Key stored[/green] [dim]({store.backend_type}: {credentials.masked()})[/dim]")
            else:
                console.print("[yellow]Blank key given, stored key removed[/yellow]")

    try:
        asyncio.run(_set())
    except ChatError as e:
        _fail(e)


@key_app.command("clear")
def key_clear(
    key_store: str | None = KeyStoreOption,
    key_store_path: str | None = KeyStorePathOption,
):
    """Remove the stored API key."""
    async def _clear():
        async with get_key_store(key_store, key_store_path) as store:
            await CredentialManager(store).clear_credential()
            console.print("[green]Stored key removed[/green]")

    try:
        asyncio.run(_clear())
    except ChatError as e:
        _fail(e)


@key_app.command("show")
def key_show(
    key_store: str | None = KeyStoreOption,
    key_store_path: str | None = KeyStorePathOption,
):
    """Show the stored API key, masked."""
    async def _show() -> bool:
        async with get_key_store(key_store, key_store_path) as store:
            credentials = CredentialManager(store)
            await credentials.load()
            if credentials.has_credential:
                console.print(f"{credentials.masked()} [dim]({store.backend_type})[/dim]")
                return True
            console.print("[yellow]No key stored[/yellow]")
            return False

    try:
        found = asyncio.run(_show())
    except ChatError as e:
        _fail(e)
    if not found:
        raise typer.Exit(code=1)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
