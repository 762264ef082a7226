"""Main CLI application using Typer."""
import asyncio
import logging
from datetime import datetime
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from ..attachments import load_attachment
from ..controller import ConversationController
from ..exceptions import ConfigurationError, OmnichatError, SessionNotFoundError
from ..llm import normalize_url
from ..sessions import Attachment, ChatSession, Role
from ..settings import API_PRESETS, AVAILABLE_MODELS, apply_settings_change
from .providers import get_adapter, get_controller, get_home, get_stores

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="omnichat",
    help="Chat with any OpenAI-compatible LLM endpoint, with local history",
    no_args_is_help=True,
    add_completion=True,
)
config_app = typer.Typer(help="Show or change connection settings", no_args_is_help=True)
app.add_typer(config_app, name="config")

# Console for rich output
console = Console()

EXIT_WORDS = ("exit", "quit", "q")


class StreamPrinter:
    """Session listener that prints assistant text as it streams in."""

    def __init__(self, output: Console):
        self._console = output
        self._session_id: str | None = None
        self._printed = ""

    def start(self, session_id: str) -> None:
        self._session_id = session_id
        self._printed = ""

    def __call__(self, session: ChatSession) -> None:
        if session.id != self._session_id or not session.messages:
            return
        last = session.messages[-1]
        if last.role is not Role.ASSISTANT:
            return

        content = last.content
        if content.startswith(self._printed):
            new_text = content[len(self._printed):]
        else:
            # Replaced rather than extended (error message)
            new_text = "\n" + content
        if new_text:
            self._console.print(new_text, end="", markup=False, highlight=False)
            self._printed = content


def _format_time(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M")


def _mask_key(key: str) -> str:
    if not key:
        return "[red]NOT SET[/red]"
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}...{key[-4:]}"


def _load_attachments(paths: list[Path] | None) -> list[Attachment]:
    attachments = []
    for path in paths or []:
        try:
            attachments.append(load_attachment(path))
        except (OmnichatError, OSError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
    return attachments


async def _send(
    controller: ConversationController,
    printer: StreamPrinter,
    text: str,
    attachments: list[Attachment],
) -> bool:
    """Send one message and stream the reply to the console.

    Returns:
        False if settings are incomplete
    """
    printer.start(controller.current_session.id)
    console.print("[bold green]Assistant:[/bold green] ", end="")
    try:
        await controller.send_message(text, attachments)
    except ConfigurationError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        console.print("[dim]Configure with: omnichat config set --key <API_KEY>[/dim]")
        return False
    console.print("\n")
    return True


@app.callback()
def main_options(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show connection and storage logs"
    )
):
    """Omnichat command line interface."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.command()
def chat(
    session_id: str | None = typer.Option(
        None,
        "--session",
        "-s",
        help="Continue the session with this id"
    ),
    new: bool = typer.Option(
        False,
        "--new",
        "-n",
        help="Start a new session"
    ),
    attach: list[Path] | None = typer.Option(
        None,
        "--attach",
        "-a",
        exists=True,
        dir_okay=False,
        help="Attach a file to the first message"
    ),
):
    """Interactive chat. Continues the most recent session by default."""
    async def _chat():
        printer = StreamPrinter(console)
        pending = _load_attachments(attach)

        async with get_adapter() as adapter:
            controller = get_controller(adapter, listener=printer)

            if new:
                controller.create_session()
            elif session_id:
                try:
                    controller.select_session(session_id)
                except SessionNotFoundError as e:
                    console.print(f"[red]Error: {e}[/red]")
                    raise typer.Exit(code=1)

            session = controller.current_session
            console.print(f"[bold cyan]Omnichat[/bold cyan] [dim]{session.title} ({session.id})[/dim]")
            console.print(f"[dim]Model: {controller.settings.model}[/dim]")
            console.print("[dim]Commands: /new, /sessions, /switch <id>, /attach <path>. "
                          "Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            for message in session.messages:
                label = "You" if message.role is Role.USER else "Assistant"
                console.print(f"[dim]{label}: {message.content}[/dim]")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                stripped = user_input.strip()
                if stripped.lower() in EXIT_WORDS:
                    console.print("[dim]Goodbye![/dim]")
                    break

                if stripped.startswith("/"):
                    pending = _run_slash_command(controller, stripped, pending)
                    continue

                if not stripped and not pending:
                    continue

                if await _send(controller, printer, stripped, pending):
                    pending = []

    asyncio.run(_chat())


def _run_slash_command(
    controller: ConversationController,
    command: str,
    pending: list[Attachment],
) -> list[Attachment]:
    """Handle an in-chat command. Returns the attachments still pending."""
    name, _, arg = command.partition(" ")
    arg = arg.strip()

    if name == "/new":
        session = controller.create_session()
        console.print(f"[dim]New session {session.id}[/dim]")
    elif name == "/sessions":
        _print_sessions(controller.sessions)
    elif name == "/switch" and arg:
        try:
            session = controller.select_session(arg)
            console.print(f"[dim]Switched to {session.title}[/dim]")
        except SessionNotFoundError as e:
            console.print(f"[red]Error: {e}[/red]")
    elif name == "/attach" and arg:
        try:
            attachment = load_attachment(arg)
        except (OmnichatError, OSError) as e:
            console.print(f"[red]Error: {e}[/red]")
        else:
            console.print(f"[dim]Attached {attachment.name}[/dim]")
            return [*pending, attachment]
    else:
        console.print(f"[yellow]Unknown command: {command}[/yellow]")
    return pending


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    attach: list[Path] | None = typer.Option(
        None,
        "--attach",
        "-a",
        exists=True,
        dir_okay=False,
        help="Attach a file"
    ),
):
    """Send one message in a new session and print the reply."""
    async def _ask():
        printer = StreamPrinter(console)
        attachments = _load_attachments(attach)

        async with get_adapter() as adapter:
            controller = get_controller(adapter, listener=printer)
            controller.create_session()
            if not await _send(controller, printer, prompt, attachments):
                raise typer.Exit(code=1)

    asyncio.run(_ask())


def _print_sessions(sessions: list[ChatSession]) -> None:
    if not sessions:
        console.print("[dim]No sessions yet.[/dim]")
        return

    table = Table(show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold cyan")
    table.add_column("Messages", justify="right")
    table.add_column("Model")
    table.add_column("Updated")

    for session in sessions:
        table.add_row(
            session.id,
            session.title,
            str(len(session.messages)),
            session.model_used or "-",
            _format_time(session.updated_at),
        )
    console.print(table)


@app.command()
def sessions():
    """List saved sessions, most recent first."""
    session_store, _ = get_stores()
    _print_sessions(session_store.list())


@app.command()
def show(
    session_id: str = typer.Argument(..., help="Session id"),
    raw: bool = typer.Option(
        False,
        "--raw",
        "-r",
        help="Print message text without markdown rendering"
    ),
):
    """Print the messages of a session."""
    session_store, _ = get_stores()
    session = session_store.get(session_id)
    if session is None:
        console.print(f"[red]Error: Session not found: {session_id}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[bold cyan]{session.title}[/bold cyan] [dim]{_format_time(session.created_at)}[/dim]\n")
    for message in session.messages:
        label = "[bold yellow]You[/bold yellow]" if message.role is Role.USER else "[bold green]Assistant[/bold green]"
        console.print(label)
        if raw:
            console.print(message.content, markup=False, highlight=False)
        else:
            console.print(Markdown(message.content))
        for attachment in message.attachments:
            console.print(f"[dim]+ {attachment.name} ({attachment.type.value})[/dim]")
        console.print()


@app.command()
def delete(
    session_id: str = typer.Argument(..., help="Session id"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    ),
):
    """Delete a session."""
    session_store, _ = get_stores()
    session = session_store.get(session_id)
    if session is None:
        console.print(f"[yellow]No session with id {session_id}[/yellow]")
        return

    if not yes:
        confirm = typer.confirm(f"Delete '{session.title}'?")
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            return

    session_store.delete(session_id)
    console.print(f"[green]Deleted {session.title}[/green]")


@config_app.command("show")
def config_show():
    """Show the stored settings."""
    _, settings_store = get_stores()
    settings = settings_store.load()

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=15)
    table.add_column("Value")

    table.add_row("API URL", settings.api_url)
    table.add_row("Resolved URL", normalize_url(settings.api_url) or "-")
    table.add_row("API Key", _mask_key(settings.api_key))
    table.add_row("Model", settings.model)
    table.add_row("Temperature", str(settings.temperature))
    table.add_row("Saved keys", str(len([k for k in settings.key_map.values() if k])))
    table.add_row("Data dir", str(get_home()))
    console.print(table)


@config_app.command("set")
def config_set(
    url: str | None = typer.Option(None, "--url", "-u", help="Endpoint or base URL"),
    preset: str | None = typer.Option(None, "--preset", "-p", help="Endpoint preset name (see 'presets')"),
    key: str | None = typer.Option(None, "--key", "-k", help="API key for the endpoint"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", min=0.0, max=2.0,
                                              help="Sampling temperature (0-2)"),
    system_prompt: str | None = typer.Option(None, "--system-prompt", help="System prompt"),
):
    """Change settings. Switching URL restores the key last used for it."""
    changes = {}
    if preset:
        if preset.lower() not in API_PRESETS:
            console.print(f"[red]Error: Unknown preset: {preset}[/red]")
            raise typer.Exit(code=1)
        changes["api_url"] = API_PRESETS[preset.lower()]["url"]
    if url:
        changes["api_url"] = url
    if key is not None:
        changes["api_key"] = key
    if model:
        changes["model"] = model
    if temperature is not None:
        changes["temperature"] = temperature
    if system_prompt is not None:
        changes["system_prompt"] = system_prompt

    if not changes:
        console.print("[yellow]Nothing to change.[/yellow]")
        return

    _, settings_store = get_stores()
    try:
        settings = apply_settings_change(settings_store.load(), **changes)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    settings_store.save(settings)

    console.print("[green]Settings saved.[/green]")
    console.print(f"[dim]URL: {settings.api_url}  Model: {settings.model}  Key: {_mask_key(settings.api_key)}[/dim]")


@app.command()
def presets():
    """List endpoint presets and known models."""
    table = Table(title="Endpoints")
    table.add_column("Preset", style="bold cyan")
    table.add_column("Name")
    table.add_column("URL", style="dim")
    for preset_id, preset in API_PRESETS.items():
        table.add_row(preset_id, preset["name"], preset["url"])
    console.print(table)

    models = Table(title="Models")
    models.add_column("ID", style="bold cyan")
    models.add_column("Name")
    models.add_column("Provider", style="dim")
    for model in AVAILABLE_MODELS:
        models.add_row(model["id"], model["name"], model["provider"])
    console.print(models)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
