"""Interactive chat session that drives the assistant from the terminal."""

from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from accountant.assistant import Assistant, Reply
from accountant.commands.common import open_assistant

console = Console()

QUIT_WORDS = {"q", "quit", "exit", "/quit"}
UPLOAD_PREFIX = "/upload"


def upload_file(assistant: Assistant, raw_path: str) -> Reply:
    """Send a local file to the assistant as if it were uploaded."""
    path = Path(raw_path).expanduser()
    try:
        data = path.read_bytes()
    except OSError as e:
        return Reply(f"Could not read {path}: {e}")
    return assistant.handle_upload(path.name, data)


def show_reply(reply: Reply, download_dir: Path) -> None:
    """Print a reply, saving any attached document into ``download_dir``.

    Args:
        reply: Reply from the assistant.
        download_dir: Directory attachments are written to.
    """
    console.print(reply.text, markup=False, highlight=False)

    if reply.document is not None and reply.document_name:
        target = download_dir / reply.document_name
        try:
            target.write_bytes(reply.document)
        except OSError as e:
            console.print(f"[red]Could not save attachment: {escape(str(e))}[/red]")
            return
        console.print(f"[dim]Saved attachment to {escape(str(target))}[/dim]")


def chat_command(download_dir: str | None = None) -> None:
    """Chat with the assistant until 'q' or end of input."""
    assistant = open_assistant()
    downloads = Path(download_dir).expanduser() if download_dir else Path.cwd()

    console.print("[cyan]Send expenses like '1000 shop' or '50 EUR food'.[/cyan]")
    console.print(f"[dim]/help for commands, {UPLOAD_PREFIX} <path> to restore a db.json, q to quit[/dim]")

    while True:
        try:
            message: str = typer.prompt(">", prompt_suffix=" ")
        except (EOFError, typer.Abort):
            break

        if message.strip().lower() in QUIT_WORDS:
            break

        if message.startswith(f"{UPLOAD_PREFIX} "):
            reply = upload_file(assistant, message[len(UPLOAD_PREFIX) :].strip())
        else:
            reply = assistant.handle_text(message, date.today())

        show_reply(reply, downloads)

    console.print("[yellow]Bye[/yellow]")
