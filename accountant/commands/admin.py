"""Admin commands for init, backup, dump and restore."""

import shutil
import sys
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from accountant.commands.common import exit_store_corrupt, open_assistant
from accountant.config import create_default_config, get_config_path
from accountant.store import StoreCorrupt

console = Console()


def init_command(force: bool = False) -> None:
    """Initialize accountant ledger and configuration."""
    config_path = get_config_path()
    store = open_assistant().store

    ledger_exists = store.exists()
    config_exists = config_path.exists()

    # Guard: refuse to overwrite without force flag
    if not force and (ledger_exists or config_exists):
        console.print("[red]Initialization failed:[/red]", style="bold")
        if ledger_exists:
            console.print(f"  Ledger already exists: {store.path}")
        if config_exists:
            console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'accountant init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
        create_default_config(config_path)
        console.print("[green]✓[/green] Config file created (permissions: 600)")

        console.print(f"[cyan]Initializing ledger at {store.path}...[/cyan]")
        store.initialize()
        console.print("[green]✓[/green] Ledger initialized")
    except OSError as e:
        console.print(f"[red]Filesystem error: {escape(str(e))}[/red]", style="bold")
        sys.exit(1)

    console.print("\n[green]Initialization complete![/green]", style="bold")


def backup_command(output_dir: str | None = None) -> None:
    """Backup ledger and configuration files."""
    store = open_assistant().store
    config_path = get_config_path()

    if not store.exists():
        console.print("[red]Ledger not found. Run 'accountant init' first.[/red]", style="bold")
        sys.exit(1)

    if output_dir:
        backup_dir = Path(output_dir).expanduser()
    else:
        backup_dir = Path.home() / ".accountant" / "backups"

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    ledger_backup = backup_dir / f"ledger_{timestamp}.json"
    config_backup = backup_dir / f"config_{timestamp}.toml"

    try:
        backup_dir.mkdir(parents=True, exist_ok=True)

        shutil.copy2(store.path, ledger_backup)
        console.print(f"[green]✓[/green] Ledger backed up to: {ledger_backup}")

        if config_path.exists():
            shutil.copy2(config_path, config_backup)
            console.print(f"[green]✓[/green] Config backed up to: {config_backup}")

    except OSError as e:
        console.print(f"[red]Backup failed: {escape(str(e))}[/red]", style="bold")
        sys.exit(1)

    console.print("\n[green]Backup complete![/green]", style="bold")
    console.print(f"[dim]Backup directory: {backup_dir}[/dim]")


def dump_command(output: str | None = None) -> None:
    """Export the ledger as canonical JSON to a file or stdout."""
    store = open_assistant().store

    try:
        data = store.dump_bytes()
    except StoreCorrupt as e:
        exit_store_corrupt(e)

    if output is None:
        sys.stdout.write(data.decode("utf-8") + "\n")
        return

    output_path = Path(output).expanduser()
    try:
        output_path.write_bytes(data)
    except OSError as e:
        console.print(f"[red]Could not write {output_path}: {escape(str(e))}[/red]", style="bold")
        sys.exit(1)
    console.print(f"[green]✓[/green] Ledger exported to: {output_path}")


def restore_command(path: str, yes: bool = False) -> None:
    """Replace the whole ledger with a previously exported file."""
    source = Path(path).expanduser()
    store = open_assistant().store

    try:
        data = source.read_bytes()
    except OSError as e:
        console.print(f"[red]Could not read {source}: {escape(str(e))}[/red]", style="bold")
        sys.exit(1)

    if not yes and store.exists():
        confirm = typer.confirm(f"This replaces every transaction in {store.path}. Continue?", default=False)
        if not confirm:
            console.print("[red]Aborted[/red]")
            sys.exit(0)

    try:
        ledger = store.restore_bytes(data)
    except StoreCorrupt as e:
        console.print(f"[red]Restore rejected, ledger unchanged. {escape(str(e))}[/red]", style="bold")
        sys.exit(1)

    days = len(ledger.transactions_by_date)
    console.print(f"[green]✓[/green] Ledger restored from {source} ({days} day(s) of transactions)")
