"""CLI commands for Prompt Versions."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .core.config import settings
from .core.database import db_manager, mask_database_url
from .core.exceptions import VersioningError
from .models.diff import ChangeEntry, ChangeType, LineOpType
from .services.diff_service import diff_snapshots

app = typer.Typer(
    name="prompt-versions",
    help="Prompt version history and diff CLI",
    add_completion=False,
)

console = Console()
logger = structlog.get_logger(__name__)


@app.command()
def version():
    """Show application version."""
    console.print(f"Prompt Versions v{settings.app_version}")


@app.command()
def serve(
    host: str = typer.Option(settings.host, "--host", "-h", help="Host to bind"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(settings.reload, "--reload", "-r", help="Enable auto-reload"),
):
    """Start the web server."""
    import uvicorn

    console.print(f"Starting Prompt Versions on {host}:{port}")

    uvicorn.run(
        "prompt_versions.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def config():
    """Show current configuration."""
    table = Table(title="Prompt Versions Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug", str(settings.debug))
    table.add_row("Host", settings.host)
    table.add_row("Port", str(settings.port))
    table.add_row("Database URL", mask_database_url(settings.database_url))
    table.add_row("Auth URL", settings.auth_url)
    table.add_row("Request Timeout (s)", str(settings.request_timeout_seconds))
    table.add_row("Max Diff Field Chars", str(settings.max_diff_field_chars))
    table.add_row("Cleanup Max Age (days)", str(settings.cleanup_max_age_days))
    table.add_row("Cleanup Min Versions", str(settings.cleanup_min_versions))

    console.print(table)


@app.command()
def db_create():
    """Create the version tables (local development databases)."""
    async def _create():
        try:
            if not await db_manager.initialize():
                console.print("Database connection failed")
                sys.exit(1)
            await db_manager.create_tables()
            console.print("Database tables created successfully")
        finally:
            await db_manager.close()

    asyncio.run(_create())


def _load_snapshot(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        console.print(f"Cannot read snapshot {path}: {e}")
        raise typer.Exit(code=1)
    if not isinstance(data, dict):
        console.print(f"Snapshot {path} must contain a JSON object")
        raise typer.Exit(code=1)
    # preview payloads wrap the snapshot
    if isinstance(data.get("snapshot"), dict):
        return data["snapshot"]
    return data


def _render_change(change: ChangeEntry) -> List[Text]:
    lines: List[Text] = []
    if change.text_diff is not None:
        for op in change.text_diff:
            if op.type == LineOpType.ADDED:
                lines.append(Text(f"+ {op.content}", style="green"))
            elif op.type == LineOpType.REMOVED:
                lines.append(Text(f"- {op.content}", style="red"))
            else:
                lines.append(Text(f"  {op.content}", style="dim"))
    elif change.deep_diff is not None:
        for path_change in change.deep_diff:
            if path_change.type == ChangeType.ADDED:
                lines.append(Text(f"{path_change.path}: + {json.dumps(path_change.new_value)}", style="green"))
            elif path_change.type == ChangeType.REMOVED:
                lines.append(Text(f"{path_change.path}: - {json.dumps(path_change.old_value)}", style="red"))
            else:
                lines.append(Text(
                    f"{path_change.path}: {json.dumps(path_change.old_value)} -> {json.dumps(path_change.new_value)}",
                    style="yellow",
                ))
    else:
        fields = change.model_fields_set
        if "old_value" in fields:
            lines.append(Text(f"- {change.old_value}", style="red"))
        if "new_value" in fields:
            lines.append(Text(f"+ {change.new_value}", style="green"))
    return lines


@app.command()
def diff(
    old: Path = typer.Argument(..., help="Base snapshot JSON file"),
    new: Path = typer.Argument(..., help="Target snapshot JSON file"),
    field: Optional[List[str]] = typer.Option(None, "--field", "-f", help="Only show these fields"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw change list"),
):
    """Diff two prompt snapshots stored as JSON files."""
    try:
        changes = diff_snapshots(
            _load_snapshot(old),
            _load_snapshot(new),
            max_field_chars=settings.max_diff_field_chars,
        )
    except VersioningError as e:
        console.print(f"Diff failed: {e.message}")
        raise typer.Exit(code=1)
    if field:
        changes = [change for change in changes if change.field in field]

    if as_json:
        console.print_json(data={"changes": [change.to_wire() for change in changes]})
        return

    if not changes:
        console.print("No changes")
        return

    for change in changes:
        console.rule(f"{change.field} ({change.type})")
        for line in _render_change(change):
            console.print(line)


if __name__ == "__main__":
    app()
