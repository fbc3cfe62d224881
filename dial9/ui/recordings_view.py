"""Terminal rendering of recordings and playback progress."""

import asyncio
import logging
import math
from typing import Optional

from rich.console import Console
from rich.progress import Progress, BarColumn, TextColumn
from rich.table import Table

from ..models.recording import RecordingRecord
from ..services.playback import PlaybackController
from ..storage.catalog import RecordingCatalog

logger = logging.getLogger(__name__)


def time_string(total_seconds: float) -> str:
    """Format seconds as MM:SS."""
    if not math.isfinite(total_seconds):
        return "00:00"
    minutes, seconds = divmod(int(total_seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


class RecordingsView:
    """Prints the catalog and a live playback bar with rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show_recordings(self, catalog: RecordingCatalog) -> None:
        table = Table(title=f"Recordings ({len(catalog)})")
        table.add_column("ID", justify="right")
        table.add_column("")
        table.add_column("From")
        table.add_column("To")
        table.add_column("Time")
        table.add_column("Duration", justify="right")
        table.add_column("Audio")

        for record in catalog:
            direction = "[green]↙ in[/green]" if record.is_incoming else "[blue]↗ out[/blue]"
            table.add_row(
                str(record.id),
                direction,
                record.source_name or "Unknown",
                record.destination_name or "Unknown",
                record.formatted_time,
                record.formatted_duration,
                "✅" if record.has_recording else "",
            )
        self.console.print(table)

    def show_status(self, message: str, success: bool = True) -> None:
        self.console.print(message, style="green" if success else "bold red")

    async def follow_playback(self, controller: PlaybackController,
                              record: Optional[RecordingRecord],
                              refresh_seconds: float = 0.2) -> None:
        """Render progress until the recording ends or playback stops."""
        total = float(record.duration) if record else 0.0
        label = f"From: {record.source_name or 'Unknown'}" if record else "Playing"

        with Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("{task.fields[elapsed]} / {task.fields[length]}"),
            console=self.console,
        ) as progress:
            task = progress.add_task(label, total=1.0, elapsed="00:00", length=time_string(total))
            while controller.playing_id is not None:
                session = controller.session
                progress.update(
                    task,
                    completed=controller.progress,
                    elapsed=time_string(controller.elapsed_seconds(total)),
                )
                if session.player is not None and session.player.finished:
                    break
                await asyncio.sleep(refresh_seconds)
            progress.update(task, completed=controller.progress)
