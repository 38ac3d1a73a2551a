# src/hoist/observers/console.py
from __future__ import annotations

import typer

from .events import (
    BaseEvent,
    FactExtracted,
    SessionFailed,
    SessionOpened,
    StageFailed,
    StageStarted,
    StageSucceeded,
)


class ConsoleObserver:
    """
    Progress lines for an interactive terminal. Purely cosmetic.
    """

    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, SessionOpened):
            typer.secho(f"  ✔ Logged in as {event.username}", fg=typer.colors.GREEN)
        elif isinstance(event, SessionFailed):
            typer.secho(f"  ✘ Could not log in as {event.username}", fg=typer.colors.RED, err=True)
        elif isinstance(event, StageStarted):
            typer.echo(f"  … {event.stage}")
        elif isinstance(event, StageSucceeded):
            typer.secho(f"  ✔ {event.message} ({event.duration_ms / 1000:.1f}s)", fg=typer.colors.GREEN)
        elif isinstance(event, StageFailed):
            typer.secho(f"  ✘ {event.message}", fg=typer.colors.RED, err=True)
        elif isinstance(event, FactExtracted):
            typer.echo(f"  • {event.name}: {event.value}")
