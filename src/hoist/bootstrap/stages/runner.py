# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/bootstrap/stages/runner.py

from __future__ import annotations

import logging
import time
from typing import Optional

from hoist.bootstrap.errors import StageFailure
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import (
    StageCommandCompleted,
    StageFailed,
    StageStarted,
    StageSucceeded,
    new_ctx,
)

from .models import Stage

log = logging.getLogger("hoist")


def run_stage(
    stage: Stage,
    runner,
    *,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
    timeout: Optional[float] = None,
) -> None:
    """
    Execute the stage's commands in order over ``runner``.

    Stops at the first non-zero exit and raises StageFailure. Commands that
    already ran are not undone, so the host may be left half configured.
    Errors raised by the runner itself (timeouts, dropped connections)
    propagate unchanged.
    """
    bus = bus or EventBus()
    ctx = run_ctx or new_ctx(env="default", context=None)

    log.info("[stage] %s (%d commands)", stage.name, len(stage))
    bus.emit(StageStarted(stage=stage.name, commands=len(stage), **ctx))
    started = time.monotonic()

    for index, command in enumerate(stage.commands):
        try:
            result = runner.execute(command, timeout=timeout)
        except Exception as e:
            bus.emit(StageFailed(stage=stage.name, message=stage.failure_message, index=index, error=str(e), **ctx))
            raise

        if not result.ok:
            failure = StageFailure(stage.name, index, command, result)
            log.error("[stage] %s\n%s", failure, result.output.rstrip())
            bus.emit(StageFailed(stage=stage.name, message=stage.failure_message, index=index, error=str(failure), **ctx))
            raise failure

        bus.emit(StageCommandCompleted(stage=stage.name, index=index, command=command, **ctx))

    duration_ms = int((time.monotonic() - started) * 1000)
    log.info("[stage] %s: %s", stage.name, stage.success_message)
    bus.emit(StageSucceeded(stage=stage.name, message=stage.success_message, duration_ms=duration_ms, **ctx))
