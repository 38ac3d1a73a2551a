# src/hoist/observers/logger.py

from __future__ import annotations
import logging

from .events import (
    BaseEvent,
    ConfigPersisted,
    FactExtracted,
    ProvisionSummary,
    SessionClosed,
    SessionFailed,
    SessionOpened,
    StageFailed,
    StageSucceeded,
    StateChanged,
)

_CTX_FIELDS = ("ts", "run_id", "env", "context")


class LoggerObserver:
    """
    Mirrors provisioning events into the run's trace log.

    Milestones are written at INFO. Anything else (stage start, per-command
    completion) goes out at DEBUG as key=value pairs.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        log = self.logger
        if isinstance(event, StateChanged):
            log.info("[%s] %s -> %s", event.context, event.previous, event.state)
        elif isinstance(event, SessionOpened):
            log.info("[%s] logged in as %s", event.context, event.username)
        elif isinstance(event, SessionClosed):
            log.info("[%s] session for %s closed", event.context, event.username)
        elif isinstance(event, SessionFailed):
            log.info("[%s] login as %s FAILED: %s", event.context, event.username, event.error)
        elif isinstance(event, StageSucceeded):
            log.info("[%s] %s: %s (%d ms)", event.context, event.stage, event.message, event.duration_ms)
        elif isinstance(event, StageFailed):
            log.info(
                "[%s] %s FAILED at command #%d: %s", event.context, event.stage, event.index, event.error
            )
        elif isinstance(event, FactExtracted):
            log.info("[%s] %s = %s", event.context, event.name, event.value)
        elif isinstance(event, ConfigPersisted):
            log.info("profile written to %s", event.path)
        elif isinstance(event, ProvisionSummary):
            if event.status == "COMPLETE":
                log.info("[%s] provisioning complete", event.context)
            else:
                log.info("[%s] provisioning FAILED at %s: %s", event.context, event.failed_at, event.error)
        else:
            fields = " ".join(f"{k}={v!r}" for k, v in event.dict().items() if k not in _CTX_FIELDS)
            log.debug("%s %s", type(event).__name__, fields)
