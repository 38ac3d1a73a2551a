# src/hoist/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single provisioning run
    env: str          # config profile name
    context: Optional[str]  # target host address

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(env: str, context: Optional[str], run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "env": env,
        "context": context,
    }


# ---------------------------------------------------------------------
# Run lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class StateChanged(BaseEvent):
    state: str
    previous: str

@dataclass(frozen=True)
class ProvisionSummary(BaseEvent):
    status: str       # "COMPLETE" | "FAILED"
    failed_at: Optional[str] = None
    error: Optional[str] = None


# ---------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class SessionOpened(BaseEvent):
    username: str

@dataclass(frozen=True)
class SessionFailed(BaseEvent):
    username: str
    error: str

@dataclass(frozen=True)
class SessionClosed(BaseEvent):
    username: str


# ---------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class StageStarted(BaseEvent):
    stage: str
    commands: int

@dataclass(frozen=True)
class StageCommandCompleted(BaseEvent):
    stage: str
    index: int
    command: str

@dataclass(frozen=True)
class StageSucceeded(BaseEvent):
    stage: str
    message: str
    duration_ms: int

@dataclass(frozen=True)
class StageFailed(BaseEvent):
    stage: str
    message: str
    index: int
    error: str


# ---------------------------------------------------------------------
# Facts & config
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class FactExtracted(BaseEvent):
    name: str
    value: str

@dataclass(frozen=True)
class ConfigPersisted(BaseEvent):
    path: str
