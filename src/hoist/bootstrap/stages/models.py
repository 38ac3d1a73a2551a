# src/hoist/bootstrap/stages/models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Stage:
    """
    One unit of remote configuration: an ordered list of shell command lines
    plus the messages shown when it succeeds or fails.
    """
    name: str
    commands: Tuple[str, ...]
    success_message: str
    failure_message: str

    def __post_init__(self):
        # accept any sequence, store an immutable tuple
        object.__setattr__(self, "commands", tuple(self.commands))
        if not self.commands:
            raise ValueError(f"Stage '{self.name}' has no commands")

    def __len__(self) -> int:
        return len(self.commands)
