# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/bootstrap/errors.py
from __future__ import annotations

from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from hoist.utils.ssh_runner import CommandResult


class HoistError(RuntimeError):
    """Base class for provisioning failures."""


class InputError(HoistError):
    """Raised when an operator-supplied value fails validation."""


class AuthenticationError(HoistError):
    """Raised when an SSH session could not be established."""

    def __init__(self, host: str, username: str, reason: str, phase: Optional[str] = None):
        self.host = host
        self.username = username
        self.reason = reason
        self.phase = phase
        super().__init__(f"Unable to log in to {host} as '{username}': {reason}")


class SessionError(HoistError):
    """Raised when the transport drops while a command is running."""


class CommandTimeoutError(HoistError):
    def __init__(self, command: str, timeout: float):
        self.command = command
        self.timeout = timeout
        super().__init__(f"Command did not finish within {timeout}s: {command}")


class StageFailure(HoistError):
    """
    A command inside a stage exited non-zero.

    Commands that ran before the failing one are not rolled back.
    """

    def __init__(self, stage: str, index: int, command: str, result: "CommandResult"):
        self.stage = stage
        self.index = index
        self.command = command
        self.result = result
        super().__init__(
            f"Stage '{stage}' failed at command #{index} (exit {result.exit_code}): {command}"
        )


class ExtractionError(HoistError):
    """Raised when an expected marker is missing from command output."""

    def __init__(self, message: str, output: str):
        self.output = output
        super().__init__(message)


class PersistenceError(HoistError):
    def __init__(self, path, values: Dict[str, str], reason: str):
        self.path = path
        self.values = dict(values)
        self.reason = reason
        super().__init__(f"Could not write config file {path}: {reason}")
