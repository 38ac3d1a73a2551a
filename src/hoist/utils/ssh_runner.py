# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/utils/ssh_runner.py

from __future__ import annotations

import logging
import socket
import time
from dataclasses import dataclass
from typing import Optional

import paramiko

from hoist.bootstrap.errors import CommandTimeoutError, SessionError

log = logging.getLogger("hoist")

_POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class CommandResult:
    command: str
    exit_code: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class SSHRunner:
    """
    One authenticated SSH connection for a single (host, user) pair.

    Not safe to share between threads; callers serialize commands.
    """

    def __init__(self, client: paramiko.SSHClient, *, host: str = "", username: str = ""):
        self.client = client
        self.host = host
        self.username = username
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def execute(
        self,
        command: str,
        *,
        capture: bool = False,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """
        Run a command line and block until it terminates.

        stderr is merged into stdout. With capture=False the output is only
        kept when the command fails, so stage diagnostics can show it.
        Without a timeout a hung remote command blocks forever.
        """
        if self._closed:
            raise SessionError(f"Session to {self.username}@{self.host} is closed")

        log.debug("[%s@%s] $ %s", self.username, self.host, command)
        try:
            transport = self.client.get_transport()
            if transport is None or not transport.is_active():
                raise SessionError(f"Connection to {self.host} is not active")
            channel = transport.open_session()
            channel.set_combined_stderr(True)
            channel.exec_command(command)
            output = self._drain(channel, command, timeout)
            rc = channel.recv_exit_status()
            channel.close()
        except (paramiko.SSHException, socket.error) as e:
            raise SessionError(
                f"Connection to {self.username}@{self.host} failed while running '{command}': {e}"
            ) from e

        log.debug("[%s@%s][exit %d]\n%s", self.username, self.host, rc, output.rstrip())
        if capture or rc != 0:
            return CommandResult(command=command, exit_code=rc, output=output)
        return CommandResult(command=command, exit_code=rc)

    def _drain(self, channel, command: str, timeout: Optional[float]) -> str:
        chunks: list[bytes] = []
        deadline = time.monotonic() + timeout if timeout else None
        while True:
            if channel.recv_ready():
                chunks.append(channel.recv(4096))
                continue
            if channel.exit_status_ready():
                break
            if deadline is not None and time.monotonic() > deadline:
                channel.close()
                raise CommandTimeoutError(command, timeout)
            time.sleep(_POLL_INTERVAL)

        # remaining buffered output after exit
        while channel.recv_ready():
            chunks.append(channel.recv(4096))
        # decode once; a multi-byte character can straddle two reads
        return b"".join(chunks).decode("utf-8", "replace")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.client.close()
        log.debug("[%s@%s] connection closed", self.username, self.host)


def shq(v: str) -> str:
    """Quote for bash -c."""
    return "'" + v.replace("'", "'\"'\"'") + "'"
