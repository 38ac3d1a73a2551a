# hoist/src/hoist/bootstrap/node/models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Host:
    """
    Represents a server you will SSH into.
    """
    address: str                  # IPv4 address to connect to
    username: str                 # SSH username
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[Path] = None

    def with_user(self, username: str) -> "Host":
        return replace(self, username=username, password=None)


@dataclass(frozen=True)
class SSHAuth:
    """
    Authentication material the environment already trusts.
    Nothing here is stored by hoist.
    """
    pkey_path: Optional[Path] = None
    allow_agent: bool = True
    look_for_keys: bool = True
    connect_timeout: float = 20.0
