# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
from typing import Protocol
from .events import BaseEvent


class Observer(Protocol):
    """
    Receives progress events. Must not be consulted for success or failure;
    anything it raises is dropped by the EventBus.
    """

    def notify(self, event: BaseEvent) -> None: ...
