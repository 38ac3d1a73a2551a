# src/hoist/bootstrap/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from hoist.bootstrap.node.models import SSHAuth
from hoist.bootstrap.stages.catalog import DEFAULT_USER


class ProvisionState(str, Enum):
    UNAUTHENTICATED = "Unauthenticated"
    BOOTSTRAP_AUTHENTICATED = "BootstrapAuthenticated"
    ACCOUNT_CREATED = "AccountCreated"
    OPERATIONAL_AUTHENTICATED = "OperationalAuthenticated"
    BASE_CONFIGURED = "BaseConfigured"
    RUNTIME_CONFIGURED = "RuntimeConfigured"
    PROXY_CONFIGURED = "ProxyConfigured"
    COMPLETE = "Complete"
    FAILED = "Failed"


# the only legal forward order; FAILED is reachable from any of these but COMPLETE
ORDER: List[ProvisionState] = [
    ProvisionState.UNAUTHENTICATED,
    ProvisionState.BOOTSTRAP_AUTHENTICATED,
    ProvisionState.ACCOUNT_CREATED,
    ProvisionState.OPERATIONAL_AUTHENTICATED,
    ProvisionState.BASE_CONFIGURED,
    ProvisionState.RUNTIME_CONFIGURED,
    ProvisionState.PROXY_CONFIGURED,
    ProvisionState.COMPLETE,
]


@dataclass
class ProvisionOptions:
    """
    Global options for a provisioning run.
    """
    bootstrap_user: str = "root"
    operator_user: str = DEFAULT_USER
    command_timeout: Optional[float] = None    # None blocks until each command ends
    auth: SSHAuth = field(default_factory=SSHAuth)


@dataclass
class ProvisionOutcome:
    state: ProvisionState = ProvisionState.UNAUTHENTICATED
    transitions: List[ProvisionState] = field(default_factory=lambda: [ProvisionState.UNAUTHENTICATED])
    failed_at: Optional[ProvisionState] = None   # state the run could not reach
    error: Optional[BaseException] = None
    public_key: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is ProvisionState.COMPLETE

    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def reached(self, state: ProvisionState) -> bool:
        return state in self.transitions
