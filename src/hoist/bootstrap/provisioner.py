# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/bootstrap/provisioner.py

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from hoist.bootstrap.errors import AuthenticationError, HoistError, InputError, StageFailure
from hoist.bootstrap.keys import extract_public_key
from hoist.bootstrap.models import ProvisionOptions, ProvisionOutcome, ProvisionState
from hoist.bootstrap.node.models import Host
from hoist.bootstrap.stages.catalog import (
    base_setup_stage,
    docker_stage,
    keygen_command,
    traefik_stage,
    user_setup_stage,
)
from hoist.bootstrap.stages.runner import run_stage
from hoist.config.store import CERT_EMAIL, PUBLIC_KEY, SERVER_ADDRESS, ProfileStore
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import (
    ConfigPersisted,
    FactExtracted,
    ProvisionSummary,
    SessionClosed,
    SessionFailed,
    SessionOpened,
    StateChanged,
    new_ctx,
)
from hoist.utils.ssh import open_ssh
from hoist.utils.ssh_runner import SSHRunner

log = logging.getLogger("hoist")

S = ProvisionState


class Provisioner:
    """
    Turns one freshly rented host into an application host.

    Flow:
      - log in as the bootstrap account and create the operating account
      - log in again as the operating account (bootstrap session is closed first)
      - base setup + age key generation, Docker, Traefik, strictly in order
      - write address, cert email and public key to the profile

    The first failure ends the run. Nothing is retried or rolled back and the
    profile is only written after every stage succeeded.
    """

    def __init__(
        self,
        address: str,
        cert_email: str,
        store: ProfileStore,
        *,
        options: Optional[ProvisionOptions] = None,
        connect: Callable[..., SSHRunner] = open_ssh,
        bus: Optional[EventBus] = None,
        run_ctx: Optional[dict] = None,
    ):
        if not (cert_email or "").strip():
            raise InputError("An email is needed before you proceed")
        self.options = options or ProvisionOptions()
        self.host = Host(address=address, username=self.options.bootstrap_user)
        self.cert_email = cert_email.strip()
        self.store = store
        self.connect = connect
        self.bus = bus or EventBus()
        self.run_ctx = run_ctx or new_ctx(env="default", context=address)

        self._bootstrap: Optional[SSHRunner] = None
        self._operational: Optional[SSHRunner] = None
        self._public_key: Optional[str] = None
        self._outcome = ProvisionOutcome()

    # ------------------ public API ------------------

    def run(self) -> ProvisionOutcome:
        self._outcome = outcome = ProvisionOutcome()
        self._public_key = None

        steps: List[Tuple[ProvisionState, Callable[[], None]]] = [
            (S.BOOTSTRAP_AUTHENTICATED, self._open_bootstrap),
            (S.ACCOUNT_CREATED, self._create_account),
            (S.OPERATIONAL_AUTHENTICATED, self._open_operational),
            (S.BASE_CONFIGURED, self._configure_base),
            (S.RUNTIME_CONFIGURED, self._configure_runtime),
            (S.PROXY_CONFIGURED, self._configure_proxy),
            (S.COMPLETE, self._persist),
        ]
        try:
            for target, step in steps:
                try:
                    step()
                except HoistError as e:
                    self._fail(target, e)
                    break
                self._advance(target)
        finally:
            self._close_all()

        self.bus.emit(
            ProvisionSummary(
                status=outcome.state.value,
                failed_at=outcome.failed_at.value if outcome.failed_at else None,
                error=str(outcome.error) if outcome.error else None,
                **self.run_ctx,
            )
        )
        return outcome

    # ------------------ transitions ------------------

    def _open_bootstrap(self) -> None:
        self._bootstrap = self._login(self.host, phase="bootstrap")

    def _create_account(self) -> None:
        stage = user_setup_stage(self.options.operator_user, self.options.bootstrap_user)
        run_stage(stage, self._bootstrap, **self._stage_kwargs())

    def _open_operational(self) -> None:
        self._close("_bootstrap")
        self._operational = self._login(self.host.with_user(self.options.operator_user), phase="operational")

    def _configure_base(self) -> None:
        stage = base_setup_stage()
        run_stage(stage, self._operational, **self._stage_kwargs())

        result = self._operational.execute(keygen_command(), capture=True, timeout=self.options.command_timeout)
        if not result.ok:
            raise StageFailure(stage.name, len(stage), result.command, result)
        self._public_key = extract_public_key(result.output)
        self._outcome.public_key = self._public_key
        log.info("[keys] age public key %s", self._public_key)
        self.bus.emit(FactExtracted(name="publicKey", value=self._public_key, **self.run_ctx))

    def _configure_runtime(self) -> None:
        run_stage(docker_stage(self.options.operator_user), self._operational, **self._stage_kwargs())

    def _configure_proxy(self) -> None:
        run_stage(traefik_stage(self.cert_email), self._operational, **self._stage_kwargs())

    def _persist(self) -> None:
        self.store.set(SERVER_ADDRESS, self.host.address)
        self.store.set(CERT_EMAIL, self.cert_email)
        self.store.set(PUBLIC_KEY, self._public_key)
        self.store.persist()
        log.info("[config] saved %s", self.store.path)
        self.bus.emit(ConfigPersisted(path=str(self.store.path), **self.run_ctx))

    # ------------------ helpers ------------------

    def _stage_kwargs(self) -> dict:
        return {"bus": self.bus, "run_ctx": self.run_ctx, "timeout": self.options.command_timeout}

    def _login(self, host: Host, *, phase: str) -> SSHRunner:
        log.info("[ssh] logging in to %s as %s", host.address, host.username)
        try:
            runner = self.connect(host, self.options.auth)
        except AuthenticationError as e:
            e.phase = phase
            self.bus.emit(SessionFailed(username=host.username, error=str(e), **self.run_ctx))
            raise
        self.bus.emit(SessionOpened(username=host.username, **self.run_ctx))
        return runner

    def _advance(self, state: ProvisionState) -> None:
        previous = self._outcome.state
        self._outcome.state = state
        self._outcome.transitions.append(state)
        log.debug("[state] %s -> %s", previous.value, state.value)
        self.bus.emit(StateChanged(state=state.value, previous=previous.value, **self.run_ctx))

    def _fail(self, target: ProvisionState, error: HoistError) -> None:
        previous = self._outcome.state
        self._outcome.state = S.FAILED
        self._outcome.failed_at = target
        self._outcome.error = error
        log.error("[state] %s failed: %s", target.value, error)
        self.bus.emit(StateChanged(state=S.FAILED.value, previous=previous.value, **self.run_ctx))

    def _close(self, attr: str) -> None:
        runner = getattr(self, attr)
        if runner is None:
            return
        setattr(self, attr, None)
        runner.close()
        self.bus.emit(SessionClosed(username=getattr(runner, "username", ""), **self.run_ctx))

    def _close_all(self) -> None:
        self._close("_bootstrap")
        self._close("_operational")
