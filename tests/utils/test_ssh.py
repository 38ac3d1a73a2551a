import socket

import paramiko
import pytest

from hoist.bootstrap.errors import AuthenticationError
from hoist.bootstrap.node.models import Host, SSHAuth
import hoist.utils.ssh as ssh_mod
from hoist.utils.ssh_runner import SSHRunner


class FakeSSHClient:
    def __init__(self, log, error=None):
        self.log = log
        self.error = error
    def load_system_host_keys(self): pass
    def set_missing_host_key_policy(self, policy):
        self.log.append(("policy", type(policy).__name__))
    def connect(self, **kw):
        self.log.append(("connect", kw))
        if self.error:
            raise self.error
    def close(self):
        self.log.append(("close",))


def _patch(monkeypatch, log, error=None):
    monkeypatch.setattr(ssh_mod.paramiko, "SSHClient", lambda: FakeSSHClient(log, error))


def test_open_ssh_returns_runner_after_handshake(monkeypatch):
    log = []
    _patch(monkeypatch, log)
    runner = ssh_mod.open_ssh(Host(address="10.0.0.5", username="root"), SSHAuth(connect_timeout=5))

    assert isinstance(runner, SSHRunner)
    assert runner.username == "root"
    assert ("policy", "AutoAddPolicy") in log
    kw = next(e[1] for e in log if e[0] == "connect")
    assert kw["hostname"] == "10.0.0.5"
    assert kw["username"] == "root"
    assert kw["port"] == 22
    assert kw["timeout"] == 5
    assert kw["allow_agent"] is True
    assert kw["pkey"] is None


@pytest.mark.parametrize(
    "error, reason",
    [
        (paramiko.AuthenticationException("denied"), "credentials rejected"),
        (paramiko.SSHException("banner"), "handshake failed"),
        (socket.timeout("timed out"), "unreachable"),
        (ConnectionRefusedError(111, "refused"), "unreachable"),
    ],
)
def test_open_ssh_maps_failures_to_authentication_error(monkeypatch, error, reason):
    log = []
    _patch(monkeypatch, log, error)
    with pytest.raises(AuthenticationError) as exc:
        ssh_mod.open_ssh(Host(address="10.0.0.5", username="hoist"))
    assert exc.value.host == "10.0.0.5"
    assert exc.value.username == "hoist"
    assert reason in exc.value.reason
    assert ("close",) in log
    # no retry
    assert sum(1 for e in log if e[0] == "connect") == 1


def test_unreadable_key_file_is_authentication_error(monkeypatch, tmp_path):
    _patch(monkeypatch, [])
    with pytest.raises(AuthenticationError) as exc:
        ssh_mod.open_ssh(Host(address="10.0.0.5", username="root", pkey_path=tmp_path / "missing"))
    assert "key file" in exc.value.reason
