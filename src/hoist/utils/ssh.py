# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import socket
from pathlib import Path
from typing import Optional

import paramiko

from hoist.bootstrap.errors import AuthenticationError
from hoist.bootstrap.node.models import Host, SSHAuth
from hoist.utils.ssh_runner import SSHRunner

log = logging.getLogger("hoist")


def load_private_key(path: Path) -> paramiko.PKey:
    key_path = str(path)
    for key_cls in (
        paramiko.Ed25519Key,
        paramiko.RSAKey,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key_file(key_path)
        except paramiko.SSHException:
            continue
    raise AuthenticationError("-", "-", f"Unsupported private key format for {key_path}")


def open_ssh(host: Host, auth: Optional[SSHAuth] = None) -> SSHRunner:
    """
    Connect and authenticate. Returns only after the handshake has completed.

    Unreachable hosts, rejected credentials and protocol errors all surface
    as AuthenticationError. Nothing is retried.
    """
    auth = auth or SSHAuth()
    client = paramiko.SSHClient()
    client.load_system_host_keys()
    # freshly rented machines have no known host key yet
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = None
    key_path = host.pkey_path or auth.pkey_path
    if key_path:
        try:
            pkey = load_private_key(key_path)
        except AuthenticationError as e:
            raise AuthenticationError(host.address, host.username, e.reason) from e
        except OSError as e:
            raise AuthenticationError(
                host.address, host.username, f"cannot read key file {key_path}: {e}"
            ) from e

    log.debug("[ssh] connecting to %s@%s:%d", host.username, host.address, host.port)
    try:
        client.connect(
            hostname=host.address,
            port=host.port,
            username=host.username,
            password=host.password if not pkey else None,
            pkey=pkey,
            timeout=auth.connect_timeout,
            allow_agent=auth.allow_agent,
            look_for_keys=auth.look_for_keys,
        )
    except paramiko.AuthenticationException as e:
        client.close()
        raise AuthenticationError(host.address, host.username, f"credentials rejected ({e})") from e
    except paramiko.SSHException as e:
        client.close()
        raise AuthenticationError(host.address, host.username, f"SSH handshake failed ({e})") from e
    except (socket.timeout, OSError) as e:
        client.close()
        raise AuthenticationError(host.address, host.username, f"host unreachable ({e})") from e

    log.debug("[ssh] authenticated as %s@%s", host.username, host.address)
    return SSHRunner(client, host=host.address, username=host.username)
