# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/bootstrap/stages/catalog.py
"""
Factories for the stages that turn a fresh VPS into an application host.

Every command is written so that running the stage again on a host that
already went through it is harmless.
"""

from __future__ import annotations

import yaml

from hoist.bootstrap.errors import InputError
from hoist.utils.ssh_runner import shq

from .models import Stage

DEFAULT_USER = "hoist"
DOCKER_NETWORK = "hoist"
TRAEFIK_IMAGE = "traefik:v3.1"
SOPS_VERSION = "v3.9.0"

AGE_KEY_DIR = "$HOME/.config/sops/age"
AGE_KEY_FILE = f"{AGE_KEY_DIR}/keys.txt"

_APT = "sudo DEBIAN_FRONTEND=noninteractive apt-get"


def user_setup_stage(username: str = DEFAULT_USER, bootstrap_user: str = "root") -> Stage:
    """
    Runs as the bootstrap account. Root runs the commands directly; any other
    bootstrap account (e.g. "ubuntu" on cloud images) goes through sudo.
    The new account trusts the same keys the bootstrap account logged in with.
    """
    sudo = "" if bootstrap_user == "root" else "sudo "
    home = f"/home/{username}"
    return Stage(
        name=f"Adding user {username}",
        commands=(
            f"id -u {username} >/dev/null 2>&1 || {sudo}useradd --create-home --shell /bin/bash {username}",
            f"{sudo}usermod -aG sudo {username}",
            f"echo '{username} ALL=(ALL) NOPASSWD:ALL' | {sudo}tee /etc/sudoers.d/{username} >/dev/null",
            f"{sudo}chmod 440 /etc/sudoers.d/{username}",
            f"{sudo}install -d -m 700 -o {username} -g {username} {home}/.ssh",
            f"{sudo}install -m 600 -o {username} -g {username} $HOME/.ssh/authorized_keys {home}/.ssh/authorized_keys",
        ),
        success_message=f"User {username} created",
        failure_message=f"Failed to create user {username}",
    )


def base_setup_stage() -> Stage:
    sops_url = (
        f"https://github.com/getsops/sops/releases/download/{SOPS_VERSION}/"
        f"sops-{SOPS_VERSION}.linux.amd64"
    )
    return Stage(
        name="Setting up VPS",
        commands=(
            f"{_APT} update -y",
            f"{_APT} upgrade -y",
            f"{_APT} install -y curl ca-certificates ufw age",
            "command -v sops >/dev/null 2>&1 || "
            f"(curl -fsSL -o /tmp/sops {sops_url} && sudo install -m 755 /tmp/sops /usr/local/bin/sops && rm -f /tmp/sops)",
            "sudo ufw allow OpenSSH",
            "sudo ufw allow 80/tcp",
            "sudo ufw allow 443/tcp",
            "sudo ufw --force enable",
        ),
        success_message="VPS updated and base packages installed",
        failure_message="Failed to set up the VPS",
    )


def docker_stage(username: str = DEFAULT_USER) -> Stage:
    return Stage(
        name="Setting up Docker",
        commands=(
            "command -v docker >/dev/null 2>&1 || (curl -fsSL https://get.docker.com | sudo sh)",
            f"sudo usermod -aG docker {username}",
            "sudo systemctl enable --now docker",
            f"sudo docker network inspect {DOCKER_NETWORK} >/dev/null 2>&1 || "
            f"sudo docker network create {DOCKER_NETWORK}",
        ),
        success_message="Docker installed",
        failure_message="Failed to install Docker",
    )


def traefik_config(email: str) -> dict:
    return {
        "entryPoints": {
            "web": {
                "address": ":80",
                "http": {
                    "redirections": {
                        "entryPoint": {"to": "websecure", "scheme": "https"},
                    },
                },
            },
            "websecure": {"address": ":443"},
        },
        "providers": {
            "docker": {"exposedByDefault": False, "network": DOCKER_NETWORK},
        },
        "certificatesResolvers": {
            "default": {
                "acme": {
                    "email": email,
                    "storage": "/acme.json",
                    "tlsChallenge": {},
                },
            },
        },
    }


def traefik_compose() -> dict:
    return {
        "services": {
            "traefik": {
                "image": TRAEFIK_IMAGE,
                "container_name": "traefik",
                "restart": "unless-stopped",
                "ports": ["80:80", "443:443"],
                "volumes": [
                    "/var/run/docker.sock:/var/run/docker.sock:ro",
                    "./traefik.yml:/etc/traefik/traefik.yml:ro",
                    "./acme.json:/acme.json",
                ],
                "networks": [DOCKER_NETWORK],
            },
        },
        "networks": {DOCKER_NETWORK: {"external": True}},
    }


def traefik_stage(email: str) -> Stage:
    """Reverse proxy with Let's Encrypt certificates issued to ``email``."""
    email = (email or "").strip()
    if not email:
        raise InputError("An email is needed for TLS certificates")

    config_yaml = yaml.safe_dump(traefik_config(email), sort_keys=False)
    compose_yaml = yaml.safe_dump(traefik_compose(), sort_keys=False)
    return Stage(
        name="Setting up Traefik",
        commands=(
            "mkdir -p $HOME/traefik",
            f"printf '%s' {shq(config_yaml)} > $HOME/traefik/traefik.yml",
            f"printf '%s' {shq(compose_yaml)} > $HOME/traefik/docker-compose.yml",
            "touch $HOME/traefik/acme.json",
            "chmod 600 $HOME/traefik/acme.json",
            "cd $HOME/traefik && sudo docker compose up -d",
        ),
        success_message="Traefik running with TLS",
        failure_message="Failed to set up Traefik",
    )


def keygen_command() -> str:
    """
    Generate the age key pair used by sops. An existing key is kept and its
    public half is printed in the same format age-keygen uses.
    """
    return (
        f"mkdir -p {AGE_KEY_DIR} && "
        f"if [ -f {AGE_KEY_FILE} ]; then "
        f"echo \"Public key: $(age-keygen -y {AGE_KEY_FILE})\"; "
        f"else age-keygen -o {AGE_KEY_FILE} 2>&1; fi"
    )
