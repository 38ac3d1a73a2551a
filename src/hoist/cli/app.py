# src/hoist/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml

from hoist.bootstrap.errors import (
    AuthenticationError,
    InputError,
    PersistenceError,
    StageFailure,
)
from hoist.bootstrap.models import ProvisionOptions, ProvisionOutcome, ProvisionState
from hoist.bootstrap.node.models import SSHAuth
from hoist.bootstrap.provisioner import Provisioner
from hoist.bootstrap.stages.catalog import DEFAULT_USER
from hoist.cli.prompts import collect_value, validate_email, validate_ipv4
from hoist.config.loader import DEFAULT_PROFILE, load_config, profile_path
from hoist.config.store import CERT_EMAIL, SERVER_ADDRESS, ProfileStore
from hoist.logging.log import init_logging
from hoist.observers.console import ConsoleObserver
from hoist.observers.dispatcher import EventBus
from hoist.observers.jsonfile import JsonFileObserver
from hoist.observers.logger import LoggerObserver
from hoist.observers.events import new_ctx

# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Turn a freshly rented VPS into a host ready for your apps")

PHASES = {
    ProvisionState.BOOTSTRAP_AUTHENTICATED: "logging in with the bootstrap account",
    ProvisionState.ACCOUNT_CREATED: "creating the operating account",
    ProvisionState.OPERATIONAL_AUTHENTICATED: "logging in with the new account",
    ProvisionState.BASE_CONFIGURED: "setting up the VPS",
    ProvisionState.RUNTIME_CONFIGURED: "setting up Docker",
    ProvisionState.PROXY_CONFIGURED: "setting up Traefik",
    ProvisionState.COMPLETE: "saving the local configuration",
}


def report_failure(outcome: ProvisionOutcome, log_path: Path) -> None:
    err = outcome.error
    phase = PHASES.get(outcome.failed_at, str(outcome.failed_at))
    typer.echo("")
    typer.secho(f"Provisioning failed while {phase}", fg=typer.colors.RED, bold=True, err=True)
    typer.secho(f"  {err}", fg=typer.colors.RED, err=True)

    if isinstance(err, StageFailure) and err.result.output.strip():
        tail = err.result.output.strip().splitlines()[-20:]
        typer.echo("  Command output (last lines):", err=True)
        for line in tail:
            typer.echo(f"    {line}", err=True)
    elif isinstance(err, AuthenticationError) and err.phase == "operational":
        typer.echo("  The account was created but logging in with it was refused.", err=True)
    elif isinstance(err, PersistenceError):
        typer.echo("  The host is configured but these values were not saved:", err=True)
        for key, value in sorted(err.values.items()):
            typer.echo(f"    {key}: {value}", err=True)
        typer.echo(f"  Add them to {err.path} by hand.", err=True)

    typer.echo(f"  Full log: {log_path}", err=True)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def init(
    server: Optional[str] = typer.Option(None, "--server", "-s", help="Set the IP address of your Server"),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="An email address to be used for SSL certs"),
    profile: str = typer.Option(DEFAULT_PROFILE, "--profile", "-p", help="Config profile to read and write"),
    ssh_key: Optional[Path] = typer.Option(None, "--ssh-key", help="Private key to log in with"),
    bootstrap_user: str = typer.Option("root", "--bootstrap-user"),
    user: str = typer.Option(DEFAULT_USER, "--user", help="Account to create on the VPS"),
    command_timeout: Optional[float] = typer.Option(
        None, "--command-timeout", help="Fail a remote command that runs longer than this (seconds)"
    ),
    debug: bool = typer.Option(False, "--debug"),
):
    """
    Configure your VPS to host your apps.
    """
    try:
        store = ProfileStore.load(profile)
    except (ValueError, yaml.YAMLError) as e:
        typer.secho(f"Config at {profile_path(profile)} is invalid:\n{e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    try:
        server = collect_value(
            "Please enter the IPv4 Address of your VPS",
            server or store.get(SERVER_ADDRESS),
            validate_ipv4,
        )
        email = collect_value(
            "Please enter an email for use with TLS certs",
            email or store.get(CERT_EMAIL),
            validate_email,
        )
    except InputError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    logger, run_id, log_path = init_logging(verbose=debug)

    bus = EventBus(
        observers=[
            ConsoleObserver(),
            LoggerObserver(logger),
            JsonFileObserver(log_path.with_suffix(".jsonl")),
        ]
    )
    options = ProvisionOptions(
        bootstrap_user=bootstrap_user,
        operator_user=user,
        command_timeout=command_timeout,
        auth=SSHAuth(pkey_path=ssh_key),
    )

    typer.echo("")
    typer.secho("hoist booting up!", bold=True)
    typer.echo(f"  Host     : {server}")
    typer.echo(f"  Run ID   : {run_id}")
    typer.echo(f"  Logs     : {log_path}")
    typer.echo("")

    provisioner = Provisioner(
        server,
        email,
        store,
        options=options,
        bus=bus,
        run_ctx=new_ctx(env=profile, context=server, run_id=run_id),
    )
    try:
        outcome = provisioner.run()
    except KeyboardInterrupt:
        typer.secho("\nAborted. The host may be partially configured.", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(130)

    if not outcome.ok:
        report_failure(outcome, log_path)
        raise typer.Exit(outcome.exit_code())

    typer.echo("")
    typer.secho("Your VPS is ready! You can now deploy your apps to it.", fg=typer.colors.GREEN, bold=True)


@app.command("config")
def show_config(
    profile: str = typer.Option(DEFAULT_PROFILE, "--profile", "-p"),
):
    """
    Show what `hoist init` saved for a profile.
    """
    path = profile_path(profile)
    if not path.is_file():
        typer.secho(f"No config found at {path}. Run `hoist init` first.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    try:
        settings = load_config(path)
    except (ValueError, yaml.YAMLError) as e:
        typer.secho(f"Config at {path} is invalid:\n{e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    typer.echo(f"Profile  : {profile} ({path})")
    typer.echo(f"Server   : {settings.server_address}")
    typer.echo(f"Email    : {settings.cert_email}")
    typer.echo(f"Age key  : {settings.public_key or '-'}")
