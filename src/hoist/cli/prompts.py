# src/hoist/cli/prompts.py

from __future__ import annotations

import ipaddress
from typing import Callable, Optional

import typer

from hoist.bootstrap.errors import InputError


def validate_ipv4(value: Optional[str]) -> str:
    value = (value or "").strip()
    try:
        return str(ipaddress.IPv4Address(value))
    except ipaddress.AddressValueError as e:
        raise InputError(f"You entered an incorrect IP Address - {value!r}") from e


def validate_email(value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise InputError("An email is needed before you proceed")
    return value


def collect_value(
    label: str,
    preset: Optional[str],
    validator: Callable[[Optional[str]], str],
    *,
    interactive: bool = True,
) -> str:
    """
    Use ``preset`` when given, otherwise ask. Invalid or missing values raise
    InputError; there is no re-prompt loop.
    """
    value = preset
    if not value and interactive:
        value = typer.prompt(label, default="", show_default=False)
    return validator(value)
