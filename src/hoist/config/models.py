# src/hoist/config/models.py

import ipaddress
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HoistSettings(BaseModel):
    """Values a provisioned host leaves behind in the profile file."""

    model_config = ConfigDict(populate_by_name=True)

    server_address: str = Field(alias="serverAddress")
    cert_email: str = Field(alias="certEmail")
    public_key: Optional[str] = Field(default=None, alias="publicKey")

    @field_validator("server_address")
    @classmethod
    def _ipv4(cls, v: str) -> str:
        ipaddress.IPv4Address(v.strip())
        return v.strip()

    @field_validator("cert_email")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("certEmail must not be empty")
        return v.strip()
