"""Data models for the load generator."""
from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

_PORT_PATTERN = re.compile(r"[0-9]+")


class ServerTarget(BaseModel):
    """Resolver endpoint under test, as given on the command line."""
    host: str = Field(min_length=1)
    port: int = Field(ge=0, le=65535)

    model_config = ConfigDict(frozen=True)

    @field_validator("port", mode="before")
    @classmethod
    def _unsigned_port(cls, value: object) -> object:
        if isinstance(value, str):
            text = value.strip()
            if not _PORT_PATTERN.fullmatch(text):
                raise ValueError(f"port must be an unsigned integer, got {value!r}")
            return int(text)
        return value


class ResolvedServer(BaseModel):
    """Server endpoint with its host resolved to a literal address."""
    address: str
    port: int = Field(ge=0, le=65535)
    host: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if ":" in self.address:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


class StatsSnapshot(BaseModel):
    """Point-in-time view of the request counters."""
    requests: int = Field(default=0, ge=0)
    successes: int = Field(default=0, ge=0)
    failures: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    def summary(self) -> str:
        return (
            f"requests: {self.requests}/{self.successes}/{self.failures} "
            "(total/successes/failures)"
        )
