"""railsforge configuration.

Centralised, typed configuration for a scaffolding run. All settings use
Pydantic v2 models so they can be validated at construction time and loaded
from environment variables without boiler-plate.
"""

from __future__ import annotations

import getpass
import os
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TEMPLATE_SOURCE = (
    "https://github.com/IsraelDCastro/rails-vite-tailwindcss-template.git"
)


def _current_user() -> str:
    """Return the OS user name, preferring ``$USER``."""
    user = os.environ.get("USER")
    if user:
        return user
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "postgres"


class DatabaseConfig(BaseModel):
    """Connection settings used when provisioning database roles.

    ``user`` follows the same precedence the generated ``database.yml``
    uses: ``DATABASE_USER``, then the OS user, then ``postgres``.
    """

    user: str = Field(default="postgres")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5432, ge=1, le=65535)
    os_user: str = Field(default_factory=_current_user)
    roles: list[str] = Field(
        default=["postgres", "root"],
        description="Superuser roles created after the containers start",
    )

    @property
    def provisioned_roles(self) -> list[str]:
        """The configured roles plus ``user``, the role ``database.yml`` connects as."""
        return list(dict.fromkeys([*self.roles, self.user]))

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        os_user = _current_user()
        kwargs: dict[str, Any] = {
            "user": os.environ.get("DATABASE_USER") or os_user or "postgres",
            "os_user": os_user,
        }
        if os.environ.get("DATABASE_HOST"):
            kwargs["host"] = os.environ["DATABASE_HOST"]
        if os.environ.get("DATABASE_PORT"):
            kwargs["port"] = int(os.environ["DATABASE_PORT"])
        return cls(**kwargs)


class ReadinessConfig(BaseModel):
    """Bounded polling used to wait for a freshly started service."""

    timeout: float = Field(default=60.0, gt=0, description="Give up after this many seconds")
    interval: float = Field(default=0.5, gt=0, description="Delay before the second attempt")
    backoff: float = Field(default=2.0, ge=1.0, description="Multiplier applied to the delay")
    max_interval: float = Field(default=5.0, gt=0)


class Config(BaseModel):
    """Global railsforge configuration.

    Created once by the CLI entry point (or by tests) and passed through the
    rest of the system inside the run context.
    """

    template_source: str = Field(default=DEFAULT_TEMPLATE_SOURCE)
    app_name: str = Field(default="")
    command_timeout: int = Field(
        default=1800, ge=1, description="Per-command timeout in seconds"
    )
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            RAILSFORGE_TEMPLATE_SOURCE, RAILSFORGE_COMMAND_TIMEOUT,
            RAILSFORGE_READINESS_TIMEOUT, DATABASE_USER, DATABASE_HOST,
            DATABASE_PORT, USER.
        """
        kwargs: dict[str, Any] = {"database": DatabaseConfig.from_env()}
        if os.environ.get("RAILSFORGE_TEMPLATE_SOURCE"):
            kwargs["template_source"] = os.environ["RAILSFORGE_TEMPLATE_SOURCE"]
        if os.environ.get("RAILSFORGE_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["RAILSFORGE_COMMAND_TIMEOUT"])
        if os.environ.get("RAILSFORGE_READINESS_TIMEOUT"):
            kwargs["readiness"] = ReadinessConfig(
                timeout=float(os.environ["RAILSFORGE_READINESS_TIMEOUT"])
            )
        return cls(**kwargs)
