"""Docker Compose service stack setup.

Copies the selected compose profile, starts the containers, waits for the
database port to accept connections and provisions the database roles the
application connects with. A missing container engine skips the whole
stack instead of failing the run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from railsforge.config import Config
from railsforge.operations.engine import FileOperationEngine
from railsforge.operations.env_files import seed_env_files
from railsforge.plan.flags import COMPOSE_FILE, CONTAINER_PROFILES
from railsforge.plan.models import ActionDescriptor, CommandInvocation, ErrorKind, StepResult
from railsforge.runner.commands import CommandRunner
from railsforge.utils import command_exists, print_info, wait_for_port

COMPOSE_UP = CommandInvocation(
    argv=("docker", "compose", "--profile", "essential", "up", "-d"),
    description="Start Docker containers",
    fatal=False,
)

# Host tools the containerised workflow expects, keyed by the binary that
# proves they are installed.
HOST_TOOLS: dict[str, CommandInvocation] = {
    "direnv": CommandInvocation(
        argv=("brew", "install", "direnv"), description="Install direnv", fatal=False
    ),
    "createuser": CommandInvocation(
        argv=("brew", "install", "postgresql@15"),
        description="Install PostgreSQL client tools",
        fatal=False,
    ),
}


def published_database_port(compose_path: Path, service: str = "postgres") -> int | None:
    """Return the host port *service* publishes in a compose file, if any."""
    try:
        data: Any = yaml.safe_load(compose_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return None
    if not isinstance(data, dict):
        return None

    definition = (data.get("services") or {}).get(service)
    if not isinstance(definition, dict):
        return None

    for entry in definition.get("ports") or []:
        if isinstance(entry, dict):
            published = str(entry.get("published", ""))
        else:
            parts = str(entry).split(":")
            if len(parts) < 2:
                continue
            published = parts[-2]
        published = published.split("/")[0].strip()
        if published.isdigit():
            return int(published)
    return None


class ContainerStack:
    """Sets up and starts one container profile for the application."""

    def __init__(
        self,
        engine: FileOperationEngine,
        runner: CommandRunner,
        config: Config,
    ) -> None:
        self.engine = engine
        self.runner = runner
        self.config = config

    async def setup(self, action: ActionDescriptor) -> list[StepResult]:
        """Apply the profile's files, then start and provision the services."""
        if not command_exists("docker"):
            return [
                StepResult.failure(
                    ErrorKind.ENGINE_MISSING,
                    f"Docker is not installed. Please install Docker to apply changes for {action.flag}",
                )
            ]

        services = CONTAINER_PROFILES.get(action.container_profile or "", "")
        print_info(f"  Configuring Docker with {services} for {action.flag}")
        results = self.engine.apply_all(action.operations)

        for binary, install in HOST_TOOLS.items():
            if not command_exists(binary):
                results.append(await self.runner.run(install))

        results.extend(await seed_env_files(self.engine, self.runner))
        results.extend(await self.start())
        return results

    async def start(self) -> list[StepResult]:
        """Start the containers and provision database roles once reachable."""
        print_info("  Initializing Docker containers")
        started = await self.runner.run(COMPOSE_UP)
        if not started.ok:
            return [started]

        database = self.config.database
        port = published_database_port(self.engine.target_root / COMPOSE_FILE) or database.port
        readiness = self.config.readiness
        ready = await wait_for_port(
            database.host,
            port,
            timeout=readiness.timeout,
            interval=readiness.interval,
            backoff=readiness.backoff,
            max_interval=readiness.max_interval,
        )
        if not ready:
            return [
                started,
                StepResult.failure(
                    ErrorKind.NOT_READY,
                    f"Database at {database.host}:{port} not ready after "
                    f"{readiness.timeout:g}s; skipping role provisioning",
                ),
            ]

        results = [started]
        for role in database.provisioned_roles:
            results.append(await self.provision_role(role, port))
        return results

    async def provision_role(self, role: str, port: int) -> StepResult:
        database = self.config.database
        invocation = CommandInvocation(
            argv=(
                "createuser", "--createdb", "--no-createrole", "--superuser", role,
                "-h", database.host, "-p", str(port), "-U", database.os_user,
            ),
            description=f"Create database role {role}",
            capture_output=True,
            fatal=False,
        )
        result = await self.runner.run(invocation)
        if result.ok:
            return result
        return StepResult.failure(ErrorKind.PROVISION_FAILED, result.message)
