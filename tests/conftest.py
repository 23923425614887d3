"""Shared pytest fixtures for the railsforge test suite.

Provides reusable fixtures for:
- A template asset bundle laid out like the upstream template repository
- A freshly generated Rails application tree
- A recording command runner that never spawns processes
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from railsforge.config import Config, DatabaseConfig, ReadinessConfig
from railsforge.plan.models import CommandInvocation, ErrorKind, StepResult
from railsforge.runner.commands import CommandError, CommandRunner


# ---------------------------------------------------------------------------
# Template bundle
# ---------------------------------------------------------------------------

COMPOSE_TEMPLATE = textwrap.dedent("""\
    services:
      postgres:
        image: postgres:15
        profiles: ["essential"]
        ports:
          - "{port}:5432"
      redis:
        image: redis:7
        profiles: ["essential"]
        ports:
          - "6379:6379"
""")

TEMPLATE_FILES: dict[str, str] = {
    "template.rb": "# upstream template entry point\n",
    ".node-version": "20.11.0\n",
    "Procfile.dev": "vite: bin/vite dev\nweb: bin/rails s\n",
    "jsconfig.json": "{}\n",
    "tailwind.config.js": "module.exports = {}\n",
    "postcss.config.js": "module.exports = {}\n",
    ".env.development": "DATABASE_HOST=127.0.0.1\n",
    ".env.test": "DATABASE_HOST=127.0.0.1\n",
    ".envrc": "dotenv .env.development\n",
    "vite.config.ts": "// normal\n",
    "vite.config-react.ts": "// react\n",
    "vite.config-vue.ts": "// vue\n",
    ".eslintrc.json": '{"variant": "normal"}\n',
    ".eslintrc-react.json": '{"variant": "react"}\n',
    ".eslintrc-vue.json": '{"variant": "vue"}\n',
    "app/frontend/entrypoints/application.js": 'import "./main.scss";\n',
    "app/frontend/entrypoints/main.scss": "@tailwind base;\n",
    "app-react/frontend/entrypoints/application.js": 'import "./main.scss";\nimport React from "react";\n',
    "app-react/frontend/components/App.jsx": "export default () => null;\n",
    "app-vue/frontend/entrypoints/application.js": 'import "./main.scss";\nimport { createApp } from "vue";\n',
    "app-vue/frontend/components/App.vue": "<template></template>\n",
    "hotwired-generator/stimulus/stimulus_generator.rb": "# stimulus generator\n",
    "config/vite.json": '{"all": {"sourceCodeDir": "app/frontend"}}\n',
    "lib/templates/erb/scaffold/index.html.erb.txt": "<h1>Index</h1>\n",
    "lib/templates/erb/scaffold/_form.html.erb.txt": "<form></form>\n",
    "lib/tasks/annotate.rake": "# annotate\n",
    "script/setup": "#!/bin/sh\n",
    "docker-compose.yml": COMPOSE_TEMPLATE.format(port=5432),
    "docker-compose.essential.yml": COMPOSE_TEMPLATE.format(port=5433),
    "docker-compose.with-admin.yml": COMPOSE_TEMPLATE.format(port=5434),
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A local template bundle with every asset the plan refers to."""
    return write_tree(tmp_path / "template", TEMPLATE_FILES)


# ---------------------------------------------------------------------------
# Generated Rails application
# ---------------------------------------------------------------------------

RAILS_FILES: dict[str, str] = {
    "Gemfile": 'source "https://rubygems.org"\n',
    "config/application.rb": textwrap.dedent("""\
        module MyApp
          class Application < Rails::Application
            # Initialize configuration defaults for originally generated Rails version.
            config.load_defaults 7.0
          end
        end
    """),
    "config/routes.rb": "Rails.application.routes.draw do\nend\n",
    "config/database.yml": textwrap.dedent("""\
        default: &default
          adapter: postgresql
          encoding: unicode
    """),
    ".gitignore": "/.env*\n/public/assets\n",
    "app/controllers/application_controller.rb": (
        "class ApplicationController < ActionController::Base\nend\n"
    ),
    "app/models/user.rb": textwrap.dedent("""\
        class User < ApplicationRecord
          devise :database_authenticatable, :registerable,
                 :recoverable, :rememberable, :validatable
        end
    """),
}


@pytest.fixture
def rails_app(tmp_path: Path) -> Path:
    """A directory standing in for the output of ``rails new``."""
    return write_tree(tmp_path / "my_app", RAILS_FILES)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def test_config(template_dir: Path) -> Config:
    """Config pointing at the local template bundle with fast readiness polling."""
    return Config(
        template_source=str(template_dir),
        app_name="my_app",
        database=DatabaseConfig(user="tester", os_user="tester"),
        readiness=ReadinessConfig(timeout=0.2, interval=0.05, max_interval=0.05),
    )


# ---------------------------------------------------------------------------
# Command runner
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_runner() -> MagicMock:
    """A CommandRunner double that records invocations and always succeeds.

    Set ``runner.failures`` to a ``{argv_prefix: returncode}`` mapping to make
    matching invocations fail; fatal ones raise ``CommandError`` like the
    real runner.
    """
    runner = MagicMock(spec=CommandRunner)
    runner.invocations = []
    runner.failures = {}

    async def mock_run(invocation: CommandInvocation) -> StepResult:
        runner.invocations.append(invocation)
        for prefix, returncode in runner.failures.items():
            if invocation.argv[: len(prefix)] == prefix:
                if invocation.fatal:
                    raise CommandError(invocation, returncode, "boom")
                return StepResult.failure(
                    ErrorKind.COMMAND_FAILED, f"{invocation.display} exited with {returncode}"
                )
        return StepResult.success()

    async def mock_run_all(invocations) -> list[StepResult]:
        return [await mock_run(invocation) for invocation in invocations]

    runner.run = AsyncMock(side_effect=mock_run)
    runner.run_all = AsyncMock(side_effect=mock_run_all)
    return runner


@pytest.fixture
def host_tools():
    """Pretend docker, direnv, git and the Postgres client are installed and reachable."""
    with patch("railsforge.runner.containers.command_exists", return_value=True), \
            patch("railsforge.operations.env_files.command_exists", return_value=True), \
            patch("railsforge.runner.vcs.command_exists", return_value=True), \
            patch("railsforge.runner.containers.wait_for_port", AsyncMock(return_value=True)):
        yield
