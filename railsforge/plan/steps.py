"""The fixed steps every scaffolding run executes, independent of flags."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from .models import (
    CommandInvocation,
    CopyFile,
    FileOperation,
    GemSpec,
    InjectText,
    MakeExecutable,
    MergeDirectory,
    RenameSuffix,
)

# ---------------------------------------------------------------------------
# Phase 1: dependencies
# ---------------------------------------------------------------------------

BASE_GEMS: tuple[GemSpec, ...] = (
    GemSpec(name="ruby-vips", requirements=("~> 2.2", ">= 2.2.2")),
    GemSpec(name="annotate", group="development"),
    GemSpec(name="devise"),
    GemSpec(name="name_of_person"),
    GemSpec(name="vite_rails", requirements=("~> 3.0", ">= 3.0.19")),
    GemSpec(name="vite_ruby", requirements=("~> 3.9", ">= 3.9.1")),
)

BUNDLE_INSTALL = CommandInvocation(
    argv=("bundle", "install"), description="Install gems"
)

_GEM_LINE = re.compile(r"""^\s*gem\s+["']([^"']+)["']""", re.MULTILINE)


def declared_gems(gemfile: Path) -> set[str]:
    """Names of the gems a Gemfile already lists; empty if it does not exist."""
    try:
        content = gemfile.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return set()
    return set(_GEM_LINE.findall(content))


def dependency_commands(
    extra_gems: tuple[GemSpec, ...] = (),
    declared: Iterable[str] = (),
) -> list[CommandInvocation]:
    """``bundle add`` for every gem not yet *declared*, then ``bundle install``.

    ``bundle add`` exits non-zero for a gem the Gemfile already lists.
    """
    skip = set(declared)
    gems = list(BASE_GEMS) + [g for g in extra_gems if g not in BASE_GEMS]
    return [gem.bundle_add() for gem in gems if gem.name not in skip] + [BUNDLE_INSTALL]


# ---------------------------------------------------------------------------
# Phase 3: framework setup
# ---------------------------------------------------------------------------

APPLICATION_NAME_LINE = (
    "\n    config.application_name = Rails.application.class.module_parent_name"
)

FRAMEWORK_OPERATIONS: tuple[FileOperation, ...] = (
    InjectText(
        target="config/application.rb",
        anchor="class Application < Rails::Application",
        payload=APPLICATION_NAME_LINE,
    ),
    MergeDirectory(src="config", overwrite=True),
)

PAGES_CONTROLLER = CommandInvocation(
    argv=("bin/rails", "generate", "controller", "Pages", "home"),
    description="Generate the Pages controller",
)

POST_CONTROLLER_OPERATIONS: tuple[FileOperation, ...] = (
    InjectText(
        target="config/routes.rb",
        anchor="Rails.application.routes.draw do",
        payload="\n  root to: 'pages#home'",
    ),
    CopyFile(src=".node-version"),
)


# ---------------------------------------------------------------------------
# Phase 5: templates
# ---------------------------------------------------------------------------

ENV_FILES: tuple[str, ...] = (".env.development", ".env.test", ".envrc")

DIRENV_ALLOW = CommandInvocation(
    argv=("direnv", "allow"), description="Trust the .envrc file", fatal=False
)

TEMPLATE_OPERATIONS: tuple[FileOperation, ...] = (
    CopyFile(src="Procfile.dev"),
    CopyFile(src="jsconfig.json"),
    CopyFile(src="tailwind.config.js"),
    CopyFile(src="postcss.config.js"),
)

TEMPLATE_TREE_OPERATIONS: tuple[FileOperation, ...] = (
    MergeDirectory(src="config", overwrite=True),
    MergeDirectory(src="lib", overwrite=True),
    MergeDirectory(src="script", overwrite=True),
    MakeExecutable(root="script"),
    RenameSuffix(root="lib/templates", old_suffix=".txt", new_suffix=".tt"),
)

VITE_INSTALL = CommandInvocation(
    argv=("bundle", "exec", "vite", "install"), description="Install Vite"
)


def env_file_operations() -> list[FileOperation]:
    return [CopyFile(src=name) for name in ENV_FILES]


# ---------------------------------------------------------------------------
# Phase 6: database and authentication
# ---------------------------------------------------------------------------

DATABASE_SHARED_CONFIG = """\
  username: <%= ENV['DATABASE_USER'] || ENV['USER'] || 'postgres' %>
  <% if ENV['DATABASE_HOST'].present? %>
  host: '<%= ENV['DATABASE_HOST'] %>'
  <% end %>
  port: <%= ENV.fetch('DATABASE_PORT', 5432) %>
"""

PERMITTED_PARAMETERS = """

  before_action :configure_permitted_parameters, if: :devise_controller?

  protected

  def configure_permitted_parameters
    devise_parameter_sanitizer.permit(:sign_up) do |u|
      u.permit(:first_name, :last_name, :name, :email, :password)
    end

    devise_parameter_sanitizer.permit(:account_update) do |u|
      u.permit(:first_name, :last_name, :name, :email, :password, :password_confirmation, :current_password)
    end
  end

"""

GITIGNORE_BLOCK = """
!/.env.development
!/.env.test

# Ignore yarn v4 files
.yarn/*
!.yarn/patches
!.yarn/releases
!.yarn/plugins
!.yarn/sdks
!.yarn/versions

# Ignore VSCode files
.vscode/*
!.vscode/extensions.json
!.vscode/settings.json

# Ignore RubyMine files
.idea/*

# Ignore Docker container files
db/development/
"""

LOAD_DEFAULTS_ANCHOR = "config.load_defaults 7.0"


def _rails(*args: str, description: str, fatal: bool = True) -> CommandInvocation:
    return CommandInvocation(argv=("bin/rails", *args), description=description, fatal=fatal)


DATABASE_CONFIG_OPERATIONS: tuple[FileOperation, ...] = (
    InjectText(
        target="config/database.yml",
        anchor="adapter: postgresql",
        payload="\n" + DATABASE_SHARED_CONFIG,
    ),
)

DB_SETUP = _rails("db:setup", description="Create and seed the database", fatal=False)

AUTH_COMMANDS: tuple[CommandInvocation, ...] = (
    _rails("generate", "devise:install", description="Install Devise"),
    _rails("generate", "devise", "User", description="Generate the User model"),
    _rails(
        "generate", "migration", "AddNameFieldsToUser", "first_name", "last_name",
        description="Add name fields to users",
    ),
)

AUTH_OPERATIONS: tuple[FileOperation, ...] = (
    InjectText(
        target="app/models/user.rb",
        anchor=":validatable",
        payload="\n\n  has_person_name",
    ),
    InjectText(
        target="app/controllers/application_controller.rb",
        anchor="class ApplicationController < ActionController::Base",
        payload=PERMITTED_PARAMETERS,
    ),
    InjectText(target=".gitignore", anchor="/.env*", payload=GITIGNORE_BLOCK),
)

STORAGE_COMMANDS: tuple[CommandInvocation, ...] = (
    _rails("active_storage:install", description="Install Active Storage"),
    _rails("generate", "annotate:install", description="Install model annotations"),
)

STORAGE_OPERATIONS: tuple[FileOperation, ...] = (
    InjectText(
        target="config/application.rb",
        anchor=LOAD_DEFAULTS_ANCHOR,
        payload="\n\n    config.active_storage.variant_processor = :vips",
    ),
)

DB_MIGRATE = _rails("db:migrate", description="Run database migrations", fatal=False)
