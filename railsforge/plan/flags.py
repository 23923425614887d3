"""Declarative table of recognised invocation flags.

Each flag maps to one :class:`ActionDescriptor` describing the file
operations, JavaScript package installs, gems and summary line it
contributes. The option parser and the summary reporter read this table;
neither branches on flag names.
"""

from __future__ import annotations

from .models import (
    ActionDescriptor,
    ActionKind,
    CommandInvocation,
    CopyFile,
    GemSpec,
    InjectText,
    MergeDirectory,
    Position,
)

# ---------------------------------------------------------------------------
# JavaScript packages
# ---------------------------------------------------------------------------

YARN_V4_SETUP: tuple[CommandInvocation, ...] = (
    CommandInvocation(argv=("corepack", "enable"), description="Enable corepack"),
    CommandInvocation(
        argv=("yarn", "set", "version", "berry"), description="Switch to yarn v4"
    ),
)

_BASE_DEV_PACKAGES = (
    "vite",
    "vite-plugin-ruby",
    "eslint",
    "prettier",
    "eslint-plugin-prettier",
    "eslint-config-prettier",
    "path",
    "vite-plugin-full-reload",
)

NORMAL_PACKAGES = ("autoprefixer", "postcss", "sass", "tailwindcss", "@tailwindcss/forms")
NORMAL_DEV_PACKAGES = _BASE_DEV_PACKAGES

VUE_PACKAGES = ("autoprefixer", "postcss", "sass", "tailwindcss", "vue", "@tailwindcss/forms")
VUE_DEV_PACKAGES = (
    "vite",
    "vite-plugin-ruby",
    "@vitejs/plugin-vue",
    "@vue/compiler-sfc",
    "eslint",
    "prettier",
    "eslint-plugin-prettier",
    "eslint-config-prettier",
    "eslint-plugin-vue",
    "path",
    "vite-plugin-full-reload",
)

REACT_PACKAGES = (
    "autoprefixer",
    "postcss",
    "sass",
    "tailwindcss",
    "react",
    "react-dom",
    "@headlessui/react",
    "@heroicons/react",
    "@tailwindcss/forms",
)
REACT_DEV_PACKAGES = (
    "vite",
    "vite-plugin-ruby",
    "@vitejs/plugin-react-refresh",
    "eslint",
    "prettier",
    "eslint-plugin-prettier",
    "eslint-config-prettier",
    "eslint-plugin-react",
    "path",
    "vite-plugin-full-reload",
)

HOTWIRED_PACKAGES = ("@hotwired/stimulus", "@hotwired/turbo-rails")

HOTWIRED_ENTRYPOINT = "app/frontend/entrypoints/application.js"
HOTWIRED_IMPORT = 'import { Turbo } from "@hotwired/turbo-rails";\n\nwindow.Turbo = Turbo;\n\n'


def yarn_add(packages: tuple[str, ...], dev: bool = False) -> CommandInvocation:
    argv = ("yarn", "add", "-D", *packages) if dev else ("yarn", "add", *packages)
    kind = "development packages" if dev else "packages"
    return CommandInvocation(argv=argv, description=f"Install JavaScript {kind}")


def _javascript_install(
    packages: tuple[str, ...], dev_packages: tuple[str, ...]
) -> tuple[CommandInvocation, ...]:
    return (*YARN_V4_SETUP, yarn_add(packages), yarn_add(dev_packages, dev=True))


# ---------------------------------------------------------------------------
# Container profiles
# ---------------------------------------------------------------------------

COMPOSE_FILE = "docker-compose.yml"

CONTAINER_PROFILES: dict[str, str] = {
    "full": "postgres, redis, adminer, redis-commander & mailhog",
    "essential": "postgres & redis",
    "with-admin": "postgres, redis, adminer & redis-commander",
}


def _container(flag: str, profile: str, template: str) -> ActionDescriptor:
    services = CONTAINER_PROFILES[profile]
    return ActionDescriptor(
        flag=flag,
        kind=ActionKind.CONTAINER,
        help=f"Docker Compose stack with {services}",
        summary=f"Docker configured with {services}",
        operations=(CopyFile(src=template, dest=COMPOSE_FILE, overwrite=True),),
        container_profile=profile,
    )


# ---------------------------------------------------------------------------
# Flag table
# ---------------------------------------------------------------------------


def build_flag_table() -> dict[str, ActionDescriptor]:
    """Return the ordered ``{flag: ActionDescriptor}`` lookup table."""
    descriptors = [
        ActionDescriptor(
            flag="--normal",
            kind=ActionKind.VARIANT,
            help="Plain Vite + Tailwind CSS frontend",
            summary="Rails 7 + ViteJS + Tailwindcss created!",
            operations=(
                CopyFile(src="vite.config.ts", overwrite=True),
                CopyFile(src=".eslintrc.json", overwrite=True),
                MergeDirectory(src="app", dest="app", overwrite=True),
            ),
            commands=_javascript_install(NORMAL_PACKAGES, NORMAL_DEV_PACKAGES),
        ),
        ActionDescriptor(
            flag="--react",
            kind=ActionKind.VARIANT,
            help="React 18 frontend",
            summary="Rails 7 + ReactJS 18 + ViteJS + Tailwindcss created!",
            operations=(
                CopyFile(src="vite.config-react.ts", dest="vite.config.ts", overwrite=True),
                CopyFile(src=".eslintrc-react.json", dest=".eslintrc.json", overwrite=True),
                MergeDirectory(src="app-react", dest="app", overwrite=True),
            ),
            commands=_javascript_install(REACT_PACKAGES, REACT_DEV_PACKAGES),
        ),
        ActionDescriptor(
            flag="--vue",
            kind=ActionKind.VARIANT,
            help="Vue 3 frontend",
            summary="Rails 7 + Vue 3 + ViteJS + Tailwindcss created!",
            operations=(
                CopyFile(src="vite.config-vue.ts", dest="vite.config.ts", overwrite=True),
                CopyFile(src=".eslintrc-vue.json", dest=".eslintrc.json", overwrite=True),
                MergeDirectory(src="app-vue", dest="app", overwrite=True),
            ),
            commands=_javascript_install(VUE_PACKAGES, VUE_DEV_PACKAGES),
        ),
        ActionDescriptor(
            flag="--hotwired",
            kind=ActionKind.ADDON,
            help="Add Turbo and Stimulus",
            summary="Hotwired + Stimulus were added successfully",
            operations=(
                MergeDirectory(src="hotwired-generator", dest="lib/generators"),
                InjectText(
                    target=HOTWIRED_ENTRYPOINT,
                    anchor='import "./main.scss";',
                    payload=HOTWIRED_IMPORT,
                    position=Position.BEFORE,
                ),
            ),
            commands=(yarn_add(HOTWIRED_PACKAGES),),
            gems=(GemSpec(name="stimulus-rails"), GemSpec(name="turbo-rails")),
        ),
        _container("--docker", "full", "docker-compose.yml"),
        _container("--docker-essential", "essential", "docker-compose.essential.yml"),
        _container("--docker-with-admin", "with-admin", "docker-compose.with-admin.yml"),
    ]
    return {descriptor.flag: descriptor for descriptor in descriptors}


FLAG_ACTIONS: dict[str, ActionDescriptor] = build_flag_table()
