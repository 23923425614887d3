"""Tests for environment file seeding (railsforge.operations.env_files)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from railsforge.operations.engine import FileOperationEngine
from railsforge.operations.env_files import seed_env_files
from railsforge.plan.models import ErrorKind

pytestmark = pytest.mark.unit


@pytest.fixture
def engine(template_dir, rails_app) -> FileOperationEngine:
    return FileOperationEngine(template_dir, rails_app)


class TestSeedEnvFiles:
    async def test_first_run_copies_and_allows(self, engine, rails_app, mock_runner):
        with patch("railsforge.operations.env_files.command_exists", return_value=True):
            results = await seed_env_files(engine, mock_runner)

        assert all(r.ok for r in results)
        for name in (".env.development", ".env.test", ".envrc"):
            assert (rails_app / name).is_file()
        assert [i.argv for i in mock_runner.invocations] == [("direnv", "allow")]

    async def test_existing_development_file_leaves_everything(self, engine, rails_app, mock_runner):
        (rails_app / ".env.development").write_text("DATABASE_HOST=db\n")

        results = await seed_env_files(engine, mock_runner)

        assert len(results) == 1
        assert results[0].ok
        assert results[0].kind is ErrorKind.SKIPPED_EXISTING
        assert (rails_app / ".env.development").read_text() == "DATABASE_HOST=db\n"
        assert not (rails_app / ".envrc").exists()
        assert mock_runner.invocations == []

    async def test_missing_direnv_is_a_warning(self, engine, rails_app, mock_runner):
        with patch("railsforge.operations.env_files.command_exists", return_value=False):
            results = await seed_env_files(engine, mock_runner)

        assert (rails_app / ".envrc").is_file()
        assert not results[-1].ok
        assert "direnv" in results[-1].message
        assert mock_runner.invocations == []

    async def test_direnv_failure_reported(self, engine, mock_runner):
        mock_runner.failures = {("direnv",): 1}
        with patch("railsforge.operations.env_files.command_exists", return_value=True):
            results = await seed_env_files(engine, mock_runner)

        assert not results[-1].ok
        assert results[-1].kind is ErrorKind.COMMAND_FAILED

    async def test_second_run_is_a_no_op(self, engine, rails_app, mock_runner):
        with patch("railsforge.operations.env_files.command_exists", return_value=True):
            await seed_env_files(engine, mock_runner)
            (rails_app / ".env.test").write_text("EDITED=1\n")
            results = await seed_env_files(engine, mock_runner)

        assert results[0].kind is ErrorKind.SKIPPED_EXISTING
        assert (rails_app / ".env.test").read_text() == "EDITED=1\n"
        assert len(mock_runner.invocations) == 1
