"""Unit tests for utility functions (railsforge.utils).

Tests cover:
- run_command (success, failure, timeout, cwd, missing binary)
- command_exists
- wait_for_port (listening socket, closed port, backoff bound)
- format_duration
- PHASE_NAMES / PHASE_COLORS constants
- Rich output helpers
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import pytest

from railsforge.utils import (
    PHASE_COLORS,
    PHASE_NAMES,
    command_exists,
    console,
    format_duration,
    print_banner,
    print_error,
    print_info,
    print_phase_header,
    print_success,
    print_warning,
    run_command,
    wait_for_port,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    async def test_successful_command_list(self):
        returncode, stdout, stderr = await run_command(["echo", "hello"])
        assert returncode == 0
        assert "hello" in stdout

    @pytest.mark.unit
    async def test_failed_command(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import sys; sys.exit(3)"]
        )
        assert returncode == 3

    @pytest.mark.unit
    async def test_command_with_cwd(self, tmp_path: Path):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert returncode == 0
        assert Path(stdout.strip()).resolve() == tmp_path.resolve()

    @pytest.mark.unit
    async def test_command_timeout(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=1
        )
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    async def test_missing_executable(self):
        returncode, stdout, stderr = await run_command(["nonexistent-binary-12345-xyz"])
        assert returncode == -1
        assert "not found" in stderr

    @pytest.mark.unit
    async def test_command_returns_stderr(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('error_msg\\n')"],
            timeout=10,
        )
        assert stderr == "error_msg"


class TestCommandHelpers:
    @pytest.mark.unit
    def test_command_exists(self):
        assert command_exists(Path(sys.executable).name) or command_exists("sh")
        assert not command_exists("nonexistent-binary-12345-xyz")


# ---------------------------------------------------------------------------
# wait_for_port
# ---------------------------------------------------------------------------


class TestWaitForPort:
    @pytest.mark.unit
    async def test_listening_port(self):
        server = await asyncio.start_server(lambda r, w: w.close(), "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            assert await wait_for_port("127.0.0.1", port, timeout=2.0) is True
        finally:
            server.close()
            await server.wait_closed()

    @pytest.mark.unit
    async def test_closed_port_times_out(self):
        started = time.monotonic()
        ready = await wait_for_port("127.0.0.1", 1, timeout=0.3, interval=0.05)
        assert ready is False
        assert time.monotonic() - started < 2.0

    @pytest.mark.unit
    async def test_port_opened_while_polling(self):
        server = await asyncio.start_server(lambda r, w: w.close(), "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        async def open_later():
            await asyncio.sleep(0.2)
            return await asyncio.start_server(lambda r, w: w.close(), "127.0.0.1", port)

        opener = asyncio.create_task(open_later())
        try:
            ready = await wait_for_port(
                "127.0.0.1", port, timeout=3.0, interval=0.05, max_interval=0.1
            )
        finally:
            server = await opener
            server.close()
            await server.wait_closed()
        assert ready is True


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    def test_seconds_only(self):
        assert format_duration(3.7) == "3.7s"

    @pytest.mark.unit
    def test_minutes_and_seconds(self):
        assert format_duration(65.2) == "1m 5s"

    @pytest.mark.unit
    def test_hours_minutes_seconds(self):
        assert format_duration(3661.0) == "1h 1m 1s"

    @pytest.mark.unit
    def test_zero(self):
        assert format_duration(0) == "0.0s"

    @pytest.mark.unit
    def test_negative(self):
        assert format_duration(-5) == "0.0s"

    @pytest.mark.unit
    def test_exactly_one_minute(self):
        assert format_duration(60.0) == "1m 0s"


# ---------------------------------------------------------------------------
# Phase constants
# ---------------------------------------------------------------------------


class TestPhaseConstants:
    @pytest.mark.unit
    def test_phase_names_all_present(self):
        assert list(PHASE_NAMES) == list(range(1, 8))
        assert PHASE_NAMES[1] == "DEPENDENCIES"
        assert PHASE_NAMES[2] == "SOURCE"
        assert PHASE_NAMES[7] == "FINALIZE"

    @pytest.mark.unit
    def test_phase_colors_all_present(self):
        for i in PHASE_NAMES:
            assert isinstance(PHASE_COLORS[i], str)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_phase_header(self):
        with console.capture() as capture:
            print_phase_header(4, "variants")
        assert "Phase 4: VARIANTS" in capture.get()

    @pytest.mark.unit
    def test_print_banner(self):
        with console.capture() as capture:
            print_banner("railsforge", "App : demo")
        output = capture.get()
        assert "railsforge" in output
        assert "App : demo" in output

    @pytest.mark.unit
    def test_message_helpers(self):
        with console.capture() as capture:
            print_info("step")
            print_success("done")
            print_warning("careful")
            print_error("failed")
        output = capture.get()
        for word in ("step", "done", "careful", "failed"):
            assert word in output
