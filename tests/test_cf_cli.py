"""Tests for the cf CLI runner, using ordinary executables in place of cf."""

import pytest

from bg_change_stack.core.cf_cli import CFCli, CommandResult
from bg_change_stack.core.exceptions import CFCommandError


@pytest.mark.asyncio
class TestCFCli:
    """Test command execution and cleanup."""

    async def test_run_simple_command(self):
        result = await CFCli("echo").run("hello")

        assert result.success
        assert result.stdout.strip() == "hello"
        assert result.stderr == ""
        assert result.args == ["hello"]

    async def test_non_zero_exit_raises(self):
        with pytest.raises(CFCommandError) as exc_info:
            await CFCli("sh").run("-c", "echo nope >&2; exit 3")

        assert "exit code 3" in str(exc_info.value)
        assert "nope" in str(exc_info.value)

    async def test_non_zero_exit_without_check(self):
        result = await CFCli("sh").run("-c", "echo out; exit 1", check=False)

        assert not result.success
        assert result.returncode == 1
        assert result.error_message == "out"

    async def test_undecodable_output_is_replaced(self):
        script = r"printf 'staging caf\351 done\n'; printf 'warn \377\n' >&2"

        result = await CFCli("sh").run("-c", script)

        assert result.success
        assert result.stdout.strip() == "staging caf\ufffd done"
        assert result.stderr.strip() == "warn \ufffd"

    async def test_timeout(self):
        with pytest.raises(CFCommandError, match="timed out after 0.1 seconds"):
            await CFCli("sleep", timeout=5).run("10", timeout=0.1)

    async def test_missing_binary(self):
        with pytest.raises(CFCommandError, match="Unable to run"):
            await CFCli("definitely-not-a-cf-binary").run("apps")

    async def test_color_disabled(self):
        result = await CFCli("sh").run("-c", "echo $CF_COLOR")

        assert result.stdout.strip() == "false"

    async def test_cf_home_passed_to_cli(self, tmp_path):
        result = await CFCli("sh", cf_home=str(tmp_path)).run("-c", "echo $CF_HOME")

        assert result.stdout.strip() == str(tmp_path)


class TestCommandResult:
    """Test result helpers."""

    def test_lines_skip_blank(self):
        result = CommandResult(0, "guid-1\n\n  \nguid-2\n", "", ["app"])

        assert result.lines == ["guid-1", "guid-2"]

    def test_error_message_prefers_stderr(self):
        result = CommandResult(1, "stdout text", "stderr text\n", ["app"])

        assert result.error_message == "stderr text"

    def test_error_message_default(self):
        assert CommandResult(1, "", "", ["app"]).error_message == "Command failed"
