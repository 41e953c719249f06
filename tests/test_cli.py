"""Tests for the interactive scan session."""

import csv
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from certscan.cli import app, run_session
from certscan.core.types import ImagePair, ValuationResult


def scripted_input(*lines):
    """read_line replacement; raises EOFError once the script runs out."""
    remaining = list(lines)

    def read_line(prompt):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return read_line


@pytest.fixture
def patched_clients():
    with patch("certscan.cli.CardLadderClient.get_valuation",
               new=AsyncMock(return_value=ValuationResult(estimated_value=100))) as get_valuation, \
         patch("certscan.cli.PSAImageClient.get_images",
               new=AsyncMock(return_value=ImagePair())) as get_images:
        yield {"valuation": get_valuation, "images": get_images}


class TestRunSession:
    """Test the prompt loop end to end with stubbed services."""

    @pytest.mark.asyncio
    async def test_end_to_end_session_integration(self, test_settings, console_output, silent_notifier,
                                                  patched_clients, tmp_path):
        read_line = scripted_input("", "nothing here", "PSA12345678 SGC87654321", "quit")

        written = await run_session(test_settings, None, read_line, console_output, notifier=silent_notifier)

        assert written == 2
        ledger = tmp_path / "scans" / f"SCAN_{date.today().isoformat()}.csv"
        with open(ledger, newline='', encoding='utf-8') as f:
            rows = list(csv.reader(f))
        assert [row[0] for row in rows[1:]] == ["12345678", "87654321"]

        output = console_output.buffer.getvalue()
        assert "No valid certs detected" in output
        assert "Detected 2 cert(s)" in output

    @pytest.mark.asyncio
    async def test_output_option_skips_filename_prompt(self, test_settings, console_output, silent_notifier,
                                                       patched_clients, tmp_path):
        read_line = scripted_input("12345678")

        written = await run_session(test_settings, "show", read_line, console_output, notifier=silent_notifier)

        assert written == 1
        assert (tmp_path / "scans" / "show.csv").exists()

    @pytest.mark.asyncio
    async def test_clients_receive_loaded_credentials(self, test_settings, console_output, silent_notifier,
                                                      patched_clients):
        await run_session(test_settings, "creds", scripted_input("12345678"), console_output,
                          notifier=silent_notifier)

        credentials = patched_clients["valuation"].await_args.args[-1]
        assert credentials.auth_token == "auth-1"
        assert credentials.image_api_token == "psa-1"


    @pytest.mark.asyncio
    async def test_interrupt_at_prompt_ends_session(self, test_settings, console_output, silent_notifier,
                                                    patched_clients, tmp_path):
        answers = ["12345678"]

        def read_line(prompt):
            if answers:
                return answers.pop(0)
            raise KeyboardInterrupt

        written = await run_session(test_settings, "interrupted", read_line, console_output,
                                    notifier=silent_notifier)

        assert written == 1
        with open(tmp_path / "scans" / "interrupted.csv", newline='', encoding='utf-8') as f:
            assert len(list(csv.reader(f))) == 2
        assert "interrupted by user" in console_output.buffer.getvalue()


class TestCliApp:
    def test_help_lists_commands(self):
        result = CliRunner().invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "scan" in result.output
        assert "login" in result.output
