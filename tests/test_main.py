from __future__ import annotations

import io
from unittest.mock import patch

import pytest
import yaml

from wasmbrowsertest.console_filter import DEFAULT_FAIL_BANNER, DEFAULT_PASS_BANNER
from wasmbrowsertest.main import EXIT_OK, EXIT_USAGE, _parse_args, filter_stream, main
from wasmbrowsertest.session import TestSession


class TestParseArgs:
    def test_defaults(self):
        args = _parse_args([])
        assert args.input == "-"
        assert args.quiet is False
        assert args.config is None
        assert args.debug is False
        assert args.trace is False
        assert args.verbose is False

    def test_input_and_quiet(self):
        args = _parse_args(["out.txt", "--quiet"])
        assert args.input == "out.txt"
        assert args.quiet is True

    def test_config_and_debug(self):
        args = _parse_args(["--config", "my.yaml", "--debug"])
        assert args.config == "my.yaml"
        assert args.debug is True

    def test_trace_verbose_flags(self):
        args = _parse_args(["--trace", "--verbose"])
        assert args.trace is True
        assert args.verbose is True


class TestFilterStream:
    @pytest.mark.asyncio
    async def test_lines_fed_without_terminators(self, recorder):
        session = TestSession(False, recorder)
        await filter_stream(io.StringIO("one\r\ntwo\nthree"), session)
        assert recorder.lines == ["one", "two", "three"]
        assert session.closed is True

    @pytest.mark.asyncio
    async def test_quiet_stream(self, recorder, go_test_passing):
        session = TestSession(True, recorder)
        await filter_stream(io.StringIO("\n".join(go_test_passing) + "\n"), session)
        assert recorder.lines == [DEFAULT_PASS_BANNER]

    @pytest.mark.asyncio
    async def test_stream_without_summary_is_flushed(self, recorder):
        session = TestSession(True, recorder)
        await filter_stream(io.StringIO("=== RUN   TestA\nboom\n"), session)
        assert recorder.lines == ["=== RUN   TestA", "boom"]


class TestMain:
    @pytest.mark.asyncio
    async def test_quiet_file(self, tmp_path, capsys, go_test_failing):
        out = tmp_path / "out.txt"
        out.write_text("\n".join(go_test_failing) + "\n")
        code = await main([str(out), "--quiet"])
        assert code == EXIT_OK
        printed = capsys.readouterr().out.splitlines()
        assert "=== RUN   TestAdd" not in printed
        assert "    --- FAIL: TestDiv/by_zero (0.00s)" in printed
        assert printed[-2:] == [DEFAULT_FAIL_BANNER, "exit status 1"]

    @pytest.mark.asyncio
    async def test_verbose_file_passthrough(self, tmp_path, capsys, go_test_passing):
        out = tmp_path / "out.txt"
        out.write_text("\n".join(go_test_passing) + "\n")
        code = await main([str(out)])
        assert code == EXIT_OK
        assert capsys.readouterr().out.splitlines() == go_test_passing

    @pytest.mark.asyncio
    async def test_stdin_input(self, capsys):
        with patch("wasmbrowsertest.main.sys.stdin", io.StringIO("=== RUN   TestA\n--- PASS: TestA (0.00s)\nPASS\n")):
            code = await main(["--quiet"])
        assert code == EXIT_OK
        assert capsys.readouterr().out.splitlines() == [DEFAULT_PASS_BANNER]

    @pytest.mark.asyncio
    async def test_quiet_from_config(self, tmp_path, capsys):
        cfg = tmp_path / "config.yaml"
        cfg.write_text(yaml.dump({"filter": {"quiet": True, "pass_banner": "green"}}))
        out = tmp_path / "out.txt"
        out.write_text("=== RUN   TestA\n--- PASS: TestA (0.00s)\nPASS\n")
        code = await main([str(out), "--config", str(cfg)])
        assert code == EXIT_OK
        assert capsys.readouterr().out.splitlines() == ["green"]

    @pytest.mark.asyncio
    async def test_missing_config(self, tmp_path):
        code = await main(["--config", str(tmp_path / "nope.yaml")])
        assert code == EXIT_USAGE

    @pytest.mark.asyncio
    async def test_missing_input(self, tmp_path, capsys):
        code = await main([str(tmp_path / "missing.txt"), "--quiet"])
        assert code == EXIT_USAGE
        assert capsys.readouterr().out == ""

    @pytest.mark.asyncio
    async def test_stdin_with_invalid_utf8(self, capsys):
        raw = b"=== RUN   TestA\n    bad byte \xff here\n--- FAIL: TestA (0.00s)\nFAIL\n"
        stdin = io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8")
        with patch("wasmbrowsertest.main.sys.stdin", stdin):
            code = await main(["--quiet"])
        assert code == EXIT_OK
        assert capsys.readouterr().out.splitlines() == [
            "=== RUN   TestA",
            "    bad byte \ufffd here",
            "--- FAIL: TestA (0.00s)",
            DEFAULT_FAIL_BANNER,
        ]

    @pytest.mark.asyncio
    async def test_logging_configured_once_with_merged_flags(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text(yaml.dump({"debug": {"enabled": True}}))
        out = tmp_path / "out.txt"
        out.write_text("PASS\n")
        with patch("wasmbrowsertest.main.setup_logging") as mock_setup:
            code = await main([str(out), "--config", str(cfg), "--trace"])
        assert code == EXIT_OK
        mock_setup.assert_called_once_with(debug=True, trace=True, verbose=False)

    @pytest.mark.asyncio
    async def test_config_error_still_configures_logging(self, tmp_path):
        with patch("wasmbrowsertest.main.setup_logging") as mock_setup:
            code = await main(["--config", str(tmp_path / "nope.yaml"), "--debug"])
        assert code == EXIT_USAGE
        mock_setup.assert_called_once_with(debug=True, trace=False, verbose=False)
