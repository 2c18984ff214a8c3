"""Unit tests for orchestrator module - argument handling and exit codes.

Tests cover:
- Command-line argument parsing
- Report output on stdout
- Exit codes and stderr diagnostics for missing files, bad config, malformed lines
- Logging configuration

Real-world significance:
- Entry point for the rxreport command
- Errors must be reported as one clean line, never a traceback
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest
import yaml

from rxreport import orchestrator
from rxreport.enums import ReportOrder
from tests.fixtures.sample_input import (
    CANONICAL_REPORT,
    CANONICAL_REPORT_BY_NAME,
    write_text_events,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo configure_logging so other tests keep pytest's handlers."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestParseArgs:
    """Unit tests for command-line argument parsing."""

    def test_defaults(self) -> None:
        args = orchestrator.parse_args([])

        assert args.input_file is None
        assert args.order is None
        assert args.config_path == orchestrator.DEFAULT_CONFIG_PATH

    def test_all_arguments(self) -> None:
        args = orchestrator.parse_args(
            ["events.txt", "--order", "name", "--config", "/etc/rx.yaml"]
        )

        assert args.input_file == "events.txt"
        assert args.order == "name"
        assert args.config_path == Path("/etc/rx.yaml")

    def test_invalid_order_rejected(self) -> None:
        with pytest.raises(SystemExit):
            orchestrator.parse_args(["--order", "income"])


@pytest.mark.unit
class TestRun:
    """Unit tests for run helper."""

    def test_run_builds_report(self, canonical_lines) -> None:
        assert orchestrator.run(canonical_lines, ReportOrder.ACTIVITY) == CANONICAL_REPORT


@pytest.mark.unit
class TestMain:
    """Unit tests for main entry point."""

    def test_file_input(self, tmp_test_dir: Path, config_file: Path, capsys) -> None:
        path = write_text_events(tmp_test_dir / "events.txt")

        exit_code = orchestrator.main([str(path), "--config", str(config_file)])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert captured.out.splitlines() == CANONICAL_REPORT

    def test_order_argument_overrides_config(
        self, tmp_test_dir: Path, config_file: Path, capsys
    ) -> None:
        path = write_text_events(tmp_test_dir / "events.txt")

        orchestrator.main([str(path), "--order", "name", "--config", str(config_file)])

        assert capsys.readouterr().out.splitlines() == CANONICAL_REPORT_BY_NAME

    def test_order_from_config(
        self, tmp_test_dir: Path, default_config, capsys
    ) -> None:
        default_config["report"]["order"] = "name"
        config_path = tmp_test_dir / "by_name.yaml"
        config_path.write_text(yaml.dump(default_config))
        path = write_text_events(tmp_test_dir / "events.txt")

        orchestrator.main([str(path), "--config", str(config_path)])

        assert capsys.readouterr().out.splitlines() == CANONICAL_REPORT_BY_NAME

    def test_stdin_input(self, config_file: Path, monkeypatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("John A created\nJohn A filled\n"))

        exit_code = orchestrator.main(["--config", str(config_file)])

        assert exit_code == 0
        assert capsys.readouterr().out == "John: 1 fills $5 income\n"

    def test_empty_input_prints_nothing(
        self, tmp_test_dir: Path, config_file: Path, capsys
    ) -> None:
        path = tmp_test_dir / "empty.txt"
        path.write_text("")

        assert orchestrator.main([str(path), "--config", str(config_file)]) == 0
        assert capsys.readouterr().out == ""

    def test_missing_input_file(self, config_file: Path, capsys) -> None:
        """Verify a missing input file exits 1 with a clean message.

        Real-world significance:
        - Users see what went wrong without a stack trace
        """
        exit_code = orchestrator.main(["nonexistent.txt", "--config", str(config_file)])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Error: File 'nonexistent.txt' not found" in captured.err
        assert "Traceback" not in captured.err
        assert captured.out == ""

    def test_malformed_line_aborts_without_report(
        self, tmp_test_dir: Path, config_file: Path, capsys
    ) -> None:
        """Verify a malformed line stops the run and prints no partial report.

        Real-world significance:
        - A partial report would under-bill patients after the bad line
        """
        path = write_text_events(
            tmp_test_dir / "events.txt",
            ["John A created", "John A filled", "only two", "Mark B created"],
        )

        exit_code = orchestrator.main([str(path), "--config", str(config_file)])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert captured.out == ""
        assert "Error: Invalid input format" in captured.err
        assert "'only two'" in captured.err

    def test_malformed_stdin_line(self, config_file: Path, monkeypatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("John A created\na b c d\n"))

        assert orchestrator.main(["--config", str(config_file)]) == 1
        assert capsys.readouterr().out == ""

    def test_unsupported_input_type(
        self, tmp_test_dir: Path, config_file: Path, capsys
    ) -> None:
        path = tmp_test_dir / "events.pdf"
        path.write_text("John A created")

        assert orchestrator.main([str(path), "--config", str(config_file)]) == 1
        assert "Unsupported file type" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "filename, content, message",
        [
            ("events.xlsx", b"John,A,created\n", "Could not read Excel file"),
            (
                "events.xls",
                b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504,
                "Unsupported file type: .xls",
            ),
        ],
    )
    def test_unreadable_workbook(
        self,
        tmp_test_dir: Path,
        config_file: Path,
        capsys,
        filename: str,
        content: bytes,
        message: str,
    ) -> None:
        """Verify bad spreadsheets exit 1 with a message, not a traceback.

        Real-world significance:
        - Legacy .xls exports and renamed files must fail cleanly
        """
        path = tmp_test_dir / filename
        path.write_bytes(content)

        exit_code = orchestrator.main([str(path), "--config", str(config_file)])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert f"Error: {message}" in captured.err
        assert "Traceback" not in captured.err
        assert captured.out == ""

    def test_unusable_log_dir(
        self, tmp_test_dir: Path, default_config, capsys
    ) -> None:
        blocker = tmp_test_dir / "not_a_dir"
        blocker.write_text("")
        default_config["logging"]["log_dir"] = str(blocker)
        config_path = tmp_test_dir / "logdir.yaml"
        config_path.write_text(yaml.dump(default_config))

        exit_code = orchestrator.main(["--config", str(config_path)])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Error: Could not set up logging" in captured.err
        assert captured.out == ""

    @pytest.mark.parametrize(
        "config_text, message",
        [
            ("report:\n  - activity\n", "report must be a mapping"),
            ("logging: verbose\n", "logging must be a mapping"),
        ],
    )
    def test_non_mapping_config_section(
        self, tmp_test_dir: Path, capsys, config_text: str, message: str
    ) -> None:
        config_path = tmp_test_dir / "sections.yaml"
        config_path.write_text(config_text)

        assert orchestrator.main(["--config", str(config_path)]) == 1
        assert f"Error: {message}" in capsys.readouterr().err

    def test_missing_config(self, tmp_test_dir: Path, capsys) -> None:
        exit_code = orchestrator.main(["--config", str(tmp_test_dir / "missing.yaml")])

        assert exit_code == 1
        assert "Configuration file not found" in capsys.readouterr().err

    def test_invalid_config(self, tmp_test_dir: Path, capsys) -> None:
        config_path = tmp_test_dir / "bad.yaml"
        config_path.write_text("report:\n  order: income\n")

        assert orchestrator.main(["--config", str(config_path)]) == 1
        assert "Invalid report.order" in capsys.readouterr().err


@pytest.mark.unit
class TestConfigureLogging:
    """Unit tests for configure_logging."""

    def test_console_only(self) -> None:
        assert orchestrator.configure_logging("INFO") is None

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_with_log_file(self, tmp_test_dir: Path) -> None:
        log_path = orchestrator.configure_logging(
            "debug", tmp_test_dir / "logs", "20250101T000000"
        )

        logging.getLogger("rxreport.test").debug("hello")

        assert log_path == tmp_test_dir / "logs" / "rxreport_20250101T000000.log"
        assert "hello" in log_path.read_text(encoding="utf-8")
