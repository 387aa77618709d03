"""Tests for CLI interface"""

from __future__ import annotations

import logging
import os
import sys
from unittest.mock import MagicMock

import pyperclip
import pytest
from colorama import Fore

from clipfiles import __version__
from clipfiles.cli import ColorFormatter, main, setup_logging, split_patterns
from clipfiles.clipboard import PyperclipSink
from clipfiles.errors import ClipboardUnavailableError


class FakeSink:
    """Clipboard sink that remembers what it was given"""

    def __init__(self):
        self.texts = []

    def set_text(self, text: str) -> None:
        self.texts.append(text)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("clipfiles.cli.time.sleep", lambda seconds: None)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("clipfiles").handlers.clear()


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def project(tmp_path):
    (tmp_path / "README.md").write_text("hello", encoding="utf-8")
    (tmp_path / "app.log").write_text("log", encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    return tmp_path


class TestSetupLogging:
    """Tests for setup_logging function"""

    def test_info_level(self):
        """Test that logging is set to INFO level by default"""
        setup_logging(verbose=False)
        assert logging.getLogger("clipfiles").level == logging.INFO

    def test_debug_level(self):
        """Test that logging is set to DEBUG level when verbose"""
        setup_logging(verbose=True)
        assert logging.getLogger("clipfiles").level == logging.DEBUG

    def test_single_handler(self):
        """Test that repeated setup does not stack handlers"""
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("clipfiles").handlers) == 1

    def test_streams_not_rewrapped(self):
        """Test that repeated setup leaves sys.stdout and sys.stderr alone"""
        stdout, stderr = sys.stdout, sys.stderr
        setup_logging()
        setup_logging()
        assert sys.stdout is stdout
        assert sys.stderr is stderr

    def test_warning_is_colored(self):
        """Test that warnings are wrapped in yellow"""
        record = logging.LogRecord("clipfiles", logging.WARNING, __file__, 1, "careful", None, None)
        text = ColorFormatter("[clipfiles] %(message)s").format(record)
        assert text.startswith(Fore.YELLOW + "[clipfiles] careful")


class TestSplitPatterns:
    """Tests for split_patterns"""

    def test_comma_and_repeat(self):
        """Test that repeated and comma-delimited values are flattened"""
        assert split_patterns(["*.log,tmp", "dist"]) == ["*.log", "tmp", "dist"]

    def test_empty_items_dropped(self):
        """Test that empty items between commas are dropped"""
        assert split_patterns(["a,,b,"]) == ["a", "b"]


class TestMain:
    """Tests for main"""

    def test_copies_and_lists_files(self, project, sink, capsys):
        """Test a full run that lists the copied files"""
        code = main([str(project)], sink_factory=lambda: sink)

        assert code == 0
        assert len(sink.texts) == 1
        assert "---\nfile: src/main.py\n---\n\nprint('hi')\n\n\n" in sink.texts[0]
        out = capsys.readouterr().out
        assert out == (
            "File structure and contents copied to clipboard:\n"
            "- README.md\n"
            "- app.log\n"
            "- src/main.py\n"
        )

    def test_show_content(self, project, sink, capsys):
        """Test that --show-content prints the document"""
        main([str(project), "--show-content"], sink_factory=lambda: sink)

        out = capsys.readouterr().out
        assert out == "File structure and contents copied to clipboard:\n" + sink.texts[0] + "\n"

    def test_ignore_option(self, project, sink, capsys):
        """Test that -i patterns are applied"""
        main([str(project), "-i", "*.log", "--ignore", "src"], sink_factory=lambda: sink)

        out = capsys.readouterr().out
        assert "- README.md" in out
        assert "app.log" not in out
        assert "main.py" not in out

    def test_comma_delimited_ignore(self, project, sink):
        """Test that one -i value can carry several patterns"""
        main([str(project), "-i", "*.log,README.md"], sink_factory=lambda: sink)

        assert sink.texts[0] == "---\nfile: src/main.py\n---\n\nprint('hi')\n\n\n"

    def test_config_file(self, project, sink, tmp_path_factory, capsys):
        """Test that --config patterns are applied"""
        config = tmp_path_factory.mktemp("cfg") / "patterns.txt"
        config.write_text("# logs\n*.log\n", encoding="utf-8")

        code = main([str(project), "--config", str(config)], sink_factory=lambda: sink)

        assert code == 0
        assert "app.log" not in capsys.readouterr().out

    def test_missing_config_is_fatal(self, project, sink, caplog):
        """Test that a missing config file stops the run"""
        code = main([str(project), "--config", str(project / "nope")], sink_factory=lambda: sink)

        assert code == 1
        assert sink.texts == []
        assert "does not exist" in caplog.text

    def test_invalid_glob_warns_but_completes(self, project, sink, caplog):
        """Test that an invalid glob only produces a warning"""
        code = main([str(project), "-i", "[oops"], sink_factory=lambda: sink)

        assert code == 0
        assert "Invalid glob pattern '[oops'" in caplog.text
        assert len(sink.texts) == 1

    def test_hidden_flag(self, project, sink, capsys):
        """Test that --hidden includes dot files not in the default rules"""
        (project / ".editorconfig").write_text("root = true\n", encoding="utf-8")
        (project / ".env").write_text("SECRET=1\n", encoding="utf-8")

        main([str(project), "--hidden"], sink_factory=lambda: sink)

        out = capsys.readouterr().out
        assert "- .editorconfig" in out
        assert ".env" not in out

    def test_clipboard_unavailable(self, project, capsys, caplog):
        """Test that a missing clipboard is fatal and prints nothing"""
        def factory():
            raise ClipboardUnavailableError("no display")

        code = main([str(project)], sink_factory=factory)

        assert code == 1
        assert capsys.readouterr().out == ""
        assert "no display" in caplog.text

    def test_clipboard_write_failure(self, project, capsys):
        """Test that a failing clipboard write is fatal"""
        failing = MagicMock()
        failing.set_text.side_effect = ClipboardUnavailableError("lost it")

        code = main([str(project)], sink_factory=lambda: failing)

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_not_a_directory(self, tmp_path, sink):
        """Test that a bad path is an argument error"""
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing")], sink_factory=lambda: sink)
        assert exc.value.code == 2

    def test_version(self, capsys):
        """Test --version output"""
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out

    @pytest.mark.skipif(sys.platform != "linux", reason="needs byte file names")
    def test_undecodable_file_name_is_copied(self, project, capsys):
        """Test that a non UTF-8 file name does not abort the run"""
        (project / os.fsdecode(b"bad\xff.txt")).write_text("odd", encoding="utf-8")
        copied = []

        class EncodingSink:
            def set_text(self, text):
                copied.append(text.encode("utf-8"))

        code = main([str(project)], sink_factory=EncodingSink)

        assert code == 0
        assert b"file: bad\xef\xbf\xbd.txt\n" in copied[0]
        assert "- bad�.txt\n" in capsys.readouterr().out

    def test_sleeps_after_copy(self, project, sink, monkeypatch):
        """Test that the run waits briefly after handing off to the clipboard"""
        calls = []
        monkeypatch.setattr("clipfiles.cli.time.sleep", calls.append)

        main([str(project)], sink_factory=lambda: sink)

        assert calls == [0.1]


class TestPyperclipSink:
    """Tests for PyperclipSink"""

    def test_unavailable(self, monkeypatch):
        """Test that construction fails without a copy mechanism"""
        monkeypatch.setattr(pyperclip, "determine_clipboard", lambda: (None, None))
        with pytest.raises(ClipboardUnavailableError):
            PyperclipSink()

    def test_copies(self, monkeypatch):
        """Test that text goes to the detected copy function"""
        copied = []
        monkeypatch.setattr(pyperclip, "determine_clipboard", lambda: (copied.append, lambda: ""))

        PyperclipSink().set_text("payload")

        assert copied == ["payload"]

    def test_copy_failure(self, monkeypatch):
        """Test that pyperclip errors are converted"""
        def broken(text):
            raise pyperclip.PyperclipException("nope")

        monkeypatch.setattr(pyperclip, "determine_clipboard", lambda: (broken, lambda: ""))

        with pytest.raises(ClipboardUnavailableError, match="nope"):
            PyperclipSink().set_text("payload")
