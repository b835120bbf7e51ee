"""Tests for user-facing output."""

import threading

import pytest

from playdeck.core import output


@pytest.fixture(autouse=True)
def fresh_console(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(output, "_console", None)


class TestSafePrint:
    """Tests for safe_print."""

    def test_brackets_printed_literally(self, capsys) -> None:
        output.safe_print("> 1. Alpha - Artist One [repeat] [bold]x[/bold]")
        assert "[repeat] [bold]x[/bold]" in capsys.readouterr().out

    def test_console_shared(self) -> None:
        assert output.get_console() is output.get_console()


class TestLog:
    """Tests for log."""

    def test_prints_message(self, capsys) -> None:
        output.log("Playing: Alpha [live]")
        assert "Playing: Alpha [live]" in capsys.readouterr().out

    def test_silent_thread_does_not_print(self, capsys) -> None:
        def worker() -> None:
            threading.current_thread().silent_logging = True
            output.log("background tick")

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert "background tick" not in capsys.readouterr().out
