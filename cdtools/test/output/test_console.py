"""Tests for cdtools.output.console module."""

from __future__ import annotations

import pytest

from cdtools.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_level_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("bad")
        console.warning("hmm")
        console.info("fyi")
        assert console.messages == ["OK done", "error: bad", "warning: hmm", "info: fyi"]

    def test_flags(self) -> None:
        console = MockConsole()
        assert not console.has_error()
        console.warning("careful")
        assert console.has_warning()
        assert not console.has_error()

    def test_text_and_find(self) -> None:
        console = MockConsole()
        console.header("Updating versions")
        console.newline()
        console.print("  packages/web: 1.0.1")
        assert console.text == "Updating versions\n\n  packages/web: 1.0.1"
        assert [r.style for r in console.find("packages/web")] == [Style.DEFAULT]

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("ok")


class TestRichConsole:
    def test_branch_names_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.info("created branch feat/x[alpha]")
        assert "feat/x[alpha]" in capsys.readouterr().out

    def test_print_with_style(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("git push origin feat/x(rc)", Style.DIM)
        assert "git push origin feat/x(rc)" in capsys.readouterr().out
