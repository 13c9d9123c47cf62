import pytest

from shared.console import ToolConsole


def test_messages_go_to_stderr_escaped(capsys: pytest.CaptureFixture[str]) -> None:
    con = ToolConsole()
    con.error("lib[foo].so: open() failed")
    con.warning("stopped early")
    out, err = capsys.readouterr()
    assert out == ""
    assert "error: lib[foo].so: open() failed" in err
    assert "warning: stopped early" in err


def test_table_renders_rows(capsys: pytest.CaptureFixture[str]) -> None:
    ToolConsole().table(
        "Scan Summary", ["File", "Status"], [("[x].o", "scanned")], caption="1 file"
    )
    err = capsys.readouterr().err
    assert "Scan Summary" in err
    assert "[x].o" in err
    assert "1 file" in err


def test_quiet_console_prints_nothing(capsys: pytest.CaptureFixture[str]) -> None:
    ToolConsole(quiet=True).error("hidden")
    assert capsys.readouterr().err == ""
