import pytest

from elf_builder import ElfImage, defined, undef
from shared.config import ScanConfig, ToolConfig
from shared.logger import ToolLogger
from undefsym.core.engine import UndefsymEngine
from undefsym.core.models import FileStatus


def make_engine(**scan) -> UndefsymEngine:
    config = ToolConfig(scan=ScanConfig(**scan))
    return UndefsymEngine(config, ToolLogger("test", console_output=False))


@pytest.fixture
def files(write_file):
    return {
        "good32": write_file("good32.o", ElfImage(bits=32, symbols=[undef("a32")]).build()),
        "good64": write_file(
            "good64.o", ElfImage(symbols=[undef("b64"), defined("x"), undef("c64")]).build()
        ),
        "clean": write_file("clean.o", ElfImage(symbols=[defined("main")]).build()),
        "text": write_file("script.sh", b"#!/bin/sh\nexit 0\n" * 8),
        "empty": write_file("empty", b""),
        "corrupt": write_file("corrupt.o", ElfImage(symbols=[undef("z")], shnum=40).build()),
        "bigendian": write_file("be.o", ElfImage(symbols=[undef("z")], ei_data=2).build()),
    }


def test_findings_in_file_then_discovery_order(files) -> None:
    batch = make_engine().run([files["good64"], files["clean"], files["good32"]])
    assert [(f.path, f.symbol) for f in batch.findings] == [
        (files["good64"], "b64"),
        (files["good64"], "c64"),
        (files["good32"], "a32"),
    ]
    assert batch.exit_code == 0
    assert not batch.halted
    assert [r.elf_bits for r in batch.files] == [64, 64, 32]


def test_non_elf_files_are_skipped(files) -> None:
    batch = make_engine().run([files["text"], files["empty"], files["good32"]])
    statuses = [r.status for r in batch.files]
    assert statuses == [FileStatus.SKIPPED, FileStatus.SKIPPED, FileStatus.SCANNED]
    assert batch.files[0].skip_reason == "no ELF magic"
    assert "minimum ELF header" in batch.files[1].skip_reason
    assert batch.exit_code == 0


def test_halts_on_first_fatal_error(files) -> None:
    batch = make_engine().run([files["good32"], files["corrupt"], files["good64"]])
    assert len(batch.files) == 2
    assert batch.halted
    assert batch.exit_code == 1
    failed = batch.failed[0]
    assert failed.path == files["corrupt"]
    assert failed.error_kind == "TruncatedSectionTable"
    assert failed.findings == []
    assert [f.symbol for f in batch.findings] == ["a32"]


def test_keep_going_isolates_failures(files) -> None:
    batch = make_engine(keep_going=True).run(
        [files["corrupt"], files["bigendian"], files["good64"]]
    )
    assert len(batch.files) == 3
    assert not batch.halted
    assert batch.exit_code == 1
    assert [r.error_kind for r in batch.failed] == [
        "TruncatedSectionTable",
        "UnsupportedEndianness",
    ]
    assert [f.symbol for f in batch.findings] == ["b64", "c64"]


def test_missing_file_is_an_open_error(tmp_path) -> None:
    result = make_engine().scan_file(str(tmp_path / "nope.o"))
    assert result.status is FileStatus.FAILED
    assert result.error_kind == "OpenError"


def test_on_result_sees_each_file_in_order(files) -> None:
    seen = []
    make_engine(keep_going=True).run(
        [files["clean"], files["corrupt"], files["good32"]],
        on_result=lambda r: seen.append((r.path, r.status)),
    )
    assert seen == [
        (files["clean"], FileStatus.SCANNED),
        (files["corrupt"], FileStatus.FAILED),
        (files["good32"], FileStatus.SCANNED),
    ]


def test_write_back_batch(files) -> None:
    with open(files["good64"], "rb") as fh:
        before = fh.read()
    batch = make_engine(write_back=True).run([files["good64"]])
    assert [f.symbol for f in batch.findings] == ["b64", "c64"]
    with open(files["good64"], "rb") as fh:
        assert fh.read() == before


def test_repeat_runs_are_identical(files) -> None:
    engine = make_engine(keep_going=True)
    paths = [files["good64"], files["corrupt"], files["text"]]
    first = engine.run(paths)
    second = engine.run(paths)
    assert first.findings == second.findings
    assert [r.error_message for r in first.files] == [
        r.error_message for r in second.files
    ]


def test_halt_is_logged_with_remaining_count(files, tmp_path) -> None:
    log_path = tmp_path / "engine.log"
    config = ToolConfig()
    logger = ToolLogger("halt", log_file=log_path, console_output=False)
    UndefsymEngine(config, logger).run([files["corrupt"], files["good32"], files["good64"]])
    text = log_path.read_text(encoding="utf-8")
    assert f"stopping after failure in {files['corrupt']}; 2 file(s) not scanned" in text


def test_failure_on_last_file_is_not_a_halt(files) -> None:
    batch = make_engine().run([files["good32"], files["corrupt"]])
    assert not batch.halted
    assert batch.exit_code == 1
