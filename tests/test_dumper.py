import os
from pathlib import Path

import pytest

from pdp10kit.dumper import (
    DumperEntry,
    checksum_add,
    mangle,
    read_asciz,
    read_tape,
    tops20_timestamp,
    unix_timestamp,
    unmangle,
    write_asciz,
    write_tape,
)
from pdp10kit.words import WORDMASK, left_half, pack_bytes, right_half


def test_zero_timestamps():
    assert unix_timestamp(0, 4) == 0
    assert unix_timestamp(0, 0) == 0
    assert tops20_timestamp(0, 4) == 0
    assert tops20_timestamp(-1, 0) == 0


def test_tenex_timestamp_fields():
    stamp = tops20_timestamp(86400 * 10 + 5, 0)
    assert left_half(stamp) == 0o117213 + 10
    assert right_half(stamp) == 5


@pytest.mark.parametrize("t", [1, 86399, 86400, 1_000_000_000, 1_650_000_123])
def test_tenex_round_trip_exact(t):
    assert unix_timestamp(tops20_timestamp(t, 0), 0) == t


@pytest.mark.parametrize("fmt", [1, 4, 5])
@pytest.mark.parametrize("t", [1, 86399, 1_000_000_000, 1_650_000_123])
def test_tops20_round_trip_close(fmt, t):
    stamp = tops20_timestamp(t, fmt)
    assert right_half(stamp) < 1 << 18
    assert abs(unix_timestamp(stamp, fmt) - t) < 1


def test_checksum_end_around_carry():
    assert checksum_add(WORDMASK, 1, 4) == 1


def test_checksum_masks_input():
    assert checksum_add(0, (1 << 40) | 7, 4) == 7


@pytest.mark.parametrize("value", [0, 1, 0o123456701234, WORDMASK - 1])
def test_checksum_complement_gives_all_ones(value):
    assert checksum_add(value, value ^ WORDMASK, 4) == WORDMASK


def test_rotating_checksum_wraps_top_bit():
    assert checksum_add(1 << 35, 0, 5) == 1


@pytest.mark.parametrize("text", ["", "A", "ABCD", "ABCDE", "Saveset name", "x" * 23])
def test_asciz_round_trip(text):
    words = write_asciz(text)
    assert read_asciz(words) == text
    assert all(word & 1 == 0 for word in words)
    assert len(words) == len(text) // 5 + 1


def test_read_asciz_stops_at_nul():
    assert read_asciz(write_asciz("AB") + write_asciz("CD")) == "AB"


def test_write_asciz_rejects_non_ascii():
    with pytest.raises(ValueError):
        write_asciz("caf\u00e9")


def test_mangle_directories_tops20():
    assert mangle("PS:<DIR.SUB>FOO.TXT.1", 4) == "dir/sub/foo.txt.1"


def test_mangle_tenex_version():
    assert mangle("<A>B.C;1", 0) == "a/b.c.1"


def test_mangle_quoting_and_slash():
    assert mangle("A\x16.B", 4) == "a.b"
    assert mangle("A\x16:B", 4) == "a:b"
    assert mangle("A/B", 4) == "a\\b"


def test_unmangle_plain_name():
    assert unmangle("foo.txt", None, 0o777777, "1", 1, 4) == (
        "FOO.TXT.1;P777777;A1",
        1,
    )


def test_unmangle_device_directory_and_generation():
    name, generation = unmangle("dir/foo.txt;7", "PS", 0o777777, None, 1, 0)
    assert generation == 7
    assert name == "PS:<DIR>FOO.TXT;7;P777777"


def test_unmangle_tenex_rejects_subdirectories():
    with pytest.raises(ValueError):
        unmangle("a/b/foo.txt", None, 0o777777, "1", 1, 0)


def test_unmangle_then_mangle_round_trip():
    name, _ = unmangle("dir/foo.txt", None, 0o777777, "1", 1, 4)
    assert mangle(name.split(";", 1)[0], 4) == "dir/foo.txt.1"


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    src = tmp_path / "src"
    src.mkdir()
    monkeypatch.chdir(src)
    return tmp_path


def test_write_tape_structure_and_checksums(workdir):
    data = bytes(range(256)) * 10  # 640 words: two pages
    Path("foo.txt").write_bytes(data)
    records = write_tape(["foo.txt"], 4)
    blocks = [r for r in records if r]
    assert records[-1] == []
    assert len(blocks) == 6
    for block in blocks:
        assert len(block) == 518
        total = 0
        for word in block:
            total = checksum_add(total, word, 4)
        assert total == WORDMASK


def test_round_trip_listing(workdir):
    data = b"ABCDEFGH" * 200
    Path("dir").mkdir()
    Path("dir/foo.txt").write_bytes(data)
    os.utime("dir/foo.txt", (1_000_000_000, 1_000_000_000))
    entries = read_tape(write_tape(["dir/foo.txt"], 4), 4)
    assert len(entries) == 1
    entry = entries[0]
    assert isinstance(entry, DumperEntry)
    expected = pack_bytes(data)
    assert entry.name == "<DIR>FOO.TXT.1"
    assert entry.bytes == len(expected)
    assert entry.bits_per_byte == 36
    assert entry.words[: len(expected)] == expected
    assert all(word == 0 for word in entry.words[len(expected):])
    assert abs(entry.modified - 1_000_000_000) < 1
    assert entry.path is None


def test_extract_tenex(workdir):
    data = b"ABCDEFGH" * 10
    Path("notes.txt").write_bytes(data)
    os.utime("notes.txt", (1_000_000_000, 1_000_000_000))
    records = write_tape(["notes.txt"], 0)
    out = workdir / "out"
    entries = read_tape(records, 0, out)
    target = out / mangle(entries[0].name, 0)
    assert entries[0].path == target
    assert target.read_bytes().startswith(data)
    assert os.stat(target).st_mtime == 1_000_000_000
    assert "2001-09-09 01:46:40" in str(entries[0])


def test_tenex_tape_marks(workdir):
    Path("a.txt").write_bytes(b"abcd")
    Path("b.txt").write_bytes(b"efgh")
    records = write_tape(["a.txt", "b.txt"], 0)
    marks = [i for i, r in enumerate(records) if not r]
    # after the saveset header, after each file, and at the end
    assert len(marks) == 4
    assert marks[0] == 1
    assert marks[-1] == len(records) - 1
    names = [e.name for e in read_tape(records, 0)]
    assert names == ["A.TXT;1", "B.TXT;1"]


def test_write_tape_tenex_subdirectory_error(workdir):
    Path("a").mkdir()
    Path("a/b").mkdir()
    Path("a/b/c.txt").write_bytes(b"data")
    with pytest.raises(ValueError):
        write_tape(["a/b/c.txt"], 0)


def test_unknown_record_type_raises(workdir):
    Path("foo.txt").write_bytes(b"abcd")
    records = write_tape(["foo.txt"], 4)
    records[1][4] = 0o100
    with pytest.raises(ValueError):
        read_tape(records, 4)


def test_empty_tape_lists_nothing():
    assert read_tape([], 4) == []
    assert read_tape([[], []], 4) == []


def test_empty_file_has_no_data(workdir):
    Path("empty.txt").write_bytes(b"")
    records = write_tape(["empty.txt"], 4)
    entries = read_tape(records, 4)
    assert len([r for r in records if r]) == 4
    assert entries[0].bytes == 0
    assert entries[0].words == []