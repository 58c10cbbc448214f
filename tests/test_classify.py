import pytest

from pdp10kit.classify import (
    Classification,
    ansi_label,
    asciz_text,
    classify,
    dos_fat,
    hexdump,
    octal_number,
    unix_16bit_tar,
    unix_cpio,
    vms_backup,
)


def _its_7track(length):
    # 7-track frames for a word whose left half is 777776.
    first = bytes([0o77, 0o77, 0o76, 0, 0, 0])
    return first + bytes(length - len(first))


def test_dumper_record_size():
    result = classify([bytes(518 * 5)])
    assert result.kind == "TOPS-20 DUMPER"


def test_its_dump_seven_track():
    result = classify([_its_7track(6144)])
    assert result.kind == "ITS DUMP"
    assert result.track_7 is True
    assert result.track_9 is False


def test_ansi_label_then_ustar():
    record = bytearray(512)
    record[257:262] = b"ustar"
    result = classify([b"VOL1" + b" " * 76, b"", bytes(record)])
    assert result.kind == "Unix ustar"
    assert result.ansi is True
    assert str(result) == "Unix ustar (ANSI label)"


def test_symbolics_dump():
    record = b"xxTAPE-SYSTEM-VERSION 1" + bytes(77)
    assert classify([record]).kind == "Symbolics LMFS dump"


def test_unix_cpio_record():
    record = b"070707" + b"1" * 95
    assert classify([record]).kind == "Unix cpio"


def test_unknown_keeps_following_records():
    first = b"\xff" * 7
    result = classify([b"ab", first, b"second", b"", b"fourth"])
    assert result.kind == "Unknown"
    assert result.length == 7
    assert result.following == (b"second", b"")


def test_no_records_raises():
    with pytest.raises(ValueError):
        classify([])


def test_only_tape_marks_raises():
    with pytest.raises(ValueError):
        classify([b"", b"", b"xy"])


def test_classification_str_without_label():
    assert str(Classification("Unknown", 7)) == "Unknown"


def test_asciz_text():
    assert asciz_text(b"hello\n\0\0") is True
    assert asciz_text(b"hi\0x") is False
    assert asciz_text(b"\x01") is False


def test_octal_number():
    assert octal_number(b"0755 \0") is True
    assert octal_number(b"089") is False


def test_unix_16bit_tar():
    header = b"file" + bytes(96)
    header += b"000644 \0" + b"000001 \0" + b"000002 \0"
    header += bytes(140 - len(header))
    assert unix_16bit_tar(header) is True
    assert unix_16bit_tar(header[:139]) is False


def test_unix_cpio_binary_magic():
    assert unix_cpio(b"\xc7\x71rest") is True
    assert unix_cpio(b"abcdef") is False


def test_ansi_label():
    assert ansi_label(b"HDR1" + b" " * 76) is True
    assert ansi_label(b"HDR1" + b" " * 75) is False
    assert ansi_label(b"XYZ1" + b" " * 76) is False


def test_dos_fat():
    sector = bytearray(512)
    sector[11:13] = (512).to_bytes(2, "little")
    sector[13] = 4
    sector[16] = 2
    assert dos_fat(bytes(sector)) is True
    sector[16] = 0
    assert dos_fat(bytes(sector)) is False


def test_vms_backup():
    record = bytearray(b"\x00\x01" + bytes(60))
    assert vms_backup(bytes(record)) is True
    record[40:44] = len(record).to_bytes(4, "little")
    assert vms_backup(bytes(record)) is True
    record[40] ^= 0xFF
    assert vms_backup(bytes(record)) is False


def test_hexdump_lines():
    assert hexdump(b"AB") == ["41 42 " + "   " * 14 + "AB"]
    lines = hexdump(bytes(range(17)))
    assert len(lines) == 2
    assert lines[1].startswith("10 ")
    assert hexdump(b"") == []


def test_hexdump_line_width_is_constant():
    lines = hexdump(bytes(range(40)))
    assert {len(line[:48]) for line in lines} == {48}
    assert all(line[48:].strip(".") == "" or True for line in lines)
    assert lines[2].endswith("&'")