import pytest

from pdp10kit.exb import read_exb, write_exb
from pdp10kit.memory import Memory
from pdp10kit.words import JRST, pack_bytes, unpack_bytes


def test_block_header_bytes():
    memory = Memory()
    memory.add(0o100, [0])
    data = unpack_bytes(write_exb(memory, 0))
    assert data[:6] == bytes([9, 0, 0o100, 0, 0, 0])


def test_start_block_only():
    words = pack_bytes(b"\x04\x00\x00\x01\x00\x00")
    memory = Memory()
    assert read_exb(words, memory) == JRST + 0x100
    assert memory.areas() == []


def test_round_trip():
    original = Memory()
    original.add(0o100, [0o123456701234, 1, 0o777777777777])
    original.add(0o2000, [5, 6])
    words = write_exb(original, JRST + 0o100)
    loaded = Memory()
    assert read_exb(words, loaded) == JRST + 0o100
    for area in original.areas():
        for address in range(area.start, area.end):
            assert loaded.get(address) == original.get(address)


def test_missing_start_block_raises():
    memory = Memory()
    memory.add(0o100, [1, 2])
    words = write_exb(memory, 0)
    with pytest.raises(ValueError):
        read_exb(words, Memory())


def test_empty_input_raises():
    with pytest.raises(ValueError):
        read_exb([], Memory())


def test_short_length_raises():
    with pytest.raises(ValueError):
        read_exb(pack_bytes(b"\x02\x00\x00\x00\x00\x00"), Memory())


def test_truncated_data_raises():
    with pytest.raises(ValueError):
        read_exb(pack_bytes(b"\x0e\x00\x00\x01\x00\x00\x01\x02"), Memory())