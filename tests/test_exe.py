import pytest

from pdp10kit.exe import DirectoryEntry, read_exe
from pdp10kit.memory import Memory

END = (0o1777 << 18) | 1


def _file(directory, pages):
    words = list(directory)
    words += [0] * (512 - len(words))
    for page in pages:
        words += page
    return words


def test_directory_maps_page():
    directory = [(0o1776 << 18) | 3, (0o400 << 27) | 1, 5, END]
    page = list(range(1, 513))
    memory = Memory()
    info = read_exe(_file(directory, [page]), memory)
    assert info.directory == [DirectoryEntry(0o400, 1, 5, 1)]
    assert memory.get(5 * 512) == 1
    assert memory.get(5 * 512 + 511) == 512


def test_repeat_count_maps_consecutive_pages():
    directory = [(0o1776 << 18) | 3, 1, (1 << 27) | 7, END]
    pages = [[10] * 512, [20] * 512]
    memory = Memory()
    info = read_exe(_file(directory, pages), memory)
    assert info.directory[0].count == 2
    assert memory.get(7 * 512) == 10
    assert memory.get(8 * 512) == 20


def test_partial_last_page_is_dropped():
    directory = [(0o1776 << 18) | 3, 1, 5, END]
    memory = Memory()
    read_exe(_file(directory, [[1] * 100]), memory)
    assert memory.areas() == []


def test_entry_vector():
    info = read_exe(_file([(0o1775 << 18) | 3, 3, 0o140, END], []), Memory())
    assert info.entry_vector_length == 3
    assert info.entry_vector_address == 0o140


def test_unknown_block_skipped_and_recorded():
    info = read_exe(_file([(0o1234 << 18) | 2, 0, END], []), Memory())
    assert info.unknown_blocks == [0o1234]
    assert info.entry_vector_address is None


def test_pdv_block_ignored():
    info = read_exe(_file([(0o1774 << 18) | 3, 1, 2, END], []), Memory())
    assert info.unknown_blocks == []
    assert info.directory == []


def test_truncated_directory_raises():
    with pytest.raises(ValueError):
        read_exe([(0o1776 << 18) | 3, 1], Memory())