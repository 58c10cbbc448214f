import pytest

from pdp10kit.memory import Memory


def test_empty_memory_has_nothing():
    memory = Memory()
    assert memory.get(0) is None
    assert memory.areas() == []


def test_add_and_get():
    memory = Memory()
    words = [11, 22, 33]
    memory.add(0o1000, words)
    assert [memory.get(0o1000 + i) for i in range(3)] == words
    assert memory.get(0o1000 + 3) is None
    assert memory.get(0o1000 - 1) is None


def test_areas_sorted_with_ends():
    memory = Memory()
    memory.add(0o2000, [1, 2])
    memory.add(0o100, [3, 4, 5])
    areas = memory.areas()
    assert [a.start for a in areas] == [0o100, 0o2000]
    assert [a.end for a in areas] == [0o100 + 3, 0o2000 + 2]


def test_set_inside_area():
    memory = Memory()
    memory.add(10, [0, 0, 0])
    memory.set(11, 99)
    assert memory.get(11) == 99
    assert len(memory.areas()) == 1


def test_set_outside_creates_area():
    memory = Memory()
    memory.set(500, 42)
    assert memory.get(500) == 42
    assert [(a.start, a.end) for a in memory.areas()] == [(500, 501)]


def test_latest_area_wins():
    memory = Memory()
    memory.add(0, [1, 1, 1])
    memory.add(1, [2])
    assert [memory.get(i) for i in range(3)] == [1, 2, 1]


def test_negative_address_rejected():
    with pytest.raises(ValueError):
        Memory().add(-1, [0])