import pytest

from pdp10kit.pdp11 import INSTRUCTIONS, disassemble, disassemble_words, find_instruction


def _no_fetch():
    raise AssertionError("no operand word expected")


def _feeder(words):
    it = iter(words)
    return lambda: next(it)


def test_table_entries_match_themselves():
    for definition in INSTRUCTIONS:
        found = find_instruction(definition.value)
        assert found is not None
        assert definition.value & found.mask == found.value


def test_zero_operand_instructions():
    assert disassemble(0, 0o000000, _no_fetch) == "halt"
    assert disassemble(0, 0o000240, _no_fetch) == "nop"
    assert disassemble(0, 0o000005, _no_fetch) == "reset"


def test_unknown_word_gives_empty_text():
    assert find_instruction(0o000007) is None
    assert disassemble(0, 0o000007, _no_fetch) == ""


def test_immediate_operand_uses_fetch():
    assert disassemble(0, 0o012700, _feeder([0o1234])) == "mov\t$1234,r0"


def test_byte_variant_suffix():
    text = disassemble(0, 0o110001, _no_fetch)
    mnemonic, operands = text.split("\t")
    assert mnemonic == find_instruction(0o110001).name + "b"
    assert operands == "r0,r1"


def test_branch_forward():
    assert disassemble(0o1000, 0o000401, _no_fetch) == "br\t1004"


def test_deferred_mode_is_starred():
    text = disassemble(0, 0o005030, _no_fetch)
    assert text.startswith("clr\t*")
    assert "(r0)+" in text


def test_negative_index():
    assert disassemble(0, 0o016001, _feeder([0o177776])) == "mov\t-2(r0),r1"


def test_disassemble_words_advances_by_consumed_words():
    origin = 0o1000
    lines = list(disassemble_words([0o012700, 0o1234, 0o000000], origin))
    assert [address for address, _ in lines] == [origin, origin + 4]
    assert lines[1][1] == "halt"


def test_disassemble_words_truncated():
    with pytest.raises(ValueError):
        list(disassemble_words([0o012700]))