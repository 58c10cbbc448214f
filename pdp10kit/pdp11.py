"""PDP-11 instruction disassembler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator

_MASK16 = 0o177777


def _w(value: int) -> int:
    return value & _MASK16


class Kind(Enum):
    """Operand layout of an instruction."""

    NO_OPS = 0
    BINARY = 1
    UNARY = 2
    REG_BINARY = 3
    REG = 4
    TRAP = 5
    BR = 6
    SOB = 7


@dataclass(frozen=True)
class InstructionDef:
    """An instruction matched by ``inst & mask == value``."""

    name: str
    value: int
    mask: int
    kind: Kind
    byte: bool = False


_K = Kind
INSTRUCTIONS: tuple[InstructionDef, ...] = (
    InstructionDef("mov", 0o010000, 0o070000, _K.BINARY, True),
    InstructionDef("cmp", 0o020000, 0o070000, _K.BINARY, True),
    InstructionDef("bit", 0o030000, 0o070000, _K.BINARY, True),
    InstructionDef("bic", 0o040000, 0o070000, _K.BINARY, True),
    InstructionDef("bis", 0o050000, 0o070000, _K.BINARY, True),
    InstructionDef("add", 0o060000, 0o170000, _K.BINARY),
    InstructionDef("sub", 0o160000, 0o170000, _K.BINARY),
    InstructionDef("clr", 0o005000, 0o077700, _K.UNARY, True),
    InstructionDef("com", 0o005100, 0o077700, _K.UNARY, True),
    InstructionDef("inc", 0o005200, 0o077700, _K.UNARY, True),
    InstructionDef("dec", 0o005300, 0o077700, _K.UNARY, True),
    InstructionDef("neg", 0o005400, 0o077700, _K.UNARY, True),
    InstructionDef("adc", 0o005500, 0o077700, _K.UNARY, True),
    InstructionDef("sbc", 0o005600, 0o077700, _K.UNARY, True),
    InstructionDef("tst", 0o005700, 0o077700, _K.UNARY, True),
    InstructionDef("ror", 0o006000, 0o077700, _K.UNARY, True),
    InstructionDef("rol", 0o006100, 0o077700, _K.UNARY, True),
    InstructionDef("asr", 0o006200, 0o077700, _K.UNARY, True),
    InstructionDef("asl", 0o006300, 0o077700, _K.UNARY, True),
    InstructionDef("mark", 0o006400, 0o177700, _K.NO_OPS),
    InstructionDef("mfpi", 0o006500, 0o177700, _K.UNARY),
    InstructionDef("mfpd", 0o106500, 0o177700, _K.UNARY),
    InstructionDef("mtpi", 0o006600, 0o177700, _K.UNARY),
    InstructionDef("mtpd", 0o106600, 0o177700, _K.UNARY),
    InstructionDef("sxt", 0o006700, 0o177700, _K.UNARY),
    InstructionDef("mul", 0o070000, 0o177000, _K.REG_BINARY),
    InstructionDef("div", 0o071000, 0o177000, _K.REG_BINARY),
    InstructionDef("ash", 0o072000, 0o177000, _K.REG_BINARY),
    InstructionDef("ashc", 0o073000, 0o177000, _K.REG_BINARY),
    InstructionDef("xor", 0o074000, 0o177000, _K.REG_BINARY),
    InstructionDef("sob", 0o077000, 0o177000, _K.SOB),
    InstructionDef("br", 0o000400, 0o177400, _K.BR),
    InstructionDef("bne", 0o001000, 0o177400, _K.BR),
    InstructionDef("beq", 0o001400, 0o177400, _K.BR),
    InstructionDef("bge", 0o002000, 0o177400, _K.BR),
    InstructionDef("blt", 0o002400, 0o177400, _K.BR),
    InstructionDef("bgt", 0o003000, 0o177400, _K.BR),
    InstructionDef("ble", 0o003400, 0o177400, _K.BR),
    InstructionDef("bpl", 0o100000, 0o177400, _K.BR),
    InstructionDef("bmi", 0o100400, 0o177400, _K.BR),
    InstructionDef("bhi", 0o101000, 0o177400, _K.BR),
    InstructionDef("blos", 0o101400, 0o177400, _K.BR),
    InstructionDef("bvc", 0o102000, 0o177400, _K.BR),
    InstructionDef("bvs", 0o102400, 0o177400, _K.BR),
    InstructionDef("bcc", 0o103000, 0o177400, _K.BR),
    InstructionDef("bcs", 0o103400, 0o177400, _K.BR),
    InstructionDef("jsr", 0o004000, 0o177000, _K.REG_BINARY),
    InstructionDef("emt", 0o104000, 0o177400, _K.TRAP),
    InstructionDef("trap", 0o104400, 0o177400, _K.TRAP),
    InstructionDef("jmp", 0o000100, 0o177700, _K.UNARY),
    InstructionDef("rts", 0o000200, 0o177770, _K.REG),
    InstructionDef("spl", 0o000230, 0o177770, _K.NO_OPS),
    InstructionDef("nop", 0o000240, 0o177777, _K.NO_OPS),
    InstructionDef("ccc", 0o000240, 0o177760, _K.NO_OPS),
    InstructionDef("scc", 0o000260, 0o177760, _K.NO_OPS),
    InstructionDef("swab", 0o000300, 0o177700, _K.UNARY),
    InstructionDef("halt", 0o000000, 0o177777, _K.NO_OPS),
    InstructionDef("wait", 0o000001, 0o177777, _K.NO_OPS),
    InstructionDef("rti", 0o000002, 0o177777, _K.NO_OPS),
    InstructionDef("bpt", 0o000003, 0o177777, _K.NO_OPS),
    InstructionDef("iot", 0o000004, 0o177777, _K.NO_OPS),
    InstructionDef("reset", 0o000005, 0o177777, _K.NO_OPS),
    InstructionDef("rtt", 0o000006, 0o177777, _K.NO_OPS),
)

_REGISTERS = ("r0", "r1", "r2", "r3", "r4", "r5", "sp", "pc")


def find_instruction(inst: int) -> InstructionDef | None:
    """Return the first table entry matching an instruction word."""
    inst &= _MASK16
    for definition in INSTRUCTIONS:
        if inst & definition.mask == definition.value:
            return definition
    return None


def _operand(spec: int, address: int, fetch: Callable[[], int]) -> str:
    reg_number = spec & 7
    reg = _REGISTERS[reg_number]
    mode = (spec >> 3) & 7
    prefix = "*" if mode != 1 and mode & 1 else ""
    if mode == 0:
        body = reg
    elif mode == 1:
        body = f"({reg})"
    elif mode in (2, 3):
        body = f"${fetch() & _MASK16:o}" if reg_number == 7 else f"({reg})+"
    elif mode in (4, 5):
        body = f"-({reg})"
    else:
        offset = fetch() & _MASK16
        if reg_number == 7:
            body = f"{_w(offset + address):o}"
        elif offset & 0o100000:
            body = f"-{_w(~offset + 1):o}({reg})"
        else:
            body = f"{offset:o}({reg})"
    return prefix + body


def disassemble(address: int, inst: int, fetch: Callable[[], int]) -> str:
    """Disassemble one instruction; ``fetch`` supplies any extra words.

    Returns an empty string for words that match no instruction.
    """
    inst &= _MASK16
    definition = find_instruction(inst)
    if definition is None:
        return ""
    text = definition.name
    if inst & 0o100000 and definition.byte:
        text += "b"

    kind = definition.kind
    if kind is Kind.BINARY:
        source = _operand((inst >> 6) & 0o77, address, fetch)
        destination = _operand(inst & 0o77, address, fetch)
        text += f"\t{source},{destination}"
    elif kind is Kind.UNARY:
        text += "\t" + _operand(inst & 0o77, address, fetch)
    elif kind is Kind.REG_BINARY:
        register = _operand((inst >> 6) & 0o7, address, fetch)
        destination = _operand(inst & 0o77, address, fetch)
        text += f"\t{register},{destination}"
    elif kind is Kind.REG:
        text += "\t" + _operand(inst & 0o7, address, fetch)
    elif kind is Kind.BR:
        if inst & 0o200:
            target = _w(address + 2 + ((inst | 0o177400) << 1))
        else:
            target = _w(address + 2 + ((inst & 0o377) << 1))
        text += f"\t{target:o}"
    elif kind is Kind.TRAP:
        text += f"\t{inst & 0o377:o}"
    return text


def disassemble_words(words: Iterable[int], origin: int = 0) -> Iterator[tuple[int, str]]:
    """Yield (address, text) for each instruction in a stream of 16-bit words.

    Raises ValueError if the stream ends in the middle of an instruction.
    """
    stream = iter(words)
    consumed = 0

    def fetch() -> int:
        nonlocal consumed
        try:
            word = next(stream)
        except StopIteration:
            raise ValueError("instruction truncated at end of input") from None
        consumed += 1
        return word & _MASK16

    address = _w(origin)
    for inst in stream:
        consumed = 1
        text = disassemble(address, inst, fetch)
        yield address, text
        address = _w(address + 2 * consumed)