"""PDP-10 disassembly helpers: system call tables, effective addresses, comments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from .memory import Memory
from .words import HALFMASK, sixbit_to_ascii

ITS_OPER = 0o42
CALLI = 0o47
POPJ_17 = 0o263740000000


def opcode(word: int) -> int:
    """Return the 9-bit opcode field."""
    return (word >> 27) & 0o777


def ac_field(word: int) -> int:
    """Return the accumulator field."""
    return (word >> 23) & 0o17


def indirect_bit(word: int) -> int:
    """Return the indirect bit."""
    return (word >> 22) & 1


def index_field(word: int) -> int:
    """Return the index register field."""
    return (word >> 18) & 0o17


def address_field(word: int) -> int:
    """Return the 18-bit address field."""
    return word & HALFMASK


def effective_field(word: int) -> int:
    """Return the indirect, index and address fields together."""
    return (
        (indirect_bit(word) << 22)
        | (index_field(word) << 18)
        | address_field(word)
    )


class Hint(IntEnum):
    """How the accumulator operand of a call is best shown."""

    NONE = 0
    ACCUMULATOR = 1
    CHANNEL = 2
    NUMBER = 3


@dataclass(frozen=True)
class ItsOper:
    """A system call selected by the effective address of its instruction."""

    name: str
    opcode: int
    hint: Hint = Hint.NONE


_A = Hint.ACCUMULATOR
_C = Hint.CHANNEL
_N = Hint.NUMBER

ITS_OPERS: tuple[ItsOper, ...] = tuple(
    ItsOper(name, number, hint)
    for name, number, hint in (
        (".ityi", 0o1, _A), (".listen", 0o2, _A), (".sleep", 0o3, _A),
        (".setmsk", 0o4, _A), (".setm2", 0o5, _A), (".demon", 0o6, _A),
        (".close", 0o7, _C), (".uclose", 0o10, _C), (".atty", 0o11, _C),
        (".dtty", 0o12, _A), (".iopush", 0o13, _A), (".iopop", 0o14, _C),
        (".dclose", 0o15, _A), (".dstop", 0o16, _A), (".rdtime", 0o17, _A),
        (".rdsw", 0o20, _A), (".gun", 0o21, _A), (".udismt", 0o22, _A),
        (".getsys", 0o23, _A), (".ipdp", 0o24, _C), (".getloc", 0o25, _A),
        (".setloc", 0o26, _A), (".disown", 0o27, _C), (".dword", 0o30, _A),
        (".dstep", 0o31, _A), (".gensym", 0o32, _A), (".logout", 0o33, _N),
        (".realt", 0o34, _A), (".wsname", 0o35, _A), (".upiset", 0o36, _A),
        (".reset", 0o37, _C), (".armove", 0o40, _A), (".dcontin", 0o41, _A),
        (".cblk", 0o42, _A), (".assign", 0o43, _A), (".design", 0o44, _A),
        (".rtime", 0o45, _A), (".rdate", 0o46, _A), (".hang", 0o47, _A),
        (".eofc", 0o50, _A), (".iotlsr", 0o51, _A), (".rsysi", 0o52, _A),
        (".supset", 0o53, _A), (".pdtime", 0o54, _A), (".armrs", 0o55, _A),
        (".ublat", 0o56, _A), (".iopdl", 0o57, _A), (".ityic", 0o60, _A),
        (".master", 0o61, _A), (".vstst", 0o62, _A), (".netac", 0o63, _C),
        (".nets", 0o64, _C), (".revive", 0o65, _A), (".dietim", 0o66, _A),
        (".shutdn", 0o67, _A), (".armoff", 0o70, _A), (".ndis", 0o71, _A),
        (".feed", 0o72, _C), (".eval", 0o73, _A), (".redef", 0o74, _A),
        (".ifset", 0o75, _A), (".utnam", 0o76, _A), (".uinit", 0o77, _A),
        (".ryear", 0o100, _A), (".rlpdtm", 0o101, _A), (".rdatim", 0o102, _A),
        (".rchst", 0o103, _A), (".rbtc", 0o104, _A), (".dmpch", 0o105, _A),
        (".swap", 0o106, _A), (".mtape", 0o107, _A), (".gennum", 0o110, _A),
        (".netint", 0o111, _C),
    )
)

WAITS_CALLIS: tuple[ItsOper, ...] = tuple(
    ItsOper(name, number)
    for name, number in (
        ("reset", 0o0), ("ddtin", 0o1), ("setddt", 0o2), ("ddtout", 0o3),
        ("devchr", 0o4), ("getchr", 0o6), ("wait", 0o10), ("core", 0o11),
        ("exit", 0o12), ("utpclr", 0o13), ("date", 0o14), ("login", 0o15),
        ("aprenb", 0o16), ("logout", 0o17), ("switch", 0o20),
        ("reassi", 0o21), ("timer", 0o22), ("mstime", 0o23),
        ("getppn", 0o24), ("runtim", 0o27), ("pjob", 0o30), ("sleep", 0o31),
        ("setpov", 0o32), ("peek", 0o33), ("getln", 0o34), ("run", 0o35),
        ("setuwp", 0o36), ("remap", 0o37), ("setnam", 0o43),
        ("tmpcor", 0o44),
        ("spwbut", 0o400000), ("ctlv", 0o400001), ("setnam", 0o400002),
        ("spcwgo", 0o400003), ("swap", 0o400004), ("eiotm", 0o400005),
        ("liotm", 0o400006), ("pname", 0o400007), (".syml", 0o400010),
        ("showit", 0o400011), ("freeze", 0o400012), ("jbtsts", 0o400013),
        ("ttyios", 0o400014), ("core2", 0o400015), ("attseg", 0o400016),
        ("detseg", 0o400017), ("setpro", 0o400020), ("segnum", 0o400021),
        ("segsiz", 0o400022), ("linkup", 0o400023), ("dismis", 0o400024),
        ("inteng", 0o400025), ("intorm", 0o400026), ("intacm", 0o400027),
        ("intens", 0o400030), ("intiip", 0o400031), ("intirq", 0o400032),
        ("intgen", 0o400033), ("uwait", 0o400034), ("debrea", 0o400035),
        ("setnm2", 0o400036), ("segnam", 0o400037), ("iwait", 0o400040),
        ("uskip", 0o400041), ("buflen", 0o400042), ("namein", 0o400043),
        ("slevel", 0o400044), ("ienbw", 0o400045), ("ttymes", 0o400047),
        ("jobrd", 0o400050), ("devuse", 0o400051), ("setpr2", 0o400052),
        ("getpr2", 0o400053), ("rlevel", 0o400054), ("ufbphy", 0o400055),
        ("ufbskp", 0o400056), ("fbwait", 0o400057), ("ufberr", 0o400060),
        ("wakeme", 0o400061), ("getnam", 0o400062), ("sneakw", 0o400063),
        ("sneak", 0o400064), ("setprv", 0o400066), ("ddchan", 0o400067),
        ("vdsmap", 0o400070), ("dskppn", 0o400071), ("gethi", 0o400072),
        ("setcrd", 0o400073), ("callit", 0o400074), ("xgpuuo", 0o400075),
        ("lock", 0o400076), ("unlock", 0o400077), ("dayvnt", 0o400100),
        ("acctim", 0o400101), ("unpure", 0o400102), ("tmpcrd", 0o400103),
        ("devnum", 0o400104), ("actchr", 0o400105), ("uuosim", 0o400106),
        ("ppspy", 0o400107), ("adsmap", 0o400110), ("beep", 0o400111),
        ("who", 0o400112), ("ttyjob", 0o400113), ("nulmes", 0o400114),
        ("getprv", 0o400115), ("ttyskp", 0o400116), ("dial", 0o400117),
        ("ttyset", 0o400121), ("mtruuo", 0o400122), ("rdline", 0o400123),
    )
)


def lookup_oper(word: int, table: Iterable[ItsOper]) -> ItsOper | None:
    """Return the first table entry whose number is the word's effective field."""
    e = effective_field(word)
    return next((entry for entry in table if entry.opcode == e), None)


def its_oper(word: int) -> ItsOper | None:
    """Return the ITS .OPER call an instruction makes, if it is one."""
    if opcode(word) != ITS_OPER:
        return None
    return lookup_oper(word, ITS_OPERS)


def waits_calli(word: int) -> ItsOper | None:
    """Return the WAITS CALLI an instruction makes, if it is one."""
    if opcode(word) != CALLI:
        return None
    return lookup_oper(word, WAITS_CALLIS)


def calc_effective_address(memory: Memory, word: int) -> int | None:
    """Follow indirection to the effective address.

    Returns None when indexing is involved or the chain leaves loaded
    memory; an indirection loop raises ValueError.
    """
    seen: set[int] = set()
    while True:
        if index_field(word) != 0:
            return None
        e = address_field(word)
        if not indirect_bit(word):
            return e
        if e in seen:
            raise ValueError(f"indirection loop at {e:06o}")
        seen.add(e)
        next_word = memory.get(e)
        if next_word is None:
            return None
        word = next_word


def immediate_float(x: int) -> float:
    """Value of an 18-bit immediate floating-point operand."""
    x &= HALFMASK
    negative = bool(x >> 17)
    if negative:
        x = (-x) & HALFMASK
    exponent = ((x >> 9) & 0o377) - 0o211
    fraction = x & 0o777
    value = float(fraction) * 2.0 ** exponent
    return -value if negative else value


def sixbit_comment(word: int) -> str:
    """Comment showing a word as six SIXBIT characters."""
    return f';"{sixbit_to_ascii(word)}"'


_ALLOWED_CONTROLS = {0, 0o11, 0o12, 0o14, 0o15, 0o33}
_ESCAPES = {
    0: "\\0",
    0o11: "\\t",
    0o12: "\\n",
    0o14: "\\f",
    0o15: "\\r",
    ord("\\"): "\\\\",
    ord('"'): '\\"',
}


def ascii_comment(word: int) -> str | None:
    """Quote the five 7-bit characters of a word if it looks like text.

    Returns None for words unlikely to hold a string.
    """
    chars = [(word >> ((4 - i) * 7 + 1)) & 0o177 for i in range(5)]
    if word & 1 or word == 0 or word == POPJ_17:
        return None
    if any(c not in _ALLOWED_CONTROLS and not 0o40 <= c <= 0o176 for c in chars):
        return None
    stripped = list(chars)
    while stripped and stripped[-1] == 0:
        stripped.pop()
    if 0 in stripped:
        return None
    parts = []
    for c in chars:
        if c in _ESCAPES:
            parts.append(_ESCAPES[c])
        elif c < 0o40 or c > 0o176:
            parts.append(f"\\{c:03o}")
        else:
            parts.append(chr(c))
    return '"' + "".join(parts) + '"'