# pdp10kit

A library for working with data from PDP-10 and PDP-11 systems: 36-bit
words, SIXBIT text, DEC dates, core images in several executable formats,
accounting files, CROSS assembler output, and TOPS-20 / TENEX DUMPER tapes.

It has no dependencies outside the Python standard library and supports
Python 3.10 and later.

Throughout, a 36-bit word is a plain Python `int`, and a file of words is
any iterable of such ints. Progress and warnings go through the standard
`logging` module.

## Modules

| Module | Purpose |
| --- | --- |
| `pdp10kit.words` | Word halves, SIXBIT conversion, packing 8-bit bytes four to a word |
| `pdp10kit.memory` | `Memory`, a sparse core image made of contiguous areas |
| `pdp10kit.decdate` | DEC 15-bit date stamps |
| `pdp10kit.pdp11` | A PDP-11 instruction disassembler |
| `pdp10kit.atari` | Atari DOS binary output from a core image |
| `pdp10kit.csave` | Compressed (non-sharable) SAVE files, read and write |
| `pdp10kit.exb` | EXB files, read and write |
| `pdp10kit.exe` | DEC sharable EXE files, read |
| `pdp10kit.constantinople` | Cross references to a range of addresses |
| `pdp10kit.acct` | Reports from accounting files, 1975 and 1978 layouts |
| `pdp10kit.cross` | Binary and ASCII block output of the CROSS assembler |
| `pdp10kit.classify` | Guessing what kind of data a tape image holds |
| `pdp10kit.disasm` | PDP-10 disassembly helpers: ITS .OPER calls, WAITS CALLIs, effective addresses, comments |
| `pdp10kit.dumper` | Listing, extracting and writing DUMPER tapes |

## Examples

Words and SIXBIT text:

```python
from pdp10kit.words import ascii_to_sixbit, sixbit_to_ascii, left_half, right_half

word = ascii_to_sixbit("DSK")
print(sixbit_to_ascii(word))                  # 'DSK   '
print(oct(left_half(word)), oct(right_half(word)))
```

DEC dates count days in 31-day months from 1 January 1964:

```python
from pdp10kit.decdate import format_dec_timestamp

print(format_dec_timestamp(0))   # 1964-01-01
```

A core image, written as a compressed SAVE file and read back:

```python
from pdp10kit.memory import Memory
from pdp10kit.csave import read_csave, write_csave

memory = Memory()
memory.add(0o140, [0o254000000140])
words = write_csave(memory, 0o140)

loaded = Memory()
read_csave(words, loaded)
print(oct(loaded.get(0o140)))
```

`Memory.get` returns `None` for an address where nothing is loaded.

Disassembling PDP-11 code; `disassemble_words` yields `(address, text)` pairs:

```python
from pdp10kit.pdp11 import disassemble_words

for address, text in disassemble_words([0o012700, 0o000005, 0o000000], 0o1000):
    print(f"{address:06o}  {text}")
```

Looking at a PDP-10 instruction word:

```python
from pdp10kit.disasm import its_oper, ascii_comment, sixbit_comment

call = its_oper(0o042000000033)
print(call.name if call else None)            # .logout
print(sixbit_comment(ascii_to_sixbit("HELLO")))
```

Guessing what a tape holds, given its records as byte strings (empty
records are tape marks):

```python
from pdp10kit.classify import classify

result = classify(records)
print(result, result.length)
```

Writing a DUMPER tape from local files and listing it again:

```python
from pdp10kit.dumper import read_tape, write_tape

records = write_tape(["notes.txt"])
for entry in read_tape(records):
    print(entry)
```

Each file is stored four 8-bit bytes to a word. `read_tape(records,
extract_dir="out")` also writes the files below `out`, with directory and
file names turned into lower-case relative paths.

## What the package does not do

- It installs no commands; everything is called from Python.
- It does not read or write the on-disk encodings of 36-bit words
  (packed, tape image and similar formats). Functions take and return
  words as ints and tape records as lists of ints or byte strings; turning
  a file into those is left to the caller.
- `pdp10kit.disasm` provides the pieces of a PDP-10 disassembler, not a
  complete one: there is no opcode table for general instructions.
- The only tape archive format it lists, extracts and writes is DUMPER;
  other tape formats are only recognised by `pdp10kit.classify`.

## Running the tests

The tests use pytest and live in `tests/`; the `test` extra declares it:

```
pip install -e .[test]
pytest
```