"""Instruction mnemonics for the register/RAM inspector.

Mnemonics are pseudo-code rather than assembler syntax, e.g. ``V3 += 0A``
or ``display(V0, V1, I..I+5)``. Operands are upper-case hex without a
prefix. Undefined bit patterns render as an empty string.
"""

from typing import Iterator, List, Tuple

from chip8vm.constants import PROGRAM_START

_SYSTEM = {
    0x0000: "idle()",
    0x00E0: "clearDisplay()",
    0x00EE: "PC := stack.pop()",
}

_ALU = {
    0x0: "V{x} := V{y}",
    0x1: "V{x} |= V{y}; VF := 0",
    0x2: "V{x} &= V{y}; VF := 0",
    0x3: "V{x} ^= V{y}; VF := 0",
    0x4: "V{x} += V{y}; VF := carry",
    0x5: "V{x} -= V{y}; VF := !borrow",
    0x6: "V{x} := V{y} >> 1; VF := lsb(V{y})",
    0x7: "V{x} := V{y} - V{x}; VF := !borrow",
    0xE: "V{x} := V{y} << 1; VF := msb(V{y})",
}

_KEYS = {
    0x9E: "if key(V{x}) then PC += 2",
    0xA1: "if !key(V{x}) then PC += 2",
}

_MISC = {
    0x07: "V{x} := DT",
    0x0A: "V{x} := getKey()",
    0x15: "DT := V{x}",
    0x18: "ST := V{x}",
    0x1E: "I += V{x}",
    0x29: "I := fontAddr(V{x})",
    0x33: "RAM[I..I+2] := bcd(V{x})",
    0x55: "RAM[I..I+{x}] := V0..V{x}; I += {x} + 1",
    0x65: "V0..V{x} := RAM[I..I+{x}]; I += {x} + 1",
}

_FAMILIES = {
    0x1: "PC := {nnn}",
    0x2: "stack.push(PC); PC := {nnn}",
    0x3: "if V{x} = {nn} then PC += 2",
    0x4: "if V{x} ≠ {nn} then PC += 2",
    0x5: "if V{x} = V{y} then PC += 2",
    0x6: "V{x} := {nn}",
    0x7: "V{x} += {nn}",
    0x9: "if V{x} ≠ V{y} then PC += 2",
    0xA: "I := {nnn}",
    0xB: "PC := V0 + {nnn}",
    0xC: "V{x} := rand() & {nn}",
    0xD: "display(V{x}, V{y}, I..I+{n})",
}


def mnemonic(opcode: int) -> str:
    """Pseudo-code for a single 16-bit instruction."""
    opcode &= 0xFFFF
    family = opcode >> 12
    operands = {
        "x": f"{(opcode >> 8) & 0xF:X}",
        "y": f"{(opcode >> 4) & 0xF:X}",
        "n": f"{opcode & 0xF:X}",
        "nn": f"{opcode & 0xFF:02X}",
        "nnn": f"{opcode & 0xFFF:03X}",
    }

    if family == 0x0:
        template = _SYSTEM.get(opcode)
    elif family == 0x8:
        template = _ALU.get(opcode & 0xF)
    elif family == 0xE:
        template = _KEYS.get(opcode & 0xFF)
    elif family == 0xF:
        template = _MISC.get(opcode & 0xFF)
    else:
        template = _FAMILIES[family]

    if template is None:
        return ""
    return template.format(**operands)


def rom_words(rom_data: bytes) -> List[int]:
    """Split a ROM into big-endian words, padding an odd trailing byte."""
    rom_data = bytes(rom_data)
    if len(rom_data) % 2:
        rom_data += b"\x00"
    return [(rom_data[i] << 8) | rom_data[i + 1] for i in range(0, len(rom_data), 2)]


def rom_listing(rom_data: bytes) -> List[str]:
    """ROM as upper-case 4-digit hex words, one per instruction."""
    return [f"{word:04X}" for word in rom_words(rom_data)]


def disassemble(rom_data: bytes, start: int = PROGRAM_START) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(address, opcode, mnemonic)`` for each word of a ROM."""
    for offset, word in enumerate(rom_words(rom_data)):
        yield start + 2 * offset, word, mnemonic(word)
