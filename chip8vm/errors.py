"""CHIP-8 machine faults and host-facing exceptions."""

from enum import IntEnum


class Fault(IntEnum):
    """Fault codes recorded in ``EmulatorState.fault``.

    A faulted machine stops executing: every subsequent tick is a no-op
    until the state is reset.
    """
    NONE = 0
    STACK_OVERFLOW = 1
    STACK_UNDERFLOW = 2


class Chip8Error(Exception):
    """Base class for errors surfaced to the host."""


class StackOverflow(Chip8Error):
    """A 2NNN call was issued with all stack levels in use."""

    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(f"Stack overflow on call at 0x{pc:03X}")


class StackUnderflow(Chip8Error):
    """A 00EE return was issued with an empty stack."""

    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(f"Stack underflow on return at 0x{pc:03X}")


class RomTooLarge(Chip8Error, ValueError):
    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit from 0x200")


class InvalidKey(Chip8Error, ValueError):
    def __init__(self, key):
        self.key = key
        super().__init__(f"Invalid key {key!r}, expected 0x0-0xF")


FAULT_EXCEPTIONS = {
    Fault.STACK_OVERFLOW: StackOverflow,
    Fault.STACK_UNDERFLOW: StackUnderflow,
}
