"""Stateful host facade over the functional CHIP-8 core.

``Chip8`` owns one ``EmulatorState`` and exposes the host operations with
plain Python values. Mutating calls are serialized with a lock so input
callbacks from another thread never interleave with a tick.
"""

import threading
from typing import List, Optional

import jax
import numpy as np

from chip8vm.config import MachineConfig
from chip8vm.constants import NUM_KEYS
from chip8vm.errors import FAULT_EXCEPTIONS, Fault, InvalidKey
from chip8vm.emulator import tick, run_frame, load_rom, is_halted
from chip8vm.logging import FrameStats, MachineLogger
from chip8vm import peripherals
from chip8vm.rendering import display_bitmap
from chip8vm.state import EmulatorState, create_state, display_rows, random_key

_tick = jax.jit(tick)


class Chip8:
    """A single emulated CHIP-8 session driven by a host frame loop.

    Typical use::

        machine = Chip8()
        machine.load_rom(rom_bytes)
        while running:
            machine.run_frame()
            present(machine.display_bitmap())
    """

    def __init__(self, config: Optional[MachineConfig] = None, logger: Optional[MachineLogger] = None):
        self.config = config or MachineConfig()
        self.logger = logger or MachineLogger(log_level=self.config.log_level)
        self.stats = FrameStats()
        self._lock = threading.RLock()
        self.state: EmulatorState = self._create_state()

    def _create_state(self) -> EmulatorState:
        if self.config.seed is None:
            return create_state(random_key())
        return create_state(jax.random.PRNGKey(self.config.seed))

    def _raise_on_fault(self):
        fault = Fault(int(self.state.fault))
        if fault is Fault.NONE:
            return
        # PC already points past the faulting instruction
        error = FAULT_EXCEPTIONS[fault]((self.pc - 2) & 0xFFFF)
        self.logger.log_fault(error)
        raise error

    @staticmethod
    def _check_key(key) -> int:
        if isinstance(key, bool) or not isinstance(key, (int, np.integer)) or not 0 <= key < NUM_KEYS:
            raise InvalidKey(key)
        return int(key)

    def reset(self):
        """Reinitialize memory, registers, stack, display, timers and input."""
        with self._lock:
            self.state = self._create_state()
            self.logger.log_reset()

    def load_rom(self, rom_data: bytes, source: Optional[str] = None):
        """Copy ROM bytes to 0x200. Raises ``RomTooLarge`` if they do not fit."""
        with self._lock:
            self.state = load_rom(self.state, rom_data)
            self.logger.log_rom_loaded(len(rom_data), source)

    def load_rom_file(self, filename: str):
        with open(filename, 'rb') as f:
            rom_data = f.read()
        self.load_rom(rom_data, source=filename)

    def tick(self) -> bool:
        """Execute one instruction and return whether the machine is idle.

        Raises ``StackOverflow``/``StackUnderflow`` while the machine is
        faulted; the host decides whether to reset.
        """
        with self._lock:
            self.state, idle = _tick(self.state)
            self._raise_on_fault()
            return bool(idle)

    def run_frame(self) -> bool:
        """Run one host frame of ``cycles_per_frame`` ticks, timers and VSync."""
        with self._lock:
            halted = bool(is_halted(self.state))
            self.state = run_frame(self.state, self.config.cycles_per_frame)
            self.stats.record_frame(0 if halted else self.config.cycles_per_frame)
            self.logger.log_frame(self.stats.frames, self.state)
            self._raise_on_fault()
            return self.idle

    def dec_delay_timer(self) -> int:
        with self._lock:
            self.state, value = peripherals.dec_delay_timer(self.state)
            return int(value)

    def dec_sound_timer(self) -> int:
        with self._lock:
            self.state, value = peripherals.dec_sound_timer(self.state)
            return int(value)

    def set_vblank(self):
        with self._lock:
            self.state = peripherals.set_vblank(self.state)

    def key_down(self, key: int):
        key = self._check_key(key)
        with self._lock:
            self.state = peripherals.key_down(self.state, key)

    def key_up(self, key: int):
        key = self._check_key(key)
        with self._lock:
            self.state = peripherals.key_up(self.state, key)

    def display_bitmap(self) -> np.ndarray:
        """Fresh (32, 64, 4) RGBA snapshot of the display."""
        return display_bitmap(self.state)

    def display_rows(self) -> List[int]:
        return display_rows(self.state)

    @property
    def memory(self) -> bytes:
        return np.asarray(self.state.memory).tobytes()

    @property
    def registers(self) -> List[int]:
        return np.asarray(self.state.V).tolist()

    @property
    def stack(self) -> List[int]:
        """Active return addresses, oldest first."""
        depth = int(self.state.stack.pointer)
        return np.asarray(self.state.stack.data)[:depth].tolist()

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def index(self) -> int:
        return int(self.state.I)

    @property
    def keys(self) -> List[bool]:
        return np.asarray(self.state.keypad).tolist()

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def sound_active(self) -> bool:
        return self.sound_timer > 0

    @property
    def idle(self) -> bool:
        return bool(self.state.idle)

    @property
    def fault(self) -> Fault:
        return Fault(int(self.state.fault))
