"""CHIP-8 emulator state structures."""

import secrets
from dataclasses import field

import jax
import jax.numpy as jnp
import numpy as np
from flax.struct import dataclass, PyTreeNode

from chip8vm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_KEYS, NUM_REGISTERS, WAIT_NONE,
)
from chip8vm.errors import Fault


@dataclass(frozen=True)
class StackState:
    """Bounded call stack of return addresses."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``display`` is indexed ``[x, y]``. ``waiting`` records why the current
    instruction is being re-executed (one of the ``WAIT_*`` constants).
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    last_key: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    vblank: jnp.ndarray = field(default_factory=lambda: jnp.ones((), dtype=jnp.bool_))
    waiting: jnp.ndarray = field(default_factory=lambda: jnp.asarray(WAIT_NONE, dtype=jnp.uint8))
    idle: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.asarray(int(Fault.NONE), dtype=jnp.uint8))


def random_key() -> jax.Array:
    """PRNG key seeded from the operating system's secure random source."""
    return jax.random.PRNGKey(secrets.randbits(31))


def create_state(rng: jax.Array = None) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if rng is None:
        rng = random_key()
    state = EmulatorState(rng)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


reset = create_state


def display_rows(state: EmulatorState) -> list[int]:
    """Display as 32 row bitmasks, most significant bit is the leftmost pixel."""
    pixels = np.asarray(state.display)
    rows = []
    for y in range(SCREEN_HEIGHT):
        row = 0
        for bit in pixels[:, y]:
            row = (row << 1) | int(bit)
        rows.append(row)
    return rows
