"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    ADDRESS_MASK, FONT_START, FONT_GLYPH_SIZE, MEMORY_SIZE, NUM_REGISTERS,
    WAIT_NONE, WAIT_KEY_PRESS, WAIT_KEY_RELEASE,
)
from chip8vm.instructions.system import no_op


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, VF untouched."""
    new_i = (state.I + state.V[instruction.x].astype(jnp.uint16)) & ADDRESS_MASK
    return state.replace(I=new_i.astype(jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for a full press and release of the last pressed key.

    The instruction re-executes until the key is seen held, latches it
    into VX, then keeps re-executing until the key is released.
    """
    key_held = state.keypad[state.last_key]
    latched = state.waiting == WAIT_KEY_RELEASE

    def released(state):
        return state.replace(waiting=jnp.asarray(WAIT_NONE, dtype=jnp.uint8))

    def latch(state):
        return state.replace(
            V=state.V.at[instruction.x].set(state.last_key),
            pc=state.pc - 2,
            waiting=jnp.asarray(WAIT_KEY_RELEASE, dtype=jnp.uint8),
        )

    def wait(state):
        waiting = jnp.where(latched, WAIT_KEY_RELEASE, WAIT_KEY_PRESS).astype(jnp.uint8)
        return state.replace(pc=state.pc - 2, waiting=waiting)

    index = jnp.select([latched & ~key_held, ~latched & key_held], [0, 1], default=2)
    return jax.lax.switch(index, [released, latch, wait], state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = (state.V[instruction.x] & 0xF).astype(jnp.uint16)
    return state.replace(I=(FONT_START + digit * FONT_GLYPH_SIZE).astype(jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I.astype(jnp.int32)
    new_memory = state.memory.at[indices].set(digits, mode="drop")
    return state.replace(memory=new_memory)


def _register_block(state: EmulatorState, instruction: DecodedInstruction):
    """Memory addresses of the V0..VX block and the mask selecting it."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    addresses = state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS)
    return addresses, register_mask


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return ((state.I + instruction.x.astype(jnp.uint16) + 1) & ADDRESS_MASK).astype(jnp.uint16)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    addresses, register_mask = _register_block(state, instruction)
    # Addresses outside the block point past the end of memory and are dropped
    targets = jnp.where(register_mask, addresses, MEMORY_SIZE)
    new_memory = state.memory.at[targets].set(state.V, mode="drop")
    return state.replace(memory=new_memory, I=_advance_index(state, instruction))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    addresses, register_mask = _register_block(state, instruction)
    memory_values = state.memory.at[addresses].get(mode="fill", fill_value=0)
    new_V = jnp.where(register_mask, memory_values, state.V)
    return state.replace(V=new_V, I=_advance_index(state, instruction))


MISC_OPERATIONS = [
    no_op,
    execute_get_delay_timer,
    execute_wait_for_key,
    execute_set_delay_timer,
    execute_set_sound_timer,
    execute_add_to_index,
    execute_font_character,
    execute_bcd_conversion,
    execute_store_registers,
    execute_load_registers,
]

# Low byte -> index into MISC_OPERATIONS, 0 for undefined patterns
MISC_TABLE = (
    jnp.zeros(256, dtype=jnp.int32)
    .at[0x07].set(1)
    .at[0x0A].set(2)
    .at[0x15].set(3)
    .at[0x18].set(4)
    .at[0x1E].set(5)
    .at[0x29].set(6)
    .at[0x33].set(7)
    .at[0x55].set(8)
    .at[0x65].set(9)
)


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions through the low byte table."""
    return jax.lax.switch(MISC_TABLE[instruction.nn], MISC_OPERATIONS, state, instruction)
