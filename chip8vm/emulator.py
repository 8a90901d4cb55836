"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import decode
from chip8vm.constants import PROGRAM_START, MAX_ROM_SIZE
from chip8vm.errors import Fault, RomTooLarge
from chip8vm.peripherals import dec_delay_timer, dec_sound_timer, set_vblank
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_key_instruction
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import (
    execute_load_immediate, execute_add_immediate, execute_load_index, execute_random_masked
)
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction


INSTRUCTION_FAMILIES = [
    execute_system_instruction,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_load_immediate,
    execute_add_immediate,
    execute_alu_operation,
    execute_skip_if_not_equal_register,
    execute_load_index,
    execute_jump_with_offset,
    execute_random_masked,
    execute_display,
    execute_key_instruction,
    execute_misc_instruction,
]


def execute(state: EmulatorState, instruction) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.opcode, INSTRUCTION_FAMILIES, state, decoded_instruction)


def _pack_u16(high: jnp.ndarray, low: jnp.ndarray) -> jnp.ndarray:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Fetch next instruction from memory, reading past the end yields zeros."""
    pc = state.pc.astype(jnp.int32)
    high = state.memory.at[pc].get(mode="fill", fill_value=0)
    low = state.memory.at[pc + 1].get(mode="fill", fill_value=0)
    return state.replace(pc=state.pc + 2), _pack_u16(high, low)


def is_halted(state: EmulatorState) -> jnp.ndarray:
    return state.idle | (state.fault != int(Fault.NONE))


def step(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return execute(state, instruction)


def tick(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Run one fetch-decode-execute cycle, returning the state and its idle flag.

    Idle and faulted machines are left untouched.
    """
    state = jax.lax.cond(is_halted(state), lambda s: s, step, state)
    return state, state.idle


@partial(jax.jit, static_argnums=1)
def run_frame(state: EmulatorState, cycles_per_frame: int) -> EmulatorState:
    """Run one host frame: the instruction budget, one timer step and a VSync."""
    def run_instruction(_, state):
        state, _ = tick(state)
        return state

    state = jax.lax.fori_loop(0, cycles_per_frame, run_instruction, state)
    state, _ = dec_delay_timer(state)
    state, _ = dec_sound_timer(state)
    return set_vblank(state)


def load_rom(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    rom_data = bytes(rom_data)
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLarge(len(rom_data), MAX_ROM_SIZE)
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory, idle=jnp.asarray(False))


def load_rom_file(state: EmulatorState, filename: str) -> EmulatorState:
    """Load a raw ``.ch8`` file into memory."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom(state, rom_data)
