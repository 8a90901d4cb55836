"""Immediate loads into VX and I, and the masked random byte (6XNN, 7XNN, ANNN, CXNN)."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction


def _write_vx(state: EmulatorState, instruction: DecodedInstruction, value) -> EmulatorState:
    return state.replace(V=state.V.at[instruction.x].set(jnp.asarray(value).astype(jnp.uint8)))


def draw_random_byte(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Draw one byte and return the state holding the advanced key.

    Bytes come from JAX's threefry generator. Only the initial key is taken
    from the OS secure source (see ``random_key``), the stream itself is not
    cryptographic.
    """
    key, subkey = jax.random.split(state.rng)
    return state.replace(rng=key), jax.random.bits(subkey, shape=(), dtype=jnp.uint8)


def execute_load_immediate(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN"""
    return _write_vx(state, instruction, instruction.nn)


def execute_add_immediate(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - wraps modulo 256, no carry into VF."""
    return _write_vx(state, instruction, state.V[instruction.x] + instruction.nn)


def execute_load_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN"""
    return state.replace(I=instruction.nnn.astype(jnp.uint16))


def execute_random_masked(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - VX = random byte & NN."""
    state, value = draw_random_byte(state)
    return _write_vx(state, instruction, value & instruction.nn)
