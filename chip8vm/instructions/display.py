"""CHIP-8 display operations."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, VF, WAIT_NONE, WAIT_VBLANK

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def draw_sprite(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Draw an 8xN sprite from memory at I, clipped at the screen edges."""
    sprite_x = (state.V[instruction.x] % SCREEN_WIDTH).astype(jnp.int32)
    sprite_y = (state.V[instruction.y] % SCREEN_HEIGHT).astype(jnp.int32)

    col_offset = xx - sprite_x
    row_offset = yy - sprite_y
    in_sprite = (col_offset >= 0) & (col_offset < 8) & (row_offset >= 0) & (row_offset < instruction.n)

    addresses = state.I.astype(jnp.int32) + jnp.clip(row_offset, 0, 15)
    sprite_bytes = state.memory.at[addresses].get(mode="fill", fill_value=0)
    shift = (7 - jnp.clip(col_offset, 0, 7)).astype(jnp.uint8)
    sprite = (((sprite_bytes >> shift) & 1) == 1) & in_sprite

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[VF].set(jnp.any(state.display & sprite).astype(jnp.uint8)),
        vblank=jnp.asarray(False),
        waiting=jnp.asarray(WAIT_NONE, dtype=jnp.uint8),
    )


def await_vblank(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Re-execute the draw on a later tick, once the host reopens the gate."""
    return state.replace(
        pc=state.pc - 2,
        waiting=jnp.asarray(WAIT_VBLANK, dtype=jnp.uint8),
    )


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, at most once per frame."""
    return jax.lax.cond(state.vblank, draw_sprite, await_vblank, state, instruction)
