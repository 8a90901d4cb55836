"""CHIP-8 ALU operations (8xxx).

Every operation takes ``(vx, vy)`` and returns ``(result, flag)``. The
flag is only written to VF for operations marked in ``FLAG_OPERATIONS``,
after the result, so ``8FYN`` leaves the flag in VF.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.constants import VF
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction

_ZERO = jnp.zeros((), dtype=jnp.uint8)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, _ZERO


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY, VF = 0."""
    return vx | vy, _ZERO


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY, VF = 0."""
    return vx & vy, _ZERO


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY, VF = 0."""
    return vx ^ vy, _ZERO


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    carry = (vx.astype(jnp.uint16) + vy.astype(jnp.uint16)) > 0xFF
    return vx + vy, carry.astype(jnp.uint8)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = 1 when VX > VY."""
    return vx - vy, (vx > vy).astype(jnp.uint8)


def alu_shift_right(vx, vy):
    """8XY6 - VX = VY >> 1, VF = shifted out bit."""
    return vy >> 1, vy & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when VY > VX."""
    return vy - vx, (vy > vx).astype(jnp.uint8)


def alu_shift_left(vx, vy):
    """8XYE - VX = VY << 1, VF = shifted out bit."""
    return vy << 1, vy >> 7


def alu_undefined(vx, vy):
    """Undefined ALU operation."""
    return vx, _ZERO


ALU_OPERATIONS = [
    alu_set, alu_or, alu_and, alu_xor, alu_add, alu_sub_xy, alu_shift_right, alu_sub_yx,
    alu_undefined, alu_undefined, alu_undefined, alu_undefined,
    alu_undefined, alu_undefined, alu_shift_left, alu_undefined,
]

FLAG_OPERATIONS = jnp.array(
    [0, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=jnp.bool_
)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]

    result, flag = jax.lax.switch(instruction.n, ALU_OPERATIONS, vx, vy)

    new_V = state.V.at[instruction.x].set(result)
    new_V = new_V.at[VF].set(jnp.where(FLAG_OPERATIONS[instruction.n], flag, new_V[VF]))
    return state.replace(V=new_V)
