"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.errors import Fault
from chip8vm.stack import pop, is_empty


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """No operation."""
    return state


def set_fault(state: EmulatorState, fault: Fault) -> EmulatorState:
    return state.replace(fault=jnp.asarray(int(fault), dtype=jnp.uint8))


def execute_idle(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """0000 - Enter the idle state until the next reset or ROM load."""
    return state.replace(idle=jnp.asarray(True))


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def underflow(state):
        return set_fault(state, Fault.STACK_UNDERFLOW)

    def do_return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(is_empty(state.stack), underflow, do_return, state)


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions, 0NNN machine routines are ignored."""
    index = jnp.select(
        [instruction.raw == 0x0000, instruction.raw == 0x00E0, instruction.raw == 0x00EE],
        [1, 2, 3],
        default=0,
    )
    return jax.lax.switch(
        index,
        [no_op, execute_idle, execute_clear_screen, execute_return],
        state, instruction
    )
