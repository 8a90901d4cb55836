"""CHIP-8 stack operations.

The stack holds at most ``STACK_SIZE`` return addresses. Callers check
``is_full``/``is_empty`` first; pushing onto a full stack or popping an
empty one leaves it unchanged.
"""

import jax.numpy as jnp
from chip8vm.constants import ADDRESS_MASK, STACK_SIZE
from chip8vm.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer == 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    masked_address = (address & ADDRESS_MASK).astype(jnp.uint16)
    full = is_full(stack)
    new_data = stack.data.at[stack.pointer].set(masked_address, mode="drop")
    return stack.replace(
        data=jnp.where(full, stack.data, new_data),
        pointer=jnp.where(full, stack.pointer, stack.pointer + 1).astype(jnp.uint8),
    )


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    empty = is_empty(stack)
    new_pointer = jnp.where(empty, stack.pointer, stack.pointer - 1).astype(jnp.uint8)
    popped_address = jnp.where(empty, jnp.zeros((), jnp.uint16), stack.data[new_pointer])
    new_data = jnp.where(empty, stack.data, stack.data.at[new_pointer].set(0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address.astype(jnp.uint16)
