"""Test configuration and fixtures for CHIP-8 emulator tests."""

import jax
import pytest
import jax.numpy as jnp
from chip8vm import create_state, Chip8, MachineConfig


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state with a fixed random key."""
    return create_state(jax.random.PRNGKey(0))


@pytest.fixture
def machine():
    """Provide a host machine with a fixed seed and quiet logging."""
    return Chip8(MachineConfig(seed=0, log_level="CRITICAL"))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def program(*words):
    """Assemble 16-bit instruction words into ROM bytes."""
    return b"".join(word.to_bytes(2, "big") for word in words)
