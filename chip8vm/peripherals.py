"""Host-driven peripherals: countdown timers, the VSync gate and the keypad."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState


def _decrement(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(timer > 0, timer - 1, timer).astype(jnp.uint8)


def dec_delay_timer(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Decrement the delay timer if positive, returning its new value."""
    value = _decrement(state.delay_timer)
    return state.replace(delay_timer=value), value


def dec_sound_timer(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    """Decrement the sound timer if positive, returning its new value."""
    value = _decrement(state.sound_timer)
    return state.replace(sound_timer=value), value


def set_vblank(state: EmulatorState) -> EmulatorState:
    """Reopen the draw gate for the next frame."""
    return state.replace(vblank=jnp.asarray(True))


def key_down(state: EmulatorState, key) -> EmulatorState:
    """Press ``key``; only the low nibble selects the key."""
    key = jnp.asarray(key).astype(jnp.uint8) & 0xF
    return state.replace(keypad=state.keypad.at[key].set(True), last_key=key)


def key_up(state: EmulatorState, key) -> EmulatorState:
    key = jnp.asarray(key).astype(jnp.uint8) & 0xF
    return state.replace(keypad=state.keypad.at[key].set(False))
