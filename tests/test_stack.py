"""Tests for the bounded call stack."""

import jax.numpy as jnp
from chip8vm import execute, tick, load_rom, Fault
from chip8vm.constants import STACK_SIZE
from chip8vm.stack import push, pop, is_empty, is_full
from conftest import program


class TestStackOperations:
    def test_push_pop_order(self, fresh_state):
        stack = push(fresh_state.stack, jnp.asarray(0x222, dtype=jnp.uint16))
        stack = push(stack, jnp.asarray(0x333, dtype=jnp.uint16))

        stack, first = pop(stack)
        stack, second = pop(stack)

        assert first == 0x333
        assert second == 0x222
        assert is_empty(stack)

    def test_push_on_full_stack_is_ignored(self, fresh_state):
        stack = fresh_state.stack
        for address in range(STACK_SIZE):
            stack = push(stack, jnp.asarray(0x200 + address, dtype=jnp.uint16))
        assert is_full(stack)

        overflowed = push(stack, jnp.asarray(0xFFF, dtype=jnp.uint16))
        assert overflowed.pointer == STACK_SIZE
        assert (overflowed.data == stack.data).all()

    def test_pop_on_empty_stack_is_ignored(self, fresh_state):
        stack, address = pop(fresh_state.stack)
        assert stack.pointer == 0
        assert address == 0


class TestStackFaults:
    def test_sixteen_nested_calls_fit(self, fresh_state):
        state = fresh_state
        for _ in range(STACK_SIZE):
            state = execute(state, 0x2300)
        assert state.stack.pointer == STACK_SIZE
        assert state.fault == Fault.NONE

    def test_seventeenth_call_overflows(self, fresh_state):
        state = fresh_state
        for _ in range(STACK_SIZE):
            state = execute(state, 0x2300)

        state = execute(state.replace(pc=jnp.asarray(0x400, dtype=jnp.uint16)), 0x2300)

        assert state.fault == Fault.STACK_OVERFLOW
        assert state.pc == 0x400
        assert state.stack.pointer == STACK_SIZE

    def test_recursive_rom_halts_on_overflow(self, fresh_state):
        state = load_rom(fresh_state, program(0x2200))
        for _ in range(STACK_SIZE + 5):
            state, idle = tick(state)
            assert not idle

        assert state.fault == Fault.STACK_OVERFLOW
        assert state.stack.pointer == STACK_SIZE
        # Halted right after the faulting fetch
        assert state.pc == 0x202

    def test_faulted_machine_does_not_execute(self, fresh_state):
        state = load_rom(fresh_state, program(0x00EE, 0x6001))
        state, _ = tick(state)
        assert state.fault == Fault.STACK_UNDERFLOW

        state, _ = tick(state)
        assert state.pc == 0x202
        assert state.V[0] == 0
