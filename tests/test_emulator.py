"""Tests for fetch, tick, ROM loading and the frame step."""

import jax
import jax.numpy as jnp
import pytest
from chip8vm import (
    create_state, fetch, tick, run_frame, load_rom, load_rom_file, display_rows,
    RomTooLarge, Fault, PROGRAM_START,
)
from chip8vm.constants import MAX_ROM_SIZE
from conftest import program


def run_ticks(state, count):
    for _ in range(count):
        state, _ = tick(state)
    return state


class TestReset:
    def test_initial_state(self, fresh_state):
        assert fresh_state.pc == 0x200
        assert int(fresh_state.V.sum()) == 0
        assert fresh_state.I == 0
        assert fresh_state.stack.pointer == 0
        assert fresh_state.delay_timer == 0
        assert fresh_state.sound_timer == 0
        assert not fresh_state.display.any()
        assert not fresh_state.keypad.any()
        assert fresh_state.vblank
        assert not fresh_state.idle
        assert fresh_state.fault == Fault.NONE

    def test_program_area_is_empty(self, fresh_state):
        assert int(fresh_state.memory[PROGRAM_START:].sum()) == 0
        assert int(fresh_state.memory[:0x50].sum()) == 0

    def test_default_key_is_random(self):
        first, second = create_state(), create_state()
        assert first.rng.shape == second.rng.shape


class TestFetch:
    def test_fetch_big_endian(self, fresh_state):
        state = load_rom(fresh_state, b"\x12\x34")
        state, instruction = fetch(state)
        assert instruction == 0x1234
        assert state.pc == 0x202

    def test_fetch_past_end_of_memory_reads_zero(self, fresh_state):
        state = fresh_state.replace(
            memory=fresh_state.memory.at[0xFFF].set(0xAB),
            pc=jnp.asarray(0xFFF, dtype=jnp.uint16),
        )
        state, instruction = fetch(state)
        assert instruction == 0xAB00


class TestTick:
    def test_clear_screen_advances_pc(self, fresh_state):
        state = load_rom(fresh_state, program(0x00E0))
        state, idle = tick(state)
        assert not idle
        assert state.pc == 0x202
        assert not state.display.any()

    def test_set_then_add(self, fresh_state):
        state = load_rom(fresh_state, program(0x6005, 0x7003))
        state = run_ticks(state, 2)
        assert state.V[0] == 0x08

    def test_add_with_carry(self, fresh_state):
        state = load_rom(fresh_state, program(0x8014))
        state = state.replace(V=state.V.at[0].set(0xFF).at[1].set(0x01))
        state, _ = tick(state)
        assert state.V[0] == 0x00
        assert state.V[15] == 1

    def test_unknown_opcode_only_advances_pc(self, fresh_state):
        state = load_rom(fresh_state, program(0x8128, 0x0ABC))
        after = run_ticks(state, 2)
        assert after.pc == 0x204
        assert (after.V == state.V).all()
        assert after.fault == Fault.NONE

    def test_idle_is_sticky(self, fresh_state):
        state = load_rom(fresh_state, program(0x6001, 0x0000, 0x6002))
        state = run_ticks(state, 2)
        assert state.idle

        for _ in range(3):
            state, idle = tick(state)
            assert idle
        assert state.pc == 0x204
        assert state.V[0] == 1

    def test_load_rom_clears_idle(self, fresh_state):
        state = load_rom(fresh_state, program(0x0000))
        state, idle = tick(state)
        assert idle
        state = load_rom(state, program(0x6001))
        assert not state.idle

    def test_subroutine_round_trip(self, fresh_state):
        # 200: call 206, 202: V0 += 1, 204: idle, 206: V0 = 5, 208: return
        state = load_rom(fresh_state, program(0x2206, 0x7001, 0x0000, 0x6005, 0x00EE))
        state = run_ticks(state, 5)
        assert state.idle
        assert state.V[0] == 6
        assert state.stack.pointer == 0

    def test_tick_is_jittable(self, fresh_state):
        state = load_rom(fresh_state, program(0x6005, 0x7003))
        jitted = jax.jit(tick)
        state, _ = jitted(state)
        state, _ = jitted(state)
        assert state.V[0] == 0x08


class TestDrawGateAcrossTicks:
    def test_second_draw_waits_for_vblank(self, fresh_state):
        state = load_rom(fresh_state, program(0xD011, 0xD011, 0x0000))
        state, _ = tick(state)
        assert state.pc == 0x202

        for _ in range(4):
            state, _ = tick(state)
            assert state.pc == 0x202

        state = state.replace(vblank=jnp.asarray(True))
        state, _ = tick(state)
        assert state.pc == 0x204
        assert not state.vblank


class TestLoadRom:
    def test_rom_copied_to_program_start(self, fresh_state):
        state = load_rom(fresh_state, b"\x01\x02\x03")
        assert [int(b) for b in state.memory[0x200:0x204]] == [1, 2, 3, 0]

    def test_font_untouched(self, fresh_state):
        state = load_rom(fresh_state, b"\xFF" * 16)
        assert (state.memory[:0x200] == fresh_state.memory[:0x200]).all()

    def test_largest_rom_fits(self, fresh_state):
        state = load_rom(fresh_state, b"\x01" * MAX_ROM_SIZE)
        assert state.memory[0xFFF] == 1

    def test_rom_too_large(self, fresh_state):
        with pytest.raises(RomTooLarge) as excinfo:
            load_rom(fresh_state, b"\x00" * (MAX_ROM_SIZE + 1))
        assert excinfo.value.size == MAX_ROM_SIZE + 1
        assert excinfo.value.limit == 4096 - 0x200

    def test_load_rom_file(self, fresh_state, tmp_path):
        rom_path = tmp_path / "test.ch8"
        rom_path.write_bytes(program(0x6005))
        state = load_rom_file(fresh_state, str(rom_path))
        assert state.memory[0x200] == 0x60
        assert state.memory[0x201] == 0x05


class TestRunFrame:
    def test_runs_budget_then_timers_and_vblank(self, fresh_state):
        # 200: V0 = 3, 202: DT = V0, 204: V1 += 1, 206: jump 204
        state = load_rom(fresh_state, program(0x6003, 0xF015, 0x7101, 0x1204))
        state = state.replace(vblank=jnp.asarray(False))

        state = run_frame(state, 10)

        assert state.delay_timer == 2
        assert state.V[1] == 4
        assert state.vblank

    def test_frame_limits_draws(self, fresh_state):
        # Draw twice, then idle
        state = load_rom(fresh_state, program(0xD011, 0xD011, 0x0000))

        state = run_frame(state, 10)
        assert state.pc == 0x202
        assert not state.idle

        state = run_frame(state, 10)
        assert state.idle

    def test_idle_machine_only_counts_down(self, fresh_state):
        state = load_rom(fresh_state, program(0x0000))
        state = state.replace(sound_timer=jnp.asarray(2, dtype=jnp.uint8))

        state = run_frame(state, 5)
        state = run_frame(state, 5)
        state = run_frame(state, 5)

        assert state.pc == 0x202
        assert state.sound_timer == 0


class TestDisplayRows:
    def test_row_bitmasks_msb_is_leftmost(self, fresh_state):
        display = fresh_state.display.at[0, 0].set(True).at[63, 31].set(True)
        rows = display_rows(fresh_state.replace(display=display))
        assert len(rows) == 32
        assert rows[0] == 1 << 63
        assert rows[31] == 1
        assert all(row == 0 for row in rows[1:31])
