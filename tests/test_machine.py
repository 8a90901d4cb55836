"""Tests for the Chip8 host facade."""

import threading

import pytest
from chip8vm import Chip8, MachineConfig, StackOverflow, StackUnderflow, RomTooLarge, InvalidKey, Fault
from chip8vm.constants import MAX_ROM_SIZE
from conftest import program


class TestLifecycle:
    def test_reset_state(self, machine):
        assert machine.pc == 0x200
        assert machine.index == 0
        assert machine.registers == [0] * 16
        assert machine.stack == []
        assert machine.keys == [False] * 16
        assert machine.delay_timer == 0
        assert machine.sound_timer == 0
        assert not machine.idle
        assert machine.fault is Fault.NONE
        assert machine.display_rows() == [0] * 32

    def test_reset_discards_program_state(self, machine):
        machine.load_rom(program(0x6005, 0xA123))
        machine.tick()
        machine.tick()
        machine.key_down(4)

        machine.reset()

        assert machine.pc == 0x200
        assert machine.registers[0] == 0
        assert machine.index == 0
        assert machine.keys[4] is False
        assert machine.memory[0x200] == 0

    def test_memory_snapshot(self, machine):
        machine.load_rom(b"\xAB\xCD")
        memory = machine.memory
        assert len(memory) == 4096
        assert memory[0x200:0x202] == b"\xAB\xCD"
        assert memory[0x50] == 0xF0

    def test_load_rom_file(self, machine, tmp_path):
        rom_path = tmp_path / "pong.ch8"
        rom_path.write_bytes(program(0x6107))
        machine.load_rom_file(str(rom_path))
        machine.tick()
        assert machine.registers[1] == 7

    def test_rom_too_large(self, machine):
        with pytest.raises(RomTooLarge):
            machine.load_rom(bytes(MAX_ROM_SIZE + 1))


class TestExecution:
    def test_tick_returns_idle(self, machine):
        machine.load_rom(program(0x6005, 0x0000))
        assert machine.tick() is False
        assert machine.tick() is True
        assert machine.tick() is True

    def test_stack_introspection(self, machine):
        machine.load_rom(program(0x2204, 0x0000, 0x2208, 0x0000, 0x0000))
        machine.tick()
        machine.tick()
        assert machine.stack == [0x202, 0x206]

    def test_run_frame(self, machine):
        machine.load_rom(program(0x6003, 0xF015, 0xF018, 0x0000))
        assert machine.run_frame() is True
        assert machine.delay_timer == 2
        assert machine.sound_timer == 2
        assert machine.sound_active
        assert machine.stats.frames == 1

    def test_custom_cycle_budget(self):
        machine = Chip8(MachineConfig(cycles_per_frame=2, seed=0, log_level="CRITICAL"))
        machine.load_rom(program(0x7001, 0x1200))
        machine.run_frame()
        assert machine.registers[0] == 1


class TestFaults:
    def test_stack_underflow_raises(self, machine):
        machine.load_rom(program(0x00EE))
        with pytest.raises(StackUnderflow) as excinfo:
            machine.tick()
        assert excinfo.value.pc == 0x200
        assert machine.fault is Fault.STACK_UNDERFLOW

    def test_fault_persists_until_reset(self, machine):
        machine.load_rom(program(0x00EE))
        with pytest.raises(StackUnderflow):
            machine.tick()
        with pytest.raises(StackUnderflow):
            machine.tick()
        with pytest.raises(StackUnderflow) as excinfo:
            machine.run_frame()
        assert excinfo.value.pc == 0x200
        assert machine.pc == 0x202

        machine.reset()
        machine.load_rom(program(0x6001))
        assert machine.tick() is False

    def test_stack_overflow_from_run_frame(self, machine):
        machine.load_rom(program(0x2200))
        with pytest.raises(StackOverflow) as excinfo:
            machine.run_frame()
            machine.run_frame()
        assert excinfo.value.pc == 0x200
        assert len(machine.stack) == 16


class TestTimersAndInput:
    def test_timer_saturates(self, machine):
        machine.load_rom(program(0x6002, 0xF015))
        machine.tick()
        machine.tick()
        assert [machine.dec_delay_timer() for _ in range(4)] == [1, 0, 0, 0]

    def test_sound_timer(self, machine):
        assert machine.dec_sound_timer() == 0

    @pytest.mark.parametrize("key", [-1, 16, "a", 1.5, True])
    def test_invalid_key(self, machine, key):
        with pytest.raises(InvalidKey):
            machine.key_down(key)
        with pytest.raises(ValueError):
            machine.key_up(key)

    def test_key_wait_full_cycle(self, machine):
        machine.load_rom(program(0xF50A, 0x0000))

        for _ in range(3):
            machine.tick()
            assert machine.pc == 0x200

        machine.key_down(0xB)
        machine.tick()
        assert machine.registers[5] == 0xB
        assert machine.pc == 0x200

        machine.tick()
        assert machine.pc == 0x200

        machine.key_up(0xB)
        machine.tick()
        assert machine.pc == 0x202
        assert machine.tick() is True

    def test_draw_gate(self, machine):
        machine.load_rom(program(0xD011, 0xD011, 0x0000))
        machine.tick()
        for _ in range(3):
            machine.tick()
            assert machine.pc == 0x202
        machine.set_vblank()
        machine.tick()
        assert machine.pc == 0x204

    def test_key_events_from_another_thread(self, machine):
        def press_all():
            for key in range(16):
                machine.key_down(key)

        worker = threading.Thread(target=press_all)
        worker.start()
        worker.join()

        assert all(machine.keys)


class TestDisplay:
    def test_bitmap_shape_and_colors(self, machine):
        bitmap = machine.display_bitmap()
        assert bitmap.shape == (32, 64, 4)
        assert len(bitmap.tobytes()) == 64 * 32 * 4
        assert tuple(bitmap[0, 0]) == (0, 0, 0, 255)

    def test_bitmap_reflects_draw(self, machine):
        # I = font glyph for 0, draw 5 rows at (0, 0)
        machine.load_rom(program(0xA050, 0xD005))
        machine.tick()
        machine.tick()
        bitmap = machine.display_bitmap()
        assert tuple(bitmap[0, 0]) == (255, 255, 255, 255)
        assert tuple(bitmap[1, 1]) == (0, 0, 0, 255)
        assert machine.display_rows()[0] == 0xF0 << 56

    def test_bitmap_is_idempotent(self, machine):
        machine.load_rom(program(0xA050, 0xD005))
        machine.tick()
        machine.tick()
        first = machine.display_bitmap()
        second = machine.display_bitmap()
        assert (first == second).all()
        assert first is not second
