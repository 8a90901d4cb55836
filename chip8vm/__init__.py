"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, create_state, reset, display_rows
from chip8vm.emulator import execute, fetch, tick, run_frame, load_rom, load_rom_file
from chip8vm.decode import DecodedInstruction, decode
from chip8vm.peripherals import dec_delay_timer, dec_sound_timer, set_vblank, key_down, key_up
from chip8vm.constants import *
from chip8vm.errors import Fault, Chip8Error, StackOverflow, StackUnderflow, RomTooLarge, InvalidKey
from chip8vm.rendering import display_bitmap, chip8_display_to_rgb, create_color_scheme, save_screenshot
from chip8vm.disassemble import mnemonic, disassemble, rom_listing
from chip8vm.config import MachineConfig
from chip8vm.machine import Chip8

__all__ = [
    "EmulatorState",
    "create_state",
    "reset",
    "display_rows",
    "fetch",
    "execute",
    "tick",
    "run_frame",
    "load_rom",
    "load_rom_file",
    "DecodedInstruction",
    "decode",
    "dec_delay_timer",
    "dec_sound_timer",
    "set_vblank",
    "key_down",
    "key_up",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "Fault",
    "Chip8Error",
    "StackOverflow",
    "StackUnderflow",
    "RomTooLarge",
    "InvalidKey",
    "display_bitmap",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "save_screenshot",
    "mnemonic",
    "disassemble",
    "rom_listing",
    "MachineConfig",
    "Chip8",
]
