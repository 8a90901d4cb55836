"""
Interactive CHIP-8 host: window, keyboard and 60 Hz frame loop
"""

import argparse
import sys

import pygame

from chip8vm import Chip8, Chip8Error, MachineConfig, disassemble, save_screenshot
from chip8vm.constants import KEYBOARD_LAYOUT, SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme

KEY_MAP = {pygame.key.key_code(name): key for name, key in KEYBOARD_LAYOUT.items()}


def parse_args(argv=None):
    defaults = MachineConfig()
    parser = argparse.ArgumentParser(description="Run a CHIP-8 ROM")
    parser.add_argument("rom", help="Path to a raw .ch8 ROM")
    parser.add_argument("--cycles", type=int, default=defaults.cycles_per_frame,
                        help="Instructions executed per frame")
    parser.add_argument("--fps", type=int, default=defaults.fps, help="Frames (and timer steps) per second")
    parser.add_argument("--scale", type=int, default=defaults.scale, help="Pixel upscaling factor")
    parser.add_argument("--scheme", default=defaults.color_scheme, help="Color scheme name")
    parser.add_argument("--seed", type=int, default=None, help="Fixed seed for the random instruction")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--disassemble", action="store_true", help="Print the ROM listing and exit")
    parser.add_argument("--screenshot", metavar="PATH", help="Run headless and save the final display")
    parser.add_argument("--frames", type=int, default=60, help="Frames to run with --screenshot")
    return parser.parse_args(argv)


def print_listing(rom_filename):
    with open(rom_filename, 'rb') as f:
        rom_data = f.read()
    for address, opcode, text in disassemble(rom_data):
        print(f"{address:03X}  {opcode:04X}  {text}")


def run_headless(machine: Chip8, frames: int, filename: str):
    for _ in range(frames):
        if machine.run_frame():
            break
    save_screenshot(machine.state, filename, machine.config.scale, machine.config.color_scheme)
    machine.logger.info(f"Saved display to {filename}")


def run_window(machine: Chip8, rom_filename: str):
    """Main emulator loop, one machine frame per display frame"""
    config = machine.config
    on_color, off_color = create_color_scheme(config.color_scheme)

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * config.scale, SCREEN_HEIGHT * config.scale))
    pygame.display.set_caption(f"chip8vm - {rom_filename}")
    clock = pygame.time.Clock()

    machine.logger.info("Controls: ESC=Quit, F5=Reset, P=Pause")
    running = True
    paused = False

    while running:
        clock.tick(config.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F5:
                    machine.reset()
                    machine.load_rom_file(rom_filename)
                    paused = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key in KEY_MAP:
                    machine.key_down(KEY_MAP[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    machine.key_up(KEY_MAP[event.key])

        if not paused:
            try:
                machine.run_frame()
            except Chip8Error:
                # Already logged by the machine, wait for a reset
                paused = True

        frame = chip8_display_to_rgb(machine.state.display, config.scale, on_color, off_color)
        surface = pygame.surfarray.make_surface(frame.transpose(1, 0, 2))
        screen.blit(surface, (0, 0))
        pygame.display.flip()

    machine.logger.log_session_end(machine.stats)
    pygame.quit()


def main(argv=None):
    args = parse_args(argv)

    if args.disassemble:
        print_listing(args.rom)
        return 0

    config = MachineConfig(
        cycles_per_frame=args.cycles,
        fps=args.fps,
        seed=args.seed,
        log_level=args.log_level,
        scale=args.scale,
        color_scheme=args.scheme,
    )
    machine = Chip8(config)

    try:
        machine.load_rom_file(args.rom)
    except (OSError, Chip8Error) as e:
        machine.logger.error(f"Could not load {args.rom}: {e}")
        return 1

    if args.screenshot:
        run_headless(machine, args.frames, args.screenshot)
    else:
        run_window(machine, args.rom)
    return 0


if __name__ == "__main__":
    sys.exit(main())
