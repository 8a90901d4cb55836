"""Console logging utilities for chip8vm hosts.

Provides a small colored console logger and a machine-specific logger
that reports ROM loads, resets, faults and per-frame machine state.
"""

import time
import sys
from typing import Any, Dict, Optional

import numpy as np


class ConsoleLogger:
    """Flexible console logger with level filtering and colors."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class FrameStats:
    """Running frame and instruction throughput counters."""

    def __init__(self):
        self.frames = 0
        self.instructions = 0
        self.start_time = time.time()
        self._window_start = self.start_time
        self._window_frames = 0
        self.fps = 0.0

    def record_frame(self, instructions: int):
        self.frames += 1
        self.instructions += instructions
        self._window_frames += 1

        now = time.time()
        if now - self._window_start >= 1.0:
            self.fps = self._window_frames / (now - self._window_start)
            self._window_start = now
            self._window_frames = 0

    @property
    def instructions_per_second(self) -> float:
        elapsed = time.time() - self.start_time
        return self.instructions / elapsed if elapsed > 0 else 0.0

    def summary(self) -> Dict[str, Any]:
        return {
            "frames": self.frames,
            "instructions": self.instructions,
            "elapsed": time.time() - self.start_time,
            "ips": self.instructions_per_second,
        }


class MachineLogger(ConsoleLogger):
    """Logger for machine lifecycle events and frame-level state."""

    def __init__(self, name: str = "chip8vm", **kwargs):
        super().__init__(name, **kwargs)

    def log_rom_loaded(self, size: int, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded {size} byte ROM{origin} at 0x200")

    def log_reset(self):
        self.info("Machine reset")

    def log_fault(self, error: Exception):
        self.error(str(error))

    def log_frame(self, frame: int, state):
        """Log program counter, index, timers and registers at DEBUG level."""
        if not self._should_log("DEBUG"):
            return
        registers = " ".join(f"{v:02X}" for v in np.asarray(state.V).tolist())
        self.debug(
            f"Frame {frame:6d} PC=0x{int(state.pc):03X} I=0x{int(state.I):03X} "
            f"DT={int(state.delay_timer):3d} ST={int(state.sound_timer):3d} V=[{registers}]"
        )

    def log_session_end(self, stats: FrameStats):
        summary = stats.summary()
        self.info("=" * 60)
        self.info(f"Session ended after {summary['elapsed']:.1f}s")
        self.info(f"  frames: {summary['frames']}")
        self.info(f"  instructions: {summary['instructions']}")
        self.info(f"  instructions/s: {summary['ips']:.0f}")
        self.info("=" * 60)
