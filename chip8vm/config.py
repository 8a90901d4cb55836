"""Host configuration for a CHIP-8 session."""

from typing import Optional

from flax.struct import dataclass, field

from chip8vm.constants import DEFAULT_CYCLES_PER_FRAME, FPS


@dataclass
class MachineConfig:
    """Settings the host uses to drive a machine.

    Attributes:
        cycles_per_frame: Instructions executed per rendered frame
        fps: Host frame rate, also the timer rate
        seed: Seed for the CXNN random source, None for a secure random seed
        log_level: Console logger threshold
        scale: Window/screenshot upscaling factor
        color_scheme: Rendering color scheme name
    """
    cycles_per_frame: int = field(pytree_node=False, default=DEFAULT_CYCLES_PER_FRAME)
    fps: int = field(pytree_node=False, default=FPS)
    seed: Optional[int] = field(pytree_node=False, default=None)
    log_level: str = field(pytree_node=False, default="INFO")
    scale: int = field(pytree_node=False, default=8)
    color_scheme: str = field(pytree_node=False, default="white")

    def __post_init__(self):
        if self.cycles_per_frame < 1:
            raise ValueError(f"cycles_per_frame must be positive, got {self.cycles_per_frame}")
        if self.fps < 1:
            raise ValueError(f"fps must be positive, got {self.fps}")
