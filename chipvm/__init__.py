"""CHIP-8 interpreter package."""

from chipvm.state import EmulatorState, ShiftQuirk, create_state
from chipvm.emulator import (
    execute, fetch, step, execute_cycle, run_cycles, load_rom, reset,
    update_timers, is_beeping, set_keypad, acknowledge_draw,
)
from chipvm.decode import DecodedInstruction, decode
from chipvm.faults import Fault
from chipvm.errors import (
    Chip8Error, RomTooLargeError, NoRomLoadedError, CpuFault,
    UnknownInstructionError, MemoryFaultError, StackOverflowError, StackUnderflowError,
)
from chipvm.constants import *
from chipvm.rendering import display_to_rgb, display_to_text, create_color_scheme

__all__ = [
    "EmulatorState",
    "ShiftQuirk",
    "create_state",
    "fetch",
    "execute",
    "step",
    "execute_cycle",
    "run_cycles",
    "load_rom",
    "reset",
    "update_timers",
    "is_beeping",
    "set_keypad",
    "acknowledge_draw",
    "DecodedInstruction",
    "decode",
    "Fault",
    "Chip8Error",
    "RomTooLargeError",
    "NoRomLoadedError",
    "CpuFault",
    "UnknownInstructionError",
    "MemoryFaultError",
    "StackOverflowError",
    "StackUnderflowError",
    "PROGRAM_START",
    "FONT_START",
    "MAX_ROM_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_to_rgb",
    "display_to_text",
    "create_color_scheme",
]
