"""Run a CHIP-8 program without a window and print the screen as text.

Usage: python examples/headless_run.py [rom.ch8]

Without a ROM argument a small built-in program draws the digits 0-F.
"""

import sys
import time

from chipvm import (
    create_state, load_rom, run_cycles, update_timers, is_beeping,
    acknowledge_draw, display_to_text, CpuFault,
)
from chipvm.logging import get_logger

# V0 = digit, V1 = x, V2 = y; draw each glyph then move right; halt by jumping to self.
DIGITS_PROGRAM = bytes([
    0x60, 0x00,  # 200: V0 = 0
    0x61, 0x01,  # 202: V1 = 1
    0x62, 0x01,  # 204: V2 = 1
    0xF0, 0x29,  # 206: I = font(V0)
    0xD1, 0x25,  # 208: draw 4x5 glyph at (V1, V2)
    0x71, 0x05,  # 20A: V1 += 5
    0x70, 0x01,  # 20C: V0 += 1
    0x31, 0x29,  # 20E: skip if V1 == 41 (row full)
    0x12, 0x06,  # 210: loop
    0x61, 0x01,  # 212: V1 = 1
    0x72, 0x07,  # 214: V2 += 7
    0x30, 0x10,  # 216: skip if V0 == 16
    0x12, 0x06,  # 218: loop
    0x12, 0x1C,  # 21A: (skipped)
    0x12, 0x1C,  # 21C: halt
])

CYCLES_PER_FRAME = 10
FRAMES = 60


def main(argv):
    rom = DIGITS_PROGRAM
    if len(argv) > 1:
        with open(argv[1], "rb") as f:
            rom = f.read()

    logger = get_logger()
    state = load_rom(create_state(), rom)

    start = time.time()
    for frame in range(FRAMES):
        try:
            state = run_cycles(state, CYCLES_PER_FRAME)
        except CpuFault as error:
            logger.log_state(error.state, level="ERROR")
            return 1
        state = update_timers(state)
        if is_beeping(state):
            logger.debug(f"Beep at frame {frame}")
    elapsed = time.time() - start

    if state.draw:
        print("\n".join(display_to_text(state.display)))
        state = acknowledge_draw(state)
    print(f"{FRAMES * CYCLES_PER_FRAME} cycles in {elapsed:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
