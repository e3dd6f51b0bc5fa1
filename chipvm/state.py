"""CHIP-8 emulator state structures."""

import enum
from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode, field

from chipvm.constants import (
    FONT_DATA, FONT_START, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START,
    SCREEN_HEIGHT, SCREEN_WIDTH, STACK_SIZE,
)


class ShiftQuirk(enum.Enum):
    """Behaviour of the 8XY6 / 8XYE shift instructions.

    ``ORIGINAL`` shifts VY into VX, as the COSMAC VIP interpreter did.
    ``REVISED`` shifts VX in place and ignores VY, which is what most
    programs written after the HP-48 ports expect.
    """
    ORIGINAL = "original"
    REVISED = "revised"


class StackState(PyTreeNode):
    """Return address stack for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The state is immutable: every instruction returns a new instance. ``draw``
    is raised by the interpreter whenever a pixel is lit and is only lowered by
    the host (see ``acknowledge_draw``). ``fault`` latches the first fault hit
    by a cycle; a faulted state no longer executes instructions.
    """
    rng: jnp.ndarray = field(default_factory=lambda: jax.random.PRNGKey(0))
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    draw: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    fault_instruction: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    shift_quirk: ShiftQuirk = field(pytree_node=False, default=ShiftQuirk.REVISED)
    rom: Optional[bytes] = field(pytree_node=False, default=None)


def create_state(
    rng: jax.random.PRNGKey = None,
    shift_quirk: ShiftQuirk = ShiftQuirk.REVISED,
) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if rng is None:
        rng = jax.random.PRNGKey(0)
    state = EmulatorState(rng=rng, shift_quirk=shift_quirk)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def advance(state: EmulatorState, amount=2) -> EmulatorState:
    """Move the program counter forward by ``amount`` bytes."""
    return state.replace(pc=state.pc + jnp.asarray(amount, dtype=jnp.uint16))
