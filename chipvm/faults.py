"""Fault latching for the compiled interpreter.

Compiled code cannot raise, so handlers report faults as values: the returned
state is the input state with ``fault`` and ``fault_instruction`` set. The
host-facing functions in ``chipvm.emulator`` turn a latched fault into an
exception (see ``chipvm.errors``).
"""

import enum
from typing import Callable

import jax
import jax.numpy as jnp

from chipvm.constants import MEMORY_SIZE
from chipvm.state import EmulatorState


class Fault(enum.IntEnum):
    NONE = 0
    UNKNOWN_INSTRUCTION = 1
    MEMORY = 2
    STACK_OVERFLOW = 3
    STACK_UNDERFLOW = 4


def with_fault(state: EmulatorState, fault: Fault, instruction) -> EmulatorState:
    """Latch ``fault`` for ``instruction`` without touching anything else."""
    return state.replace(
        fault=jnp.asarray(int(fault), dtype=jnp.uint8),
        fault_instruction=jnp.asarray(instruction, dtype=jnp.int32).astype(jnp.uint16),
    )


def guard(
    ok: jnp.ndarray,
    body: Callable[[EmulatorState], EmulatorState],
    state: EmulatorState,
    fault: Fault,
    instruction,
) -> EmulatorState:
    """Run ``body`` if ``ok`` holds, otherwise latch ``fault``."""
    return jax.lax.cond(
        ok,
        body,
        lambda s: with_fault(s, fault, instruction),
        state,
    )


def guard_memory(
    state: EmulatorState,
    start: jnp.ndarray,
    length,
    body: Callable[[EmulatorState], EmulatorState],
    instruction,
) -> EmulatorState:
    """Run ``body`` only if ``memory[start:start + length]`` is addressable."""
    end = jnp.asarray(start, dtype=jnp.int32) + jnp.asarray(length, dtype=jnp.int32)
    return guard(end <= MEMORY_SIZE, body, state, Fault.MEMORY, instruction)
