"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Sequence

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np

from chipvm.state import EmulatorState, create_state
from chipvm.decode import decode
from chipvm.constants import MAX_ROM_SIZE, MEMORY_SIZE, NUM_KEYS, PROGRAM_START
from chipvm.errors import NoRomLoadedError, RomTooLargeError, CpuFault, raise_for_fault
from chipvm.faults import Fault, guard
from chipvm.logging import get_logger
from chipvm.instructions.system import execute_system_instruction, execute_unknown
from chipvm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chipvm.instructions.alu import execute_alu_operation
from chipvm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipvm.instructions.display import execute_display
from chipvm.instructions.misc import execute_misc_instruction


def _execute_skip_if_equal_register(state, instruction):
    """5XY0 - only a zero low nibble is defined."""
    return jax.lax.cond(
        instruction.n == 0,
        execute_skip_if_equal_register,
        execute_unknown,
        state, instruction
    )


def _execute_key_instruction(state, instruction):
    """EX9E / EXA1 - dispatch on the low byte."""
    index = jnp.where(instruction.nn == 0x9E, 0, jnp.where(instruction.nn == 0xA1, 1, 2))
    return jax.lax.switch(
        index,
        [execute_skip_if_key_pressed, execute_skip_if_key_not_pressed, execute_unknown],
        state, instruction
    )


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Faults are latched in the returned state rather than raised.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            _execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            _execute_key_instruction,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> jnp.ndarray:
    """Fetch the big-endian instruction word at the program counter."""
    pc = state.pc.astype(jnp.int32)
    return _pack_u16(
        state.memory.at[pc].get(mode="fill", fill_value=0),
        state.memory.at[pc + 1].get(mode="fill", fill_value=0),
    )


def _cycle(state: EmulatorState) -> EmulatorState:
    def run(state):
        return execute(state, fetch(state))

    return guard(
        state.pc.astype(jnp.int32) + 2 <= MEMORY_SIZE,
        run, state, Fault.MEMORY, 0
    )


@jax.jit
def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle. A faulted state is left as is."""
    return jax.lax.cond(state.fault == int(Fault.NONE), _cycle, lambda s: s, state)


def _scan_step(state, _):
    return step(state), None


@partial(jax.jit, static_argnums=1)
def _run_n_cycles(state: EmulatorState, n: int) -> EmulatorState:
    state, _ = jax.lax.scan(_scan_step, state, length=n)
    return state


def _raise_if_faulted(state: EmulatorState) -> EmulatorState:
    try:
        raise_for_fault(state)
    except CpuFault as error:
        get_logger().log_fault(error)
        raise
    return state


def execute_cycle(state: EmulatorState) -> EmulatorState:
    """Run one cycle and raise a ``CpuFault`` subclass if it faulted."""
    return _raise_if_faulted(step(state))


def run_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` cycles in one compiled loop.

    The loop stops executing at the first fault, which is then raised.
    """
    return _raise_if_faulted(_run_n_cycles(state, n))


def load_rom(state: EmulatorState, rom: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200.

    The image is cached on the state so ``reset`` can reload it.
    """
    rom = bytes(rom)
    if len(rom) > MAX_ROM_SIZE:
        get_logger().error(f"Rejected ROM of {len(rom)} bytes")
        raise RomTooLargeError(len(rom))
    rom_array = jnp.asarray(np.frombuffer(rom, dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom)].set(rom_array)
    get_logger().log_rom_loaded(len(rom))
    return state.replace(memory=new_memory, rom=rom)


def reset(state: EmulatorState) -> EmulatorState:
    """Return the just-loaded state for the cached ROM.

    Quirk configuration and the random key carry over.
    """
    if state.rom is None:
        raise NoRomLoadedError()
    get_logger().log_reset()
    fresh = create_state(state.rng, shift_quirk=state.shift_quirk)
    return load_rom(fresh, state.rom)


@jax.jit
def update_timers(state: EmulatorState) -> EmulatorState:
    """Decrement both timers by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def is_beeping(state: EmulatorState) -> jnp.ndarray:
    """True while the sound timer is nonzero."""
    return state.sound_timer > 0


def set_keypad(state: EmulatorState, keys: Sequence[bool]) -> EmulatorState:
    """Replace the 16 key flags. The interpreter never clears them."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key flags, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def acknowledge_draw(state: EmulatorState) -> EmulatorState:
    """Clear the redraw flag once the host has rendered the display."""
    return state.replace(draw=jnp.zeros((), dtype=jnp.bool_))
