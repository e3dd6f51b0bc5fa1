"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import EmulatorState, advance
from chipvm.decode import DecodedInstruction
from chipvm.constants import ADDRESS_MASK, ADDRESS_SPACE, FLAG_REGISTER, FONT_GLYPH_SIZE, FONT_START, NUM_REGISTERS
from chipvm.faults import guard_memory
from chipvm.instructions.system import execute_unknown


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    state = state.replace(V=state.V.at[instruction.x].set(state.delay_timer))
    return advance(state)


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return advance(state.replace(delay_timer=state.V[instruction.x]))


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return advance(state.replace(sound_timer=state.V[instruction.x]))


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I, VF = 1 if the sum leaves the 12-bit address space."""
    total = jnp.astype(state.I, jnp.int32) + jnp.astype(state.V[instruction.x], jnp.int32)
    overflow_flag = jnp.astype(total > ADDRESS_MASK, jnp.uint8)
    state = state.replace(
        I=jnp.astype(total % ADDRESS_SPACE, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(overflow_flag)
    )
    return advance(state)


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Without a pressed key the program counter stays put, so the same
    instruction runs again on the next cycle.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return advance(state.replace(V=state.V.at[instruction.x].set(pressed_key)))

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, lambda s: s, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_GLYPH_SIZE
    return advance(state.replace(I=jnp.astype(font_address, jnp.uint16)))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = jnp.astype(state.V[instruction.x], jnp.int32)
    digits = jnp.astype(jnp.stack([value // 100, (value // 10) % 10, value % 10]), jnp.uint8)

    def _store(state):
        indices = jnp.astype(state.I, jnp.int32) + jnp.arange(3)
        return advance(state.replace(memory=state.memory.at[indices].set(digits)))

    return guard_memory(state, state.I, 3, _store, instruction.raw)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I. I is not modified."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x

    def _store(state):
        # Registers past X are routed out of bounds and dropped.
        indices = jnp.where(
            register_mask,
            jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS),
            state.memory.shape[0],
        )
        return advance(state.replace(memory=state.memory.at[indices].set(state.V, mode="drop")))

    return guard_memory(state, state.I, instruction.x + 1, _store, instruction.raw)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I. I is not modified."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x

    def _load(state):
        indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
        memory_values = state.memory.at[indices].get(mode="fill", fill_value=0)
        return advance(state.replace(V=jnp.where(register_mask, memory_values, state.V)))

    return guard_memory(state, state.I, instruction.x + 1, _load, instruction.raw)


_MISC_HANDLERS = [
    (0x07, execute_get_delay_timer),
    (0x0A, execute_wait_for_key),
    (0x15, execute_set_delay_timer),
    (0x18, execute_set_sound_timer),
    (0x1E, execute_add_to_index),
    (0x29, execute_font_character),
    (0x33, execute_bcd_conversion),
    (0x55, execute_store_registers),
    (0x65, execute_load_registers),
]

# Low byte -> branch index; anything unlisted lands on execute_unknown.
_MISC_BRANCH = jnp.full(256, len(_MISC_HANDLERS), dtype=jnp.int32)
for _branch, (_low_byte, _) in enumerate(_MISC_HANDLERS):
    _MISC_BRANCH = _MISC_BRANCH.at[_low_byte].set(_branch)


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions on the low byte."""
    return jax.lax.switch(
        _MISC_BRANCH[instruction.nn],
        [handler for _, handler in _MISC_HANDLERS] + [execute_unknown],
        state, instruction
    )
