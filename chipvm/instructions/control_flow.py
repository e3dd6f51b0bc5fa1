"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chipvm.state import EmulatorState, advance
from chipvm.decode import DecodedInstruction
from chipvm.constants import NUM_KEYS
from chipvm.faults import Fault, guard
from chipvm.stack import is_full, push


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN.

    The address of the call itself is pushed; 00EE resumes two bytes later.
    """
    def _call(state):
        state = state.replace(stack=push(state.stack, state.pc))
        return execute_jump(state, instruction)

    return guard(~is_full(state.stack), _call, state, Fault.STACK_OVERFLOW, instruction.raw)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions: pc += 4 when the condition holds, else 2."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return advance(state, jnp.where(condition, 4, 2))
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0. The sum is not masked."""
    jump_address = instruction.nnn + jnp.astype(state.V[0], jnp.int32)
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def _key_pressed(state: EmulatorState, inst: DecodedInstruction) -> jnp.ndarray:
    return state.keypad[jnp.astype(state.V[inst.x], jnp.int32) % NUM_KEYS]


execute_skip_if_key_pressed = make_skip_instruction(_key_pressed)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~_key_pressed(state, inst)
)
