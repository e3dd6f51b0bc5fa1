"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.numpy as jnp
from chipvm.state import EmulatorState, advance
from chipvm.decode import DecodedInstruction
from chipvm.faults import Fault, guard, with_fault
from chipvm.stack import is_empty, pop


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unrecognised instruction word."""
    return with_fault(state, Fault.UNKNOWN_INSTRUCTION, instruction.raw)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    state = state.replace(
        display=jnp.zeros_like(state.display),
        draw=jnp.ones((), dtype=jnp.bool_),
    )
    return advance(state)


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine to the instruction after the call."""
    def _return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address + jnp.asarray(2, dtype=jnp.uint16))

    return guard(~is_empty(state.stack), _return, state, Fault.STACK_UNDERFLOW, instruction.raw)


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions on the low byte."""
    index = jnp.where(instruction.nn == 0xE0, 0, jnp.where(instruction.nn == 0xEE, 1, 2))
    return jax.lax.switch(
        index,
        [execute_clear_screen, execute_return, execute_unknown],
        state, instruction
    )
