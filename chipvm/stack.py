"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipvm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack. The caller checks for a full stack."""
    new_data = stack.data.at[stack.pointer].set(jnp.asarray(address, dtype=jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack. The caller checks for an empty stack."""
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= stack.data.shape[0]


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer == 0
